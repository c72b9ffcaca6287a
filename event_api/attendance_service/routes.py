"""
Attendance route handlers: confirm attendance for an enrollment.
"""

import logging
from typing import Tuple

from flask import Blueprint, Response, current_app, jsonify, request

from event_api.attendance_service.service import AttendanceService
from event_api.errors import ApiError, error_response
from event_api.validators import json_object

attendance_bp = Blueprint("attendance", __name__)


def get_attendance_service() -> AttendanceService:
    return current_app.extensions["attendance_service"]


@attendance_bp.before_request
def before_request() -> None:
    logging.info(f"[Attendance] Incoming {request.method} {request.path}")


@attendance_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Attendance] Response {response.status}")
    return response


@attendance_bp.errorhandler(ApiError)
def handle_attendance_error(error: ApiError) -> Tuple[Response, int]:
    return error_response(error, confirmed=False)


@attendance_bp.route("", methods=["POST"])
def confirm_attendance() -> Tuple[Response, int]:
    """
    Confirm attendance for an enrollment.

    Expects JSON:
        { "enrollment_id": int }

    Returns:
        200: Attendance record with confirmed=true.
        400: enrollment_id missing or not a positive integer.
        404: Enrollment not found.
        409: Attendance already confirmed.
        500: Database error.
    """
    data = json_object(request.get_json(silent=True))
    attendance = get_attendance_service().confirm(data.get("enrollment_id"))

    return jsonify({
        "success": True,
        "message": "Attendance confirmed successfully",
        "confirmed": True,
        "data": attendance,
    }), 200
