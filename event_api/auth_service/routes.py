"""
Authentication route handlers.

Provides routes for:
- User login (POST /auth)

Credential checks are delegated to `auth_service.service.AuthService`; the
shared-token guard for other routes lives in `auth_service.utils`.
"""

import logging
from typing import Tuple

from flask import Blueprint, Response, current_app, jsonify, request

from event_api.auth_service.service import AuthService
from event_api.errors import ApiError, error_response
from event_api.validators import json_object

auth_bp = Blueprint("auth", __name__)


def get_auth_service() -> AuthService:
    return current_app.extensions["auth_service"]


# --- REQUEST LOGGING ---
@auth_bp.before_request
def before_request() -> None:
    """
    Log every incoming request method and path.
    Headers are left out: Authorization carries the shared token.
    """
    logging.info(f"[Auth] Incoming {request.method} {request.path}")


@auth_bp.after_request
def after_request(response: Response) -> Response:
    """
    Log the response status code for every request.

    Args:
        response (Response): The Flask response object.

    Returns:
        Response: The passed-through response object.
    """
    logging.info(f"[Auth] Response {response.status}")
    return response


@auth_bp.errorhandler(ApiError)
def handle_auth_error(error: ApiError) -> Tuple[Response, int]:
    return error_response(error, authorized=False)


# --- LOGIN ---
@auth_bp.route("", methods=["POST"])
def login() -> Tuple[Response, int]:
    """
    Authenticate a user and return the shared token.

    Expects a JSON body with:
    - email (str)
    - password (str)

    Returns:
        200: JSON with authorized=true, the token and the user profile.
        400: Missing credentials or malformed email.
        401: Invalid credentials (wrong password or unknown email).
        500: Database error.
    """
    data = json_object(request.get_json(silent=True))
    result = get_auth_service().authenticate(data.get("email"), data.get("password"))

    return jsonify({
        "success": True,
        "message": "User authenticated successfully",
        "authorized": True,
        "token": result["token"],
        "data": result["user"],
    }), 200
