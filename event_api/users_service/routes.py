"""
User route handlers.

Provides routes for:
- User registration (POST /users)
- Partial profile update (PUT /users/<id>)

Validation and persistence live in `users_service.service.UserService`.
"""

import logging
from typing import Tuple

from flask import Blueprint, Response, current_app, jsonify, request

from event_api.users_service.service import UserService
from event_api.validators import json_object

users_bp = Blueprint("users", __name__)


def get_user_service() -> UserService:
    return current_app.extensions["user_service"]


# --- REQUEST LOGGING ---
@users_bp.before_request
def before_request() -> None:
    logging.info(f"[Users] Incoming {request.method} {request.path}")


@users_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Users] Response {response.status}")
    return response


# --- REGISTER ---
@users_bp.route("", methods=["POST"])
def create_user() -> Tuple[Response, int]:
    """
    Register a new user.

    Expects a JSON body with:
    - name (str)
    - email (str): Unique, valid address.
    - cpf (str): 11 digits, punctuation allowed.
    - date_of_birth (str): YYYY-MM-DD.
    - password (str): Minimum 6 characters.
    - city (str, optional)

    Returns:
        201: The created user (never includes the password hash).
        400: Missing or invalid fields.
        409: Email or CPF already registered.
        500: Database or hashing error.
    """
    user = get_user_service().create(json_object(request.get_json(silent=True)))
    return jsonify({
        "success": True,
        "message": "User created successfully",
        "data": user,
    }), 201


# --- UPDATE ---
@users_bp.route("/<int:user_id>", methods=["PUT"])
def update_user(user_id: int) -> Tuple[Response, int]:
    """
    Update any subset of name, email, cpf, date_of_birth, password, city.

    Returns:
        200: The updated user.
        400: No field provided, or an invalid field.
        404: User not found.
        409: Email or CPF belongs to another user.
        500: Database or hashing error.
    """
    user = get_user_service().update(user_id, json_object(request.get_json(silent=True)))
    return jsonify({
        "success": True,
        "message": "User updated successfully",
        "data": user,
    }), 200
