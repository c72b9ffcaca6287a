"""
API error taxonomy and the Flask handlers that turn errors into the
JSON envelope shared by every endpoint:

    {"success": false, "message": "...", "error": "..."}

`error` is only filled in for internal errors, and only when the app runs
outside production.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from flask import Flask, Response, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map directly to an HTTP response."""

    status_code = 500

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self, expose_detail: bool = False) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": False, "message": self.message}
        if expose_detail and self.detail:
            body["error"] = self.detail
        return body


class ValidationError(ApiError):
    """Malformed or missing input."""

    status_code = 400


class AuthError(ApiError):
    """Bad credentials, or a missing/invalid shared token."""

    status_code = 401

    def to_dict(self, expose_detail: bool = False) -> Dict[str, Any]:
        body = super().to_dict(expose_detail)
        body["authorized"] = False
        return body


class NotFoundError(ApiError):
    status_code = 404


class ConflictError(ApiError):
    """Uniqueness violation."""

    status_code = 409


class InternalError(ApiError):
    """Unexpected database or hashing failure."""

    status_code = 500


def error_response(error: ApiError, **extra: Any) -> Tuple[Response, int]:
    """
    Render an ApiError as the JSON envelope.

    Args:
        error (ApiError): The error to render.
        **extra: Resource-specific envelope fields (e.g. confirmed=False).

    Returns:
        tuple: (JSON response, status code)
    """
    expose = current_app.config.get("EXPOSE_ERROR_DETAILS", False)
    body = error.to_dict(expose_detail=expose)
    body.update(extra)
    return jsonify(body), error.status_code


def register_error_handlers(app: Flask) -> None:
    """Install app-wide handlers so every failure leaves as an envelope."""

    @app.errorhandler(ApiError)
    def handle_api_error(error: ApiError) -> Tuple[Response, int]:
        if error.status_code >= 500:
            logger.error(f"[API] {request.method} {request.path} failed: {error.detail or error.message}")
        return error_response(error)

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException) -> Tuple[Response, int]:
        body = {"success": False, "message": error.description or error.name}
        return jsonify(body), error.code or 500

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception) -> Tuple[Response, int]:
        logger.exception(f"[API] Unhandled error on {request.method} {request.path}")
        return error_response(InternalError("Internal server error", detail=str(error)))
