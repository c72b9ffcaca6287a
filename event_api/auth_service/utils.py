"""
Shared-token guard.

The API uses one static token for every user. It is not bound to an
identity, never expires and cannot be revoked. Routes that need protection
wrap their view with `require_token`.
"""

import hmac
from functools import wraps
from typing import Any, Callable, Optional

from flask import Request, current_app, request

from event_api.errors import AuthError

BEARER_PREFIX = "Bearer "


def extract_token(header: str) -> str:
    """
    Accept both "Bearer <token>" and a bare "<token>".

    Args:
        header (str): Raw Authorization header value.

    Returns:
        str: The token without the Bearer prefix.
    """
    if header.startswith(BEARER_PREFIX):
        return header[len(BEARER_PREFIX):]
    return header


class Gatekeeper:
    """Compares the request's Authorization header with the shared token."""

    def __init__(self, token: str):
        self._token = token

    def check(self, req: Optional[Request] = None) -> None:
        """
        Verify the Authorization header of a request.

        Args:
            req (Request, optional): Defaults to the current Flask request.

        Raises:
            AuthError: Header missing, or token does not match.
        """
        req = req if req is not None else request
        header = req.headers.get("Authorization")

        if not header:
            raise AuthError(
                "Authentication token not provided. Add the Authorization header with the token."
            )

        token = extract_token(header)
        if not hmac.compare_digest(token.encode("utf-8"), self._token.encode("utf-8")):
            raise AuthError("Invalid authentication token")


def get_gatekeeper() -> Gatekeeper:
    return current_app.extensions["gatekeeper"]


def require_token(view: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator for routes that require the shared token.

    Usage:
        @bp.route("/private")
        @require_token
        def private_route():
            ...
    """

    @wraps(view)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        get_gatekeeper().check()
        return view(*args, **kwargs)

    return wrapper
