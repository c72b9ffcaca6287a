"""
Credential check for POST /auth.
"""

import logging
import secrets
from typing import Any, Dict

import psycopg2
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from event_api.database.db_connection import Database
from event_api.errors import AuthError, InternalError, ValidationError
from event_api.users_service.service import serialize_user
from event_api.validators import is_blank, validate_email

logger = logging.getLogger(__name__)

# Same message for unknown email and wrong password
INVALID_CREDENTIALS = "Invalid email or password"

LOGIN_SQL = """
    SELECT id, name, email, cpf, date_of_birth, city, is_admin, created_at, password_hash
    FROM users
    WHERE email = %s;
"""


class AuthService:
    """
    Verify email/password pairs and hand out the shared token.

    Args:
        db (Database): Connection pool.
        hasher (PasswordHasher): Argon2 hasher used to verify stored hashes.
        token (str): The static shared token.
    """

    def __init__(self, db: Database, hasher: PasswordHasher, token: str):
        self.db = db
        self.hasher = hasher
        self.token = token
        # Checked instead of a stored hash when the email is unknown
        self._dummy_hash = hasher.hash(secrets.token_hex(16))

    def authenticate(self, email: Any, password: Any) -> Dict[str, Any]:
        """
        Check credentials.

        Returns:
            dict: {"token": shared token, "user": public user record}

        Raises:
            ValidationError: Missing email/password or malformed email.
            AuthError: Unknown email or wrong password.
            InternalError: Database failure.
        """
        if is_blank(email) or is_blank(password):
            raise ValidationError("Email and password are required")
        email = validate_email(email)
        if not isinstance(password, str):
            raise ValidationError("password must be a string")

        try:
            with self.db.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(LOGIN_SQL, (email,))
                    user = cur.fetchone()
        except psycopg2.Error as e:
            logger.exception("Database error while authenticating user")
            raise InternalError("Internal server error while authenticating user", detail=str(e)) from e

        stored_hash = user["password_hash"] if user is not None else self._dummy_hash
        if not self._password_matches(stored_hash, password) or user is None:
            logger.warning("Failed login attempt")
            raise AuthError(INVALID_CREDENTIALS)

        logger.info(f"User {user['id']} authenticated")
        return {"token": self.token, "user": serialize_user(user)}

    def _password_matches(self, password_hash: str, password: str) -> bool:
        try:
            return self.hasher.verify(password_hash, password)
        except VerificationError:
            return False
        except InvalidHashError:
            logger.warning("Stored password hash could not be parsed")
            return False
