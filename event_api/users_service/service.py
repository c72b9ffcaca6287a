"""
User registration and profile updates.

The pre-insert email/CPF lookups only exist to return a friendly 409. The
unique constraints on the users table are what actually guarantee
uniqueness, so a UniqueViolation from INSERT/UPDATE is also reported as a
conflict.
"""

import logging
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

import psycopg2
import psycopg2.errors
from argon2 import PasswordHasher
from argon2.exceptions import HashingError
from psycopg2 import sql

from event_api.database.db_connection import Database
from event_api.errors import ConflictError, InternalError, NotFoundError, ValidationError
from event_api.validators import (
    clean_city,
    is_blank,
    normalize_cpf,
    parse_date_of_birth,
    require_text,
    validate_email,
    validate_password,
)

logger = logging.getLogger(__name__)

USER_FIELDS = ("name", "email", "cpf", "date_of_birth", "password", "city")
REQUIRED_FIELDS = ("name", "email", "cpf", "date_of_birth", "password")

# Never includes password_hash
PUBLIC_COLUMNS = "id, name, email, cpf, date_of_birth, city, is_admin, created_at"

EMAIL_TAKEN = "Email already registered"
CPF_TAKEN = "CPF already registered"
CONFLICT_MESSAGES = {
    "users_email_key": EMAIL_TAKEN,
    "users_cpf_key": CPF_TAKEN,
}


class FieldUpdate(NamedTuple):
    """One `column = value` assignment of a partial update."""

    column: str
    value: Any


def serialize_user(row: Any) -> Dict[str, Any]:
    """
    Convert a users row into a JSON-safe dict without the password hash.

    Args:
        row: A DictCursor row or plain dict.

    Returns:
        dict: The public user record with ISO-8601 dates.
    """
    user = dict(row)
    user.pop("password_hash", None)
    for key in ("date_of_birth", "created_at"):
        if user.get(key) is not None:
            user[key] = user[key].isoformat()
    return user


def build_changes(payload: Dict[str, Any]) -> Tuple[List[FieldUpdate], Optional[str]]:
    """
    Validate the fields present in an update payload.

    Returns:
        tuple: (column assignments, plain password or None). The password
            is returned separately so it is only hashed once the
            uniqueness checks have passed.

    Raises:
        ValidationError: If a present field fails its create() rule.
    """
    changes: List[FieldUpdate] = []

    if "name" in payload:
        changes.append(FieldUpdate("name", require_text(payload["name"], "name")))
    if "email" in payload:
        changes.append(FieldUpdate("email", validate_email(payload["email"])))
    if "cpf" in payload:
        changes.append(FieldUpdate("cpf", normalize_cpf(payload["cpf"])))
    if "date_of_birth" in payload:
        changes.append(FieldUpdate("date_of_birth", parse_date_of_birth(payload["date_of_birth"])))
    # An explicit null/"" city clears it
    if "city" in payload:
        changes.append(FieldUpdate("city", clean_city(payload["city"])))

    password = validate_password(payload["password"]) if "password" in payload else None
    return changes, password


def _conflict_message(error: psycopg2.Error) -> str:
    constraint = getattr(getattr(error, "diag", None), "constraint_name", None)
    return CONFLICT_MESSAGES.get(constraint, "User already registered")


class UserService:
    """
    Create and update users.

    Args:
        db (Database): Connection pool.
        hasher (PasswordHasher): Argon2 hasher used for new passwords.
    """

    def __init__(self, db: Database, hasher: PasswordHasher):
        self.db = db
        self.hasher = hasher

    def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Register a new user.

        Expects:
        - name, email, cpf, date_of_birth, password (required)
        - city (optional)

        Returns:
            dict: The stored user, without the password hash.

        Raises:
            ValidationError: Missing or malformed field.
            ConflictError: Email or CPF already registered.
            InternalError: Database or hashing failure.
        """
        if any(is_blank(payload.get(field)) for field in REQUIRED_FIELDS):
            raise ValidationError(f"All fields are required: {', '.join(REQUIRED_FIELDS)}")

        name = require_text(payload["name"], "name")
        email = validate_email(payload["email"])
        cpf = normalize_cpf(payload["cpf"])
        date_of_birth = parse_date_of_birth(payload["date_of_birth"])
        password = validate_password(payload["password"])
        city = clean_city(payload.get("city"))

        insert_sql = f"""
            INSERT INTO users (name, email, cpf, date_of_birth, password_hash, city)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING {PUBLIC_COLUMNS};
        """

        try:
            with self.db.connection() as conn:
                with conn.cursor() as cur:
                    self._ensure_unique(cur, email=email, cpf=cpf)
                    password_hash = self._hash(password)
                    cur.execute(insert_sql, (name, email, cpf, date_of_birth, password_hash, city))
                    user = cur.fetchone()
        except psycopg2.errors.UniqueViolation as e:
            raise ConflictError(_conflict_message(e)) from e
        except psycopg2.Error as e:
            logger.exception("Database error while creating user")
            raise InternalError("Internal server error while creating user", detail=str(e)) from e

        logger.info(f"Created user {user['id']}")
        return serialize_user(user)

    def update(self, user_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update only the fields present in the payload.

        `city` may be sent as null or "" to clear it; every other field
        must be non-empty when present.

        Returns:
            dict: The updated user, without the password hash.

        Raises:
            ValidationError: No recognized field, or a malformed one.
            NotFoundError: No user with this id.
            ConflictError: Email or CPF belongs to another user.
            InternalError: Database or hashing failure.
        """
        if not any(field in payload for field in USER_FIELDS):
            raise ValidationError("At least one field must be provided for update")

        # Bad fields are a 400 whether or not the user exists
        changes, password = build_changes(payload)
        values = {change.column: change.value for change in changes}

        try:
            with self.db.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute("SELECT id FROM users WHERE id = %s;", (user_id,))
                    if cur.fetchone() is None:
                        raise NotFoundError("User not found")

                    self._ensure_unique(
                        cur, email=values.get("email"), cpf=values.get("cpf"), exclude_id=user_id
                    )

                    if password is not None:
                        changes.append(FieldUpdate("password_hash", self._hash(password)))

                    cur.execute(*self._update_statement(user_id, changes))
                    user = cur.fetchone()
                    if user is None:
                        raise NotFoundError("User not found")
        except psycopg2.errors.UniqueViolation as e:
            raise ConflictError(_conflict_message(e)) from e
        except psycopg2.Error as e:
            logger.exception(f"Database error while updating user {user_id}")
            raise InternalError("Internal server error while updating user", detail=str(e)) from e

        logger.info(f"Updated user {user_id}: {', '.join(c.column for c in changes)}")
        return serialize_user(user)

    # --- helpers ---

    def _ensure_unique(
        self,
        cur: Any,
        email: Optional[str] = None,
        cpf: Optional[str] = None,
        exclude_id: Optional[int] = None,
    ) -> None:
        checks = [("email", email, EMAIL_TAKEN), ("cpf", cpf, CPF_TAKEN)]
        for column, value, message in checks:
            if value is None:
                continue
            if exclude_id is None:
                query = sql.SQL("SELECT id FROM users WHERE {} = %s;").format(sql.Identifier(column))
                cur.execute(query, (value,))
            else:
                query = sql.SQL("SELECT id FROM users WHERE {} = %s AND id <> %s;").format(
                    sql.Identifier(column)
                )
                cur.execute(query, (value, exclude_id))
            if cur.fetchone() is not None:
                raise ConflictError(message)

    def _hash(self, password: str) -> str:
        try:
            return self.hasher.hash(password)
        except HashingError as e:
            logger.exception("Password hashing failed")
            raise InternalError("Password hashing failed", detail=str(e)) from e

    @staticmethod
    def _update_statement(user_id: int, changes: List[FieldUpdate]) -> Tuple[sql.Composed, list]:
        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(change.column)) for change in changes
        )
        query = sql.SQL("UPDATE users SET {assignments} WHERE id = %s RETURNING {columns};").format(
            assignments=assignments,
            columns=sql.SQL(PUBLIC_COLUMNS),
        )
        params = [change.value for change in changes] + [user_id]
        return query, params
