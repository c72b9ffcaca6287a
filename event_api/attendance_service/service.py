"""
Attendance confirmation.

Confirming is a one-way step: an enrollment without an attendance row is
unconfirmed, one with a row is confirmed, and nothing here removes a row.
"""

import logging
import re
from typing import Any, Dict

import psycopg2
import psycopg2.errors

from event_api.database.db_connection import Database
from event_api.errors import ConflictError, InternalError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DIGITS_RE = re.compile(r"[0-9]+")
ALREADY_CONFIRMED = "Attendance already confirmed for this enrollment"


def parse_enrollment_id(value: Any) -> int:
    """
    Accept a positive integer, or a string of digits.

    Raises:
        ValidationError: Missing, non-numeric, or not positive.
    """
    if value is None or value == "":
        raise ValidationError("enrollment_id is required")

    if isinstance(value, str) and DIGITS_RE.fullmatch(value.strip()):
        value = int(value.strip())
    elif isinstance(value, float) and value.is_integer():
        value = int(value)

    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError("enrollment_id must be a positive integer")
    return value


class AttendanceService:
    """
    Args:
        db (Database): Connection pool.
    """

    def __init__(self, db: Database):
        self.db = db

    def confirm(self, enrollment_id: Any) -> Dict[str, Any]:
        """
        Record attendance for an enrollment.

        Returns:
            dict: {id, enrollment_id, confirmed, confirmation_time}

        Raises:
            ValidationError: Bad enrollment_id.
            NotFoundError: Enrollment does not exist.
            ConflictError: Attendance already confirmed.
            InternalError: Database failure.
        """
        enrollment_id = parse_enrollment_id(enrollment_id)

        try:
            with self.db.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        "SELECT id, user_id, event_id FROM enrollments WHERE id = %s;",
                        (enrollment_id,),
                    )
                    if cur.fetchone() is None:
                        raise NotFoundError("Enrollment not found")

                    cur.execute("SELECT id FROM attendance WHERE enrollment_id = %s;", (enrollment_id,))
                    if cur.fetchone() is not None:
                        raise ConflictError(ALREADY_CONFIRMED)

                    cur.execute(
                        """
                        INSERT INTO attendance (enrollment_id)
                        VALUES (%s)
                        RETURNING id, enrollment_id, created_at;
                        """,
                        (enrollment_id,),
                    )
                    row = cur.fetchone()
        except psycopg2.errors.UniqueViolation as e:
            raise ConflictError(ALREADY_CONFIRMED) from e
        except psycopg2.Error as e:
            logger.exception(f"Database error while confirming enrollment {enrollment_id}")
            raise InternalError("Internal server error while confirming attendance", detail=str(e)) from e

        logger.info(f"Attendance {row['id']} confirmed for enrollment {enrollment_id}")
        return {
            "id": row["id"],
            "enrollment_id": row["enrollment_id"],
            "confirmed": True,
            "confirmation_time": row["created_at"].isoformat(),
        }
