import pytest
import psycopg2.errors
from datetime import datetime, timezone

from event_api.attendance_service.service import parse_enrollment_id
from event_api.errors import ValidationError

CONFIRMED_AT = datetime(2025, 3, 10, 14, 30, 0, tzinfo=timezone.utc)
ENROLLMENT = {"id": 3, "user_id": 1, "event_id": 2}
ATTENDANCE = {"id": 10, "enrollment_id": 3, "created_at": CONFIRMED_AT}


def test_confirm_attendance_success(client, mock_db):
    _, _, mock_cursor = mock_db
    # enrollment lookup, attendance lookup, INSERT ... RETURNING
    mock_cursor.fetchone.side_effect = [ENROLLMENT, None, ATTENDANCE]

    response = client.post("/attendance", json={"enrollment_id": 3})

    assert response.status_code == 200
    data = response.get_json()
    assert data["success"] is True
    assert data["confirmed"] is True
    assert data["data"] == {
        "id": 10,
        "enrollment_id": 3,
        "confirmed": True,
        "confirmation_time": CONFIRMED_AT.isoformat(),
    }

    insert_args, _ = mock_cursor.execute.call_args_list[2]
    assert "INSERT INTO attendance" in insert_args[0]
    assert insert_args[1] == (3,)


def test_confirm_attendance_twice(client, mock_db):
    _, _, mock_cursor = mock_db
    mock_cursor.fetchone.side_effect = [
        ENROLLMENT, None, ATTENDANCE,   # first call
        ENROLLMENT, {"id": 10},         # second call finds the row
    ]

    first = client.post("/attendance", json={"enrollment_id": 3})
    second = client.post("/attendance", json={"enrollment_id": 3})

    assert first.status_code == 200
    assert first.get_json()["data"]["confirmed"] is True
    assert second.status_code == 409
    assert second.get_json() == {
        "success": False,
        "message": "Attendance already confirmed for this enrollment",
        "confirmed": False,
    }


def test_confirm_attendance_enrollment_not_found(client, mock_db):
    _, _, mock_cursor = mock_db
    mock_cursor.fetchone.side_effect = [None]

    response = client.post("/attendance", json={"enrollment_id": 404})

    assert response.status_code == 404
    assert response.get_json()["message"] == "Enrollment not found"
    assert mock_cursor.execute.call_count == 1


def test_confirm_attendance_unique_violation_from_insert(client, mock_db):
    _, _, mock_cursor = mock_db
    mock_cursor.fetchone.side_effect = [ENROLLMENT, None]
    mock_cursor.execute.side_effect = [None, None, psycopg2.errors.UniqueViolation("duplicate key")]

    response = client.post("/attendance", json={"enrollment_id": 3})

    assert response.status_code == 409


def test_confirm_attendance_database_error(client, mock_db):
    _, _, mock_cursor = mock_db
    mock_cursor.execute.side_effect = psycopg2.OperationalError("timeout")

    response = client.post("/attendance", json={"enrollment_id": 3})

    assert response.status_code == 500
    data = response.get_json()
    assert data["confirmed"] is False
    assert data["error"] == "timeout"


@pytest.mark.parametrize("payload", [{}, {"enrollment_id": None}, {"enrollment_id": ""}])
def test_confirm_attendance_missing_id(client, mock_db, payload):
    db, _, _ = mock_db

    response = client.post("/attendance", json=payload)

    assert response.status_code == 400
    data = response.get_json()
    assert data["message"] == "enrollment_id is required"
    assert data["confirmed"] is False
    assert not db.connection.called


@pytest.mark.parametrize("value", [0, -1, "abc", "-5", True, 1.5, [3], "²", "١٢"])
def test_confirm_attendance_invalid_id(client, value):
    response = client.post("/attendance", json={"enrollment_id": value})
    assert response.status_code == 400
    assert response.get_json()["message"] == "enrollment_id must be a positive integer"


def test_parse_enrollment_id_accepts_digit_strings():
    assert parse_enrollment_id("7") == 7
    assert parse_enrollment_id(" 12 ") == 12
    assert parse_enrollment_id(4.0) == 4


def test_parse_enrollment_id_rejects_bool():
    with pytest.raises(ValidationError):
        parse_enrollment_id(False)
