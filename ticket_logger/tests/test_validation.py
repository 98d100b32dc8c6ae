"""
Unit tests for request payload validation.
"""

from datetime import date, datetime

import pytest

from ticket_logger.app.core.exceptions import RequestValidationFailed
from ticket_logger.app.models.ticket_enums import TicketReason
from ticket_logger.app.schemas.ticket import INT32_MAX
from ticket_logger.app.services.validation import (
    FieldViolation,
    create_ticket_check,
    list_query_check,
    raise_for_violations,
)

VALID_TICKET = {
    "tripId": "TRIP-1",
    "tripDate": "2024-01-15",
    "driverId": 9,
    "reason": "Wrong Route",
    "city": "Giza",
    "serviceType": "Comfort",
    "customerPhone": "(555) 010-0199",
    "agentName": "Omar",
}


def test_valid_ticket_has_no_violations():
    assert create_ticket_check.check(VALID_TICKET) == []


def test_parse_returns_typed_model():
    ticket = create_ticket_check.parse({**VALID_TICKET, "tripId": "  TRIP-1  "})
    assert ticket.trip_id == "TRIP-1"
    assert ticket.trip_date == date(2024, 1, 15)
    assert ticket.reason is TicketReason.WRONG_ROUTE


def test_empty_body_lists_every_required_field():
    violations = create_ticket_check.check({})
    assert [v.field for v in violations] == [
        "tripId", "tripDate", "driverId", "reason",
        "city", "serviceType", "customerPhone", "agentName",
    ]
    assert violations[0] == FieldViolation(field="tripId", message="tripId is required")


def test_unknown_reason_lists_allowed_values():
    violations = create_ticket_check.check({**VALID_TICKET, "reason": "Weather"})
    assert len(violations) == 1
    assert violations[0].field == "reason"
    assert "Driver Late" in violations[0].message


@pytest.mark.parametrize("phone", ["12345", "phone", "+1 (555) 010-0199-0000-1234", "555_0101234"])
def test_phone_shape_is_enforced(phone):
    violations = create_ticket_check.check({**VALID_TICKET, "customerPhone": phone})
    assert violations == [
        FieldViolation(field="customerPhone", message="customerPhone must be a valid phone number")
    ]


@pytest.mark.parametrize("trip_date", ["2024-13-01", "15/01/2024", 20240115])
def test_trip_date_must_be_iso(trip_date):
    violations = create_ticket_check.check({**VALID_TICKET, "tripDate": trip_date})
    assert violations == [FieldViolation(field="tripDate", message="tripDate must be a valid ISO 8601 date")]


@pytest.mark.parametrize("driver_id", [True, "7", 7.0, None])
def test_driver_id_must_be_a_json_integer(driver_id):
    violations = create_ticket_check.check({**VALID_TICKET, "driverId": driver_id})
    assert violations == [FieldViolation(field="driverId", message="driverId must be an integer")]


@pytest.mark.parametrize("driver_id", [INT32_MAX + 1, -(2**31) - 1, 10**30])
def test_driver_id_must_fit_the_column(driver_id):
    violations = create_ticket_check.check({**VALID_TICKET, "driverId": driver_id})
    assert [v.field for v in violations] == ["driverId"]
    assert violations[0].message.startswith("driverId must be between")


def test_driver_id_accepts_column_bounds():
    assert create_ticket_check.check({**VALID_TICKET, "driverId": INT32_MAX}) == []
    assert create_ticket_check.check({**VALID_TICKET, "driverId": -(2**31)}) == []


def test_non_object_payload():
    assert create_ticket_check.check("ticket") == [
        FieldViolation(field="body", message="Request body must be a JSON object")
    ]


def test_query_defaults():
    query = list_query_check.parse({})
    assert query.page == 1
    assert query.limit == 20
    assert query.reason is None
    assert query.start_date is None


def test_query_parses_dates_to_naive_utc():
    query = list_query_check.parse({"start_date": "2024-01-01T02:00:00+02:00", "end_date": "2024-01-31"})
    assert query.start_date == datetime(2024, 1, 1, 0, 0)
    assert query.end_date == datetime(2024, 1, 31, 0, 0)


@pytest.mark.parametrize("field, value", [("page", "-1"), ("limit", "0"), ("page", "2.5"), ("limit", "many")])
def test_query_page_and_limit_must_be_positive(field, value):
    assert list_query_check.check({field: value}) == [
        FieldViolation(field=field, message=f"{field} must be a positive integer")
    ]


def test_gate_raises_with_violation_list():
    with pytest.raises(RequestValidationFailed) as excinfo:
        raise_for_violations([FieldViolation(field="page", message="page must be a positive integer")])
    assert excinfo.value.status_code == 400
    assert excinfo.value.errors == [{"field": "page", "message": "page must be a positive integer"}]


def test_gate_passes_empty_list():
    raise_for_violations([])


@pytest.mark.parametrize("field", ["page", "limit"])
def test_query_page_and_limit_are_bounded(field):
    assert list_query_check.check({field: str(10**30)}) == [
        FieldViolation(field=field, message=f"{field} must be at most {INT32_MAX}")
    ]
    assert list_query_check.parse({field: str(INT32_MAX)}).model_dump()[field] == INT32_MAX
