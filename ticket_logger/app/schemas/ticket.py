"""
Ticket Pydantic schemas.

Defines request and response models for ticket logging. The wire format
is camelCase (`tripId`, `tripDate`, ...); Python attributes are snake_case.
"""

import re
from datetime import date, datetime
from typing import Any, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_serializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ticket_logger.app.models.ticket_enums import TicketReason
from ticket_logger.app.utils.time import format_timestamp, parse_iso_datetime

PHONE_PATTERN = re.compile(r"^\+?[\d\s\-().]+$")
PHONE_MIN_DIGITS = 7
PHONE_MAX_DIGITS = 15

# Range of a 32-bit signed INTEGER column
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

# Column order of the CSV export
CSV_COLUMNS = [
    "id",
    "tripId",
    "tripDate",
    "driverId",
    "reason",
    "city",
    "serviceType",
    "customerPhone",
    "agentName",
    "createdAt",
]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TicketCreate(CamelModel):
    """Schema for logging a new ticket."""
    model_config = ConfigDict(str_strip_whitespace=True)

    trip_id: str = Field(..., min_length=1, max_length=100, description="Trip identifier")
    trip_date: date = Field(..., description="Calendar date of the trip")
    driver_id: int = Field(..., description="Driver identifier")
    reason: TicketReason = Field(..., description="Ticket category")
    city: str = Field(..., min_length=1, max_length=100)
    service_type: str = Field(..., min_length=1, max_length=100)
    customer_phone: str = Field(..., min_length=1, max_length=32)
    agent_name: str = Field(..., min_length=1, max_length=100)

    @field_validator("trip_date", mode="before")
    @classmethod
    def parse_trip_date(cls, value: Any) -> date:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                return parse_iso_datetime(value).date()
            except ValueError:
                pass
        raise ValueError("tripDate must be a valid ISO 8601 date")

    @field_validator("driver_id", mode="before")
    @classmethod
    def check_driver_id(cls, value: Any) -> int:
        # JSON numbers only; booleans and numeric strings are rejected
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError("driverId must be an integer")
        if not INT32_MIN <= value <= INT32_MAX:
            raise ValueError(f"driverId must be between {INT32_MIN} and {INT32_MAX}")
        return value

    @field_validator("customer_phone")
    @classmethod
    def check_phone_shape(cls, value: str) -> str:
        digits = re.sub(r"\D", "", value)
        if not PHONE_PATTERN.match(value) or not PHONE_MIN_DIGITS <= len(digits) <= PHONE_MAX_DIGITS:
            raise ValueError("customerPhone must be a valid phone number")
        return value


class TicketQuery(BaseModel):
    """Query parameters shared by the list and export endpoints."""
    reason: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    page: int = 1
    limit: int = 20

    @model_validator(mode="before")
    @classmethod
    def drop_blank_values(cls, data: Any) -> Any:
        # An empty query value behaves as if the parameter was not sent
        if isinstance(data, dict):
            return {
                key: value for key, value in data.items()
                if not (isinstance(value, str) and not value.strip())
            }
        return data

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_date(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, datetime) or value is None:
            return value
        if isinstance(value, str):
            try:
                return parse_iso_datetime(value)
            except ValueError:
                pass
        raise ValueError(f"{info.field_name} must be a valid ISO 8601 date")

    @field_validator("page", "limit", mode="before")
    @classmethod
    def positive_integer(cls, value: Any, info: ValidationInfo) -> int:
        message = f"{info.field_name} must be a positive integer"
        if isinstance(value, bool):
            raise ValueError(message)
        try:
            number = int(str(value).strip())
        except ValueError:
            raise ValueError(message)
        if number < 1:
            raise ValueError(message)
        # Keeps (page - 1) * limit inside a 64-bit OFFSET
        if number > INT32_MAX:
            raise ValueError(f"{info.field_name} must be at most {INT32_MAX}")
        return number


class TicketResponse(CamelModel):
    """Schema for a ticket as returned by the list and export endpoints."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    trip_id: str
    trip_date: date
    driver_id: int
    reason: str
    city: str
    service_type: str
    customer_phone: str
    agent_name: str
    created_at: datetime

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime) -> str:
        return format_timestamp(value)

    def to_row(self) -> dict:
        """Flat camelCase mapping, keyed by CSV column name."""
        return self.model_dump(mode="json", by_alias=True)


class TicketListResponse(CamelModel):
    """Schema for a page of tickets."""
    page: int
    total_pages: int
    total_tickets: int
    tickets: List[TicketResponse]


class TicketCreatedResponse(CamelModel):
    message: str
    ticket_id: int


class MessageResponse(BaseModel):
    message: str


def inline_json_schema(model: Type[BaseModel]) -> dict:
    """JSON schema of `model` with its `$defs` references resolved in place."""
    schema = model.model_json_schema()
    defs = schema.pop("$defs", {})
    for name, prop in schema.get("properties", {}).items():
        refs = [prop.pop("$ref")] if "$ref" in prop else []
        refs += [item["$ref"] for item in prop.pop("allOf", []) if "$ref" in item]
        for ref in refs:
            schema["properties"][name] = {**defs[ref.rsplit("/", 1)[-1]], **prop}
    return schema
