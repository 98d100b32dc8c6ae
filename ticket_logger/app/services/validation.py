"""
Request payload validation.

Each inbound shape (create-ticket body, list/export query) has a check that
turns a raw payload into an ordered list of field violations. The gate
`raise_for_violations` stops the request with a 400 when the list is not empty.
"""

from dataclasses import asdict, dataclass
from typing import Any, Generic, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ticket_logger.app.core.exceptions import RequestValidationFailed
from ticket_logger.app.models.ticket_enums import TicketReason
from ticket_logger.app.schemas.ticket import TicketCreate, TicketQuery

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class FieldViolation:
    field: str
    message: str


def _violation_from_error(error: dict) -> FieldViolation:
    field = str(error["loc"][-1]) if error.get("loc") else "body"
    kind = error["type"]
    if kind == "missing":
        message = f"{field} is required"
    elif kind == "string_too_short":
        message = f"{field} must not be empty"
    elif kind == "enum":
        message = f"{field} must be one of: {', '.join(TicketReason.values())}"
    elif kind == "value_error":
        message = str(error["ctx"]["error"])
    else:
        message = f"{field}: {error['msg']}"
    return FieldViolation(field=field, message=message)


class PayloadValidator(Generic[ModelT]):
    """Validates a raw payload against one request model."""

    def __init__(self, model: Type[ModelT]):
        self.model = model

    def check(self, raw: Any) -> List[FieldViolation]:
        """Return every violation, one per field, in field declaration order."""
        if not isinstance(raw, dict):
            return [FieldViolation(field="body", message="Request body must be a JSON object")]
        try:
            self.model.model_validate(raw)
        except ValidationError as exc:
            violations: List[FieldViolation] = []
            seen = set()
            for error in exc.errors():
                violation = _violation_from_error(error)
                if violation.field not in seen:
                    seen.add(violation.field)
                    violations.append(violation)
            return violations
        return []

    def parse(self, raw: Any) -> ModelT:
        """Validate and return the typed model, raising a 400 error on violations."""
        raise_for_violations(self.check(raw))
        return self.model.model_validate(raw)


def raise_for_violations(violations: List[FieldViolation]) -> None:
    if violations:
        raise RequestValidationFailed([asdict(violation) for violation in violations])


create_ticket_check = PayloadValidator(TicketCreate)
list_query_check = PayloadValidator(TicketQuery)
