"""
Ticket filtering and export helpers used by the tickets endpoints.
"""

import csv
import re
from datetime import datetime, time
from typing import Iterable, Optional

import pandas as pd

from ticket_logger.app.core.exceptions import InvalidIdentifierError
from ticket_logger.app.models.ticket import Ticket
from ticket_logger.app.schemas.ticket import CSV_COLUMNS, INT32_MAX, TicketQuery, TicketResponse
from ticket_logger.app.services.ticket_store import TicketCriteria, TripDateRange

NO_TICKETS_MESSAGE = "No tickets found for given filters"

_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
_END_OF_DAY = time(23, 59, 59, 999000)

# Upper bound of the `tickets.id` column (32-bit signed INTEGER)
MAX_TICKET_ID = INT32_MAX


def build_trip_date_range(
    start_date: Optional[datetime],
    end_date: Optional[datetime],
) -> Optional[TripDateRange]:
    """
    Translate the `start_date`/`end_date` query pair into a timestamp range.

    - both given: the two values as supplied, clock times included
    - only start: from `start_date` to the end of that day
    - only end: from the start of that day to `end_date`
    """
    if start_date and end_date:
        return TripDateRange(start=start_date, end=end_date)
    if start_date:
        return TripDateRange(start=start_date, end=datetime.combine(start_date.date(), _END_OF_DAY))
    if end_date:
        return TripDateRange(start=datetime.combine(end_date.date(), time.min), end=end_date)
    return None


def build_criteria(query: TicketQuery) -> TicketCriteria:
    return TicketCriteria(
        reason=query.reason or None,
        trip_dates=build_trip_date_range(query.start_date, query.end_date),
    )


def parse_ticket_id(raw: str) -> int:
    """Parse a path identifier as a base-10 integer."""
    candidate = raw.strip()
    if not _INTEGER_PATTERN.match(candidate):
        raise InvalidIdentifierError("ticket")
    return int(candidate)


def render_csv(tickets: Iterable[Ticket]) -> str:
    rows = [TicketResponse.model_validate(ticket).to_row() for ticket in tickets]
    frame = pd.DataFrame(rows, columns=CSV_COLUMNS)
    # Headers and text values quoted, numbers bare, no trailing newline
    return frame.to_csv(index=False, lineterminator="\n", quoting=csv.QUOTE_NONNUMERIC).rstrip("\n")
