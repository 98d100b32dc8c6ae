"""
Ticket data access.

Thin typed facade over the `tickets` table. Builds no filters of its own:
callers hand it a `TicketCriteria` and it translates that into SQL.
Connectivity failures surface as `DatabaseUnavailableError`.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Iterator, List, Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from ticket_logger.app.core.exceptions import DatabaseUnavailableError
from ticket_logger.app.models.ticket import Ticket

_CONNECTIVITY_ERRORS = (OperationalError, InterfaceError, OSError)


@dataclass(frozen=True)
class TripDateRange:
    """Inclusive timestamp range; a trip date matches when its midnight falls inside."""
    start: datetime
    end: datetime

    def date_bounds(self) -> tuple[date, date]:
        first = self.start.date()
        if self.start.time() != time.min:
            first += timedelta(days=1)
        return first, self.end.date()


@dataclass(frozen=True)
class TicketCriteria:
    reason: Optional[str] = None
    trip_dates: Optional[TripDateRange] = None


@contextmanager
def _store_errors() -> Iterator[None]:
    try:
        yield
    except _CONNECTIVITY_ERRORS as exc:
        raise DatabaseUnavailableError(str(exc)) from exc


class TicketStore:
    """Data access for tickets over one async session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _conditions(criteria: TicketCriteria) -> List[Any]:
        conditions: List[Any] = []
        if criteria.reason is not None:
            conditions.append(Ticket.reason == criteria.reason)
        if criteria.trip_dates is not None:
            first, last = criteria.trip_dates.date_bounds()
            conditions.append(Ticket.trip_date >= first)
            conditions.append(Ticket.trip_date <= last)
        return conditions

    async def insert_one(self, values: Dict[str, Any]) -> Ticket:
        ticket = Ticket(**values)
        with _store_errors():
            self.session.add(ticket)
            await self.session.commit()
            await self.session.refresh(ticket)
        return ticket

    async def count_where(self, criteria: TicketCriteria) -> int:
        query = select(func.count(Ticket.id)).where(*self._conditions(criteria))
        with _store_errors():
            result = await self.session.execute(query)
        return result.scalar_one()

    async def find_many(
        self,
        criteria: TicketCriteria,
        skip: Optional[int] = None,
        take: Optional[int] = None,
    ) -> Sequence[Ticket]:
        """Newest first; id breaks ties between equal creation times."""
        query = (
            select(Ticket)
            .where(*self._conditions(criteria))
            .order_by(Ticket.created_at.desc(), Ticket.id.desc())
        )
        if skip:
            query = query.offset(skip)
        if take is not None:
            query = query.limit(take)
        with _store_errors():
            result = await self.session.execute(query)
        return result.scalars().all()

    async def find_by_id(self, ticket_id: int) -> Optional[Ticket]:
        with _store_errors():
            result = await self.session.execute(select(Ticket).where(Ticket.id == ticket_id))
        return result.scalar_one_or_none()

    async def delete_by_id(self, ticket_id: int) -> int:
        """Hard delete; returns the number of removed rows."""
        with _store_errors():
            result = await self.session.execute(delete(Ticket).where(Ticket.id == ticket_id))
            await self.session.commit()
        return result.rowcount
