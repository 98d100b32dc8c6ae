"""
Request-scoped dependencies for FastAPI.

The ticket store is built per request from the application's database
handle; nothing here holds state between requests.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ticket_logger.app.db.session import get_db
from ticket_logger.app.schemas.ticket import TicketQuery
from ticket_logger.app.services.ticket_store import TicketStore
from ticket_logger.app.services.validation import list_query_check


async def get_ticket_store(db: AsyncSession = Depends(get_db)) -> TicketStore:
    return TicketStore(db)


async def valid_ticket_query(request: Request) -> TicketQuery:
    """Validate list/export query parameters, failing with 400 on violations."""
    return list_query_check.parse(dict(request.query_params))
