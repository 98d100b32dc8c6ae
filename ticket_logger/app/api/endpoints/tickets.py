"""
Ticket API Endpoints.

Create, list, export and delete logged tickets.
"""

import logging
import math

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import Response

from ticket_logger.app.core.dependencies import get_ticket_store, valid_ticket_query
from ticket_logger.app.core.exceptions import ResourceNotFoundError
from ticket_logger.app.schemas.ticket import (
    MessageResponse,
    TicketCreate,
    TicketCreatedResponse,
    TicketListResponse,
    TicketQuery,
    TicketResponse,
    inline_json_schema,
)
from ticket_logger.app.services.ticket_store import TicketStore
from ticket_logger.app.services.tickets import (
    MAX_TICKET_ID,
    NO_TICKETS_MESSAGE,
    build_criteria,
    parse_ticket_id,
    render_csv,
)
from ticket_logger.app.services.validation import create_ticket_check

logger = logging.getLogger("ticket_logger.tickets")

router = APIRouter(prefix="/tickets", tags=["Tickets"])


# OpenAPI request body for the create route, which reads the JSON body itself
CREATE_TICKET_BODY = {
    "required": True,
    "content": {"application/json": {"schema": inline_json_schema(TicketCreate)}},
}


@router.post(
    "",
    response_model=TicketCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    openapi_extra={"requestBody": CREATE_TICKET_BODY},
)
async def create_ticket(
    request: Request,
    store: TicketStore = Depends(get_ticket_store),
):
    """
    Log a new ticket.

    All eight fields are required; every invalid field is reported in one 400 response.
    """
    try:
        body = await request.json()
    except ValueError:
        body = None
    payload = create_ticket_check.parse(body)

    values = payload.model_dump()
    values["reason"] = payload.reason.value
    ticket = await store.insert_one(values)

    logger.info("Ticket created", extra={"ticket_id": ticket.id, "reason": ticket.reason})
    return TicketCreatedResponse(message="Ticket created successfully", ticket_id=ticket.id)


@router.get("", response_model=TicketListResponse)
async def list_tickets(
    query: TicketQuery = Depends(valid_ticket_query),
    store: TicketStore = Depends(get_ticket_store),
):
    """
    List tickets newest first, filtered by reason and trip date, one page at a time.

    An empty page answers 404.
    """
    criteria = build_criteria(query)
    total = await store.count_where(criteria)
    tickets = await store.find_many(
        criteria,
        skip=(query.page - 1) * query.limit,
        take=query.limit,
    )
    if not tickets:
        raise ResourceNotFoundError(NO_TICKETS_MESSAGE)

    return TicketListResponse(
        page=query.page,
        total_pages=math.ceil(total / query.limit),
        total_tickets=total,
        tickets=[TicketResponse.model_validate(ticket) for ticket in tickets],
    )


@router.get("/export")
async def export_tickets(
    query: TicketQuery = Depends(valid_ticket_query),
    store: TicketStore = Depends(get_ticket_store),
):
    """Download every ticket matching the filters as `tickets.csv`."""
    tickets = await store.find_many(build_criteria(query))
    if not tickets:
        raise ResourceNotFoundError(NO_TICKETS_MESSAGE)

    return Response(
        content=render_csv(tickets),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="tickets.csv"'},
    )


@router.delete("/{ticket_id}", response_model=MessageResponse)
async def delete_ticket(
    ticket_id: str,
    store: TicketStore = Depends(get_ticket_store),
):
    """Permanently delete a ticket."""
    identifier = parse_ticket_id(ticket_id)

    ticket = None
    if 0 < identifier <= MAX_TICKET_ID:
        ticket = await store.find_by_id(identifier)
    if ticket is None:
        raise ResourceNotFoundError("Ticket not found")

    await store.delete_by_id(identifier)
    logger.info("Ticket deleted", extra={"ticket_id": identifier})
    return MessageResponse(message="Ticket deleted successfully")
