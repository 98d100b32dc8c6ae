"""
API Router.

Aggregates all endpoints mounted under the API prefix.
"""

from fastapi import APIRouter
from ticket_logger.app.api.endpoints import tickets

router = APIRouter()

router.include_router(tickets.router)
