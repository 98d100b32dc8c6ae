"""
Health check endpoint.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from ticket_logger.app.utils.time import format_timestamp

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns:
        dict: Fixed status and the current server time
    """
    return {"status": "OK", "timestamp": format_timestamp(datetime.now(timezone.utc))}
