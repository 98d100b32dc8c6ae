"""
Ticket database model.

A ticket records a single service incident logged by a support agent
against a trip. Tickets are created and deleted, never updated.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Date, DateTime
from ticket_logger.app.db.session import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Ticket(Base):
    """
    Ticket model.

    `reason` holds a `TicketReason` value as plain text so filters match
    exactly what the client submitted.
    """
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Trip reference
    trip_id = Column(String(100), nullable=False)
    trip_date = Column(Date, nullable=False, index=True)
    driver_id = Column(Integer, nullable=False)

    # Incident details
    reason = Column(String(100), nullable=False, index=True)
    city = Column(String(100), nullable=False)
    service_type = Column(String(100), nullable=False)
    customer_phone = Column(String(32), nullable=False)
    agent_name = Column(String(100), nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<Ticket(id={self.id}, trip_id='{self.trip_id}', reason='{self.reason}')>"
