"""
Database seeding script for sample tickets.

Creates a spread of tickets across reasons, cities and trip dates so the
list filters, pagination and CSV export have something to show in
development. Run it after the database is reachable.
"""

import argparse
import asyncio
import random
from datetime import date, timedelta

from sqlalchemy import func, select

from ticket_logger.app.core.config import settings
from ticket_logger.app.db.session import Database
from ticket_logger.app.models.ticket import Ticket
from ticket_logger.app.models.ticket_enums import TicketReason

CITIES = ["Cairo", "Giza", "Alexandria", "Mansoura", "Luxor"]
SERVICE_TYPES = ["Economy", "Comfort", "XL", "Scooter"]
AGENTS = ["Mona", "Omar", "Sara", "Youssef"]


async def seed_tickets(count: int) -> None:
    """
    Seed `count` sample tickets unless the table already has rows.
    """
    database = Database(settings.database_url, echo=settings.db_echo)
    try:
        await database.create_tables()
        async with database.session_factory() as db:
            print("🌱 Starting ticket seeding...")

            existing = (await db.execute(select(func.count(Ticket.id)))).scalar_one()
            if existing:
                print(f"ℹ️  {existing} tickets already exist, skipping seeding")
                return

            rng = random.Random(2024)
            start = date.today() - timedelta(days=30)
            for index in range(count):
                db.add(Ticket(
                    trip_id=f"TRIP-{10000 + index}",
                    trip_date=start + timedelta(days=rng.randrange(31)),
                    driver_id=rng.randrange(1, 200),
                    reason=rng.choice(TicketReason.values()),
                    city=rng.choice(CITIES),
                    service_type=rng.choice(SERVICE_TYPES),
                    customer_phone=f"+2010{rng.randrange(10_000_000, 99_999_999)}",
                    agent_name=rng.choice(AGENTS),
                ))

            await db.commit()
            print(f"\n🎉 Seeded {count} tickets successfully!")
    finally:
        await database.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed sample tickets")
    parser.add_argument("--count", type=int, default=50)
    args = parser.parse_args()
    asyncio.run(seed_tickets(args.count))
