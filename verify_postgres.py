"""
Raw connectivity check for the configured PostgreSQL database.

Connects with asyncpg directly (bypassing SQLAlchemy) and reports whether
the `tickets` table exists yet.
"""

import asyncio
import sys

import asyncpg

from ticket_logger.app.core.config import settings

# asyncpg needs a plain DSN without the SQLAlchemy driver suffix
db_url = settings.database_url.replace("+asyncpg", "")

print(f"Testing connection to: {db_url.split('@')[-1]}")


async def check_db() -> int:
    try:
        conn = await asyncpg.connect(db_url)
    except (OSError, asyncpg.PostgresError) as e:
        print(f"❌ Connection Failed: {e}")
        return 1
    try:
        exists = await conn.fetchval("SELECT to_regclass('public.tickets') IS NOT NULL")
        print("✅ Connection Successful!")
        print("ℹ️  tickets table present" if exists else "ℹ️  tickets table not created yet")
    finally:
        await conn.close()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(check_db()))
