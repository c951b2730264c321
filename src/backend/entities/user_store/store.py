"""Fixed statements against the ``users`` table.

None of these go through the interpreter: the SQL is constant and
takes no user input.
"""

from __future__ import annotations

import logging

from entities.shared.protocols import SqlExecutor
from models import UserStats

logger = logging.getLogger(__name__)

CREATE_USERS_TABLE = """
CREATE TABLE IF NOT EXISTS users (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL,
    email TEXT UNIQUE NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
)
"""

USER_STATS_QUERY = """
SELECT
    COUNT(*) AS total_users,
    COUNT(*) FILTER (WHERE created_at > NOW() - INTERVAL '7 days') AS recent_users,
    COUNT(*) FILTER (WHERE created_at::date = CURRENT_DATE) AS today_users
FROM users
"""

PROBE_QUERY = "SELECT 1 AS ok"


async def ensure_users_table(db: SqlExecutor) -> None:
    """Create the ``users`` table if it does not exist. Idempotent."""
    logger.info("Checking/creating users table")
    await db.query(CREATE_USERS_TABLE)
    logger.info("Users table ready")


async def fetch_user_stats(db: SqlExecutor) -> UserStats:
    """Return total, last-7-days and today user counts."""
    rows = await db.query(USER_STATS_QUERY)
    if not rows:
        return UserStats()
    row = rows[0]
    return UserStats(
        total_users=int(row.get("total_users") or 0),
        recent_users=int(row.get("recent_users") or 0),
        today_users=int(row.get("today_users") or 0),
    )


async def probe(db: SqlExecutor) -> None:
    """Run a trivial statement; raises if the database is unreachable."""
    await db.query(PROBE_QUERY)
