"""Connection manager for the Threadline document store.

One ``asyncpg`` pool per process. Repositories never reach for it
themselves; the web app owns it and hands it to them.
"""

import asyncpg
import structlog
from pathlib import Path
from config.settings import settings

log = structlog.get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"

_pool: asyncpg.Pool | None = None


async def get_pool(dsn: str | None = None) -> asyncpg.Pool:
    """Connect on first use and hand back the same pool afterwards.

    Connection failures propagate to the caller unchanged and leave no
    pool behind, so the next call tries again.
    """
    global _pool
    if _pool is None:
        _pool = await asyncpg.create_pool(
            dsn or settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )
        log.info(
            "store_connected",
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )
    return _pool


async def close_pool() -> None:
    """Disconnect; a later ``get_pool()`` reconnects."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
        log.info("store_disconnected")


def pending_migrations(applied: set[str]) -> list[Path]:
    return [f for f in sorted(MIGRATIONS_DIR.glob("*.sql")) if f.name not in applied]


async def run_migrations(pool: asyncpg.Pool | None = None) -> list[str]:
    """Create the users/threads collections, applying each SQL file once.

    Returns the names of the files applied by this call.
    """
    if pool is None:
        pool = await get_pool()
    done: list[str] = []

    async with pool.acquire() as conn:
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS _migrations (
                filename VARCHAR(255) PRIMARY KEY,
                applied_at TIMESTAMPTZ DEFAULT NOW()
            )
        """)
        applied = {row["filename"] for row in await conn.fetch("SELECT filename FROM _migrations")}

        for migration in pending_migrations(applied):
            # File and its bookkeeping row commit together
            async with conn.transaction():
                await conn.execute(migration.read_text())
                await conn.execute("INSERT INTO _migrations (filename) VALUES ($1)", migration.name)
            done.append(migration.name)
            log.info("migration_applied", filename=migration.name)

    log.info("store_schema_ready", applied=len(done), already_applied=len(applied))
    return done
