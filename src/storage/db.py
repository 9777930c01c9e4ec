"""asyncpg pool shared by PostgresTaskStore and the startup/health hooks."""

import logging
import pathlib
from contextlib import asynccontextmanager
from typing import Optional

import asyncpg

from taskboard import config

logger = logging.getLogger(__name__)

SCHEMA_PATH = pathlib.Path(__file__).parent / "schema.sql"

_pool: Optional[asyncpg.Pool] = None


async def init_db_pool(
    dsn: str = config.DATABASE_URL,
    min_size: int = config.DB_POOL_MIN,
    max_size: int = config.DB_POOL_MAX,
    command_timeout: float = config.DB_COMMAND_TIMEOUT_S,
    connect_timeout: float = config.DB_CONNECT_TIMEOUT_S,
) -> asyncpg.Pool:
    """Open the pool once. Connection errors are logged and re-raised."""
    global _pool

    if _pool is not None:
        return _pool

    logger.info(f"Opening task database pool ({min_size}-{max_size} connections)")
    try:
        _pool = await asyncpg.create_pool(
            dsn,
            min_size=min_size,
            max_size=max_size,
            command_timeout=command_timeout,
            timeout=connect_timeout,
        )
    except Exception as e:
        logger.error(f"Task database unreachable: {e}")
        raise
    return _pool


async def close_db_pool() -> None:
    global _pool

    if _pool is None:
        return
    await _pool.close()
    _pool = None
    logger.info("Task database pool closed")


def get_pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("Task database pool is not open")
    return _pool


@asynccontextmanager
async def get_connection():
    async with get_pool().acquire() as connection:
        yield connection


async def execute(query: str, *args) -> str:
    async with get_connection() as conn:
        return await conn.execute(query, *args)


async def fetch(query: str, *args) -> list:
    async with get_connection() as conn:
        return await conn.fetch(query, *args)


async def fetchrow(query: str, *args):
    async with get_connection() as conn:
        return await conn.fetchrow(query, *args)


async def fetchval(query: str, *args):
    async with get_connection() as conn:
        return await conn.fetchval(query, *args)


async def init_schema(path: pathlib.Path = SCHEMA_PATH) -> None:
    """Apply schema.sql. Every statement is IF NOT EXISTS, so reruns are no-ops."""
    if not path.exists():
        raise FileNotFoundError(f"Schema file not found: {path}")

    async with get_connection() as conn:
        await conn.execute(path.read_text())
    logger.info(f"Task schema applied from {path.name}")


async def health_check() -> dict:
    try:
        await fetchval("SELECT 1")
    except Exception as e:
        logger.error(f"Task database health check failed: {e}")
        return {"status": "unhealthy", "store": "postgres", "error": str(e)}

    return {
        "status": "healthy",
        "store": "postgres",
        "pool_size": _pool.get_size(),
        "pool_free": _pool.get_idle_size(),
    }
