# events_api/database.py
from __future__ import annotations

import asyncio
import logging
from typing import Mapping, Optional

from sqlalchemy import text
from sqlalchemy.engine import URL
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import ArgumentError, DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger("events.database")

Base = declarative_base()


# Robust DATABASE_URL handling


def _translate_sslmode(value: str) -> Optional[str]:
    """Translate libpq sslmode values to asyncpg-compatible flags."""

    normalized = value.strip().lower()
    if normalized in {"require", "verify-ca", "verify-full"}:
        return "true"
    if normalized == "disable":
        return "false"

    # "prefer" and "allow" have no asyncpg equivalent; the driver default applies.
    return None


def normalize_database_url(raw_url: Optional[str], *, sslmode: Optional[str] = None) -> Optional[str]:
    """Ensure an async driver is selected even if the URL omits it.

    ``sslmode`` (usually ``PGSSLMODE``) is applied only when the URL carries no
    SSL setting of its own.
    """

    if not raw_url:
        return raw_url

    try:
        url = make_url(raw_url)
    except ArgumentError:
        return raw_url

    driver = url.drivername.lower()
    if driver in {"postgresql", "postgres"} or (
        driver.startswith("postgresql+") and driver != "postgresql+asyncpg"
    ):
        url = url.set(drivername="postgresql+asyncpg")
    elif driver == "sqlite":
        url = url.set(drivername="sqlite+aiosqlite")

    if url.drivername == "postgresql+asyncpg":
        query = dict(url.query)
        url_sslmode = query.pop("sslmode", None)
        if url_sslmode is not None:
            translated = _translate_sslmode(url_sslmode)
            if translated is not None:
                query["ssl"] = translated
        elif sslmode and "ssl" not in query:
            translated = _translate_sslmode(sslmode)
            if translated is not None:
                query["ssl"] = translated
        if query != url.query:
            url = url.set(query=query)

    return url.render_as_string(hide_password=False)


def _pg_env_database_url(env: Mapping[str, str]) -> Optional[str]:
    """Construct a Postgres URL from libpq-style PG* env vars."""

    host = env.get("PGHOST")
    database = env.get("PGDATABASE")
    user = env.get("PGUSER")

    if not (host and database and user):
        return None

    port = env.get("PGPORT")
    password = env.get("PGPASSWORD") or None

    query: dict[str, str] = {}
    sslmode = env.get("PGSSLMODE")
    if sslmode:
        translated = _translate_sslmode(sslmode)
        if translated is not None:
            query["ssl"] = translated

    try:
        port_value = int(port) if port is not None else None
    except (TypeError, ValueError):
        port_value = None

    return URL.create(
        drivername="postgresql+asyncpg",
        username=user,
        password=password,
        host=host,
        port=port_value,
        database=database,
        query=query,
    ).render_as_string(hide_password=False)


def database_url_from_env(env: Mapping[str, str]) -> Optional[str]:
    """Resolve the preferred database URL from environment variables."""

    for key in ("DATABASE_URL", "POSTGRES_URL"):
        normalized = normalize_database_url(env.get(key), sslmode=env.get("PGSSLMODE"))
        if normalized:
            return normalized

    return _pg_env_database_url(env)


def safe_url(database_url: str) -> str:
    """Render a URL with its password masked, for log output."""

    try:
        return make_url(database_url).render_as_string(hide_password=True)
    except ArgumentError:
        return "<unparseable database url>"


def build_engine(
    database_url: str,
    *,
    pool_recycle: int = 300,
    connect_timeout: float = 5.0,
    echo: bool = False,
) -> AsyncEngine:
    # asyncpg and sqlite3 both take a ``timeout`` connect argument
    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_recycle=pool_recycle,
        connect_args={"timeout": connect_timeout},
    )


def build_session_factory(bind_engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(
        bind=bind_engine,
        class_=AsyncSession,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


async def init_models(engine: AsyncEngine) -> None:
    """
    Create the mapped tables. Only meant for local/test databases; production
    schemas come from migrations/.
    """

    # Ensure SQLAlchemy knows about every mapped class
    import events_api.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def ping(engine: AsyncEngine) -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def wait_for_database(
    engine: AsyncEngine,
    *,
    max_attempts: int = 10,
    base_delay: float = 1.0,
    timeout: float = 5.0,
) -> None:
    """Ping the database until it answers, with capped exponential backoff."""

    attempt = 0
    while True:
        attempt += 1
        try:
            await asyncio.wait_for(ping(engine), timeout=timeout)
        except (OperationalError, DBAPIError, OSError, asyncio.TimeoutError) as exc:
            if attempt >= max_attempts:
                logger.error("Database not reachable after %s attempts", attempt)
                raise

            wait_time = base_delay * min(2 ** (attempt - 1), 8)
            logger.warning(
                "Database not ready (attempt %s/%s): %r. Retrying in %.1f seconds...",
                attempt,
                max_attempts,
                exc,
                wait_time,
            )
            await asyncio.sleep(wait_time)
        else:
            logger.info("Connected to the database (%s)", engine.url.render_as_string(hide_password=True))
            return
