import asyncio
from datetime import datetime, timedelta, timezone

from events_api.config import load_settings
from events_api.database import build_engine, build_session_factory, init_models
from events_api.exceptions import ConfigurationError
from events_api.schemas import EventCreate
from events_api.services.event_repository import SQLEventRepository

# (title, description, days from now, duration in hours)
SAMPLE_EVENTS = [
    ("Go Conference", "A conference about Go programming language", 1, 3),
    ("Docker Workshop", "Practical workshop on Docker and containers", 2, 4),
    ("PostgreSQL Meetup", "Database developers meetup and networking", 3, 2),
    ("DevOps Summit", "Annual DevOps best practices and tools summit", 4, 6),
    ("JavaScript Bootcamp", "Intensive training on modern JavaScript frameworks", 5, 8),
]


async def main() -> None:
    """Insert a few sample events; SQLite databases get their tables created first."""

    settings = load_settings()
    if not settings.database_url:
        raise ConfigurationError("DATABASE_URL is not set")

    engine = build_engine(settings.database_url, echo=settings.echo_sql)
    try:
        if engine.dialect.name == "sqlite":
            await init_models(engine)
        repository = SQLEventRepository(build_session_factory(engine))

        now = datetime.now(timezone.utc)
        for title, description, days, hours in SAMPLE_EVENTS:
            start = now + timedelta(days=days)
            payload = EventCreate(
                title=title,
                description=description,
                start_time=start,
                end_time=start + timedelta(hours=hours),
            )
            await repository.create_event(payload.to_event(), timeout=settings.request_timeout)
    finally:
        await engine.dispose()
    print(f"Seeded {len(SAMPLE_EVENTS)} sample events.")


if __name__ == "__main__":
    asyncio.run(main())
