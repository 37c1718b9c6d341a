from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Awaitable, Dict, List, Optional, TypeVar
from uuid import UUID

from sqlalchemy import insert, select
from sqlalchemy.engine import Row
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from events_api.exceptions import EventNotFoundError, RepositoryError, RepositoryTimeoutError
from events_api.models.event import EventRecord
from events_api.schemas import Event, as_utc

logger = logging.getLogger("events.repository")

T = TypeVar("T")

events_table = EventRecord.__table__


async def run_with_deadline(operation: Awaitable[T], timeout: Optional[float], action: str) -> T:
    """Await ``operation``, cancelling it once ``timeout`` seconds have elapsed.

    Cancellation is not a rollback: a write whose commit already reached the
    database before the deadline stays committed even though the caller gets
    ``RepositoryTimeoutError``.
    """

    if timeout is None:
        return await operation
    try:
        return await asyncio.wait_for(operation, timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise RepositoryTimeoutError(f"{action} timed out after {timeout:.1f}s") from exc


class EventRepository:
    """Storage operations the HTTP layer relies on.

    Every call takes an optional ``timeout`` in seconds. Implementations raise
    ``RepositoryTimeoutError`` when it expires, ``EventNotFoundError`` for
    unknown ids and ``RepositoryError`` for anything else.
    """

    backend_name = "base"

    async def create_event(self, event: Event, *, timeout: Optional[float] = None) -> Event:  # pragma: no cover
        raise NotImplementedError

    async def get_events(self, *, timeout: Optional[float] = None) -> List[Event]:  # pragma: no cover
        raise NotImplementedError

    async def get_event_by_id(self, event_id: UUID, *, timeout: Optional[float] = None) -> Event:  # pragma: no cover
        raise NotImplementedError


def _to_event(row: Row) -> Event:
    return Event.model_validate(dict(row._mapping))


class SQLEventRepository(EventRepository):
    """Events stored in the ``events`` table through an async SQLAlchemy session."""

    backend_name = "sql"

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    async def create_event(self, event: Event, *, timeout: Optional[float] = None) -> Event:
        # id and timestamps are assigned by storage; the record's own values are not written
        stmt = (
            insert(events_table)
            .values(
                title=event.title,
                description=event.description,
                start_time=as_utc(event.start_time),
                end_time=as_utc(event.end_time),
            )
            .returning(*events_table.c)
        )

        async def _run() -> Row:
            async with self._session_factory() as session:
                row = (await session.execute(stmt)).one()
                await session.commit()
                return row

        try:
            row = await run_with_deadline(_run(), timeout, "create event")
        except SQLAlchemyError as exc:
            raise RepositoryError(f"failed to create event: {exc}") from exc

        created = _to_event(row)
        logger.info("Event created successfully with ID: %s", created.id)
        return created

    async def get_events(self, *, timeout: Optional[float] = None) -> List[Event]:
        stmt = select(events_table).order_by(
            events_table.c.start_time.asc(), events_table.c.created_at.asc()
        )

        async def _run() -> List[Row]:
            async with self._session_factory() as session:
                return list((await session.execute(stmt)).all())

        try:
            rows = await run_with_deadline(_run(), timeout, "list events")
        except SQLAlchemyError as exc:
            raise RepositoryError(f"failed to query events: {exc}") from exc

        events = [_to_event(row) for row in rows]
        logger.info("Retrieved %d events", len(events))
        return events

    async def get_event_by_id(self, event_id: UUID, *, timeout: Optional[float] = None) -> Event:
        stmt = select(events_table).where(events_table.c.id == event_id)

        async def _run() -> Optional[Row]:
            async with self._session_factory() as session:
                return (await session.execute(stmt)).first()

        try:
            row = await run_with_deadline(_run(), timeout, "get event")
        except SQLAlchemyError as exc:
            raise RepositoryError(f"failed to get event by ID: {exc}") from exc

        if row is None:
            raise EventNotFoundError(event_id)
        return _to_event(row)


class InMemoryEventRepository(EventRepository):
    """Dictionary-backed repository for tests and local experiments.

    ``latency`` delays every call, which makes deadline handling observable.
    """

    backend_name = "memory"

    def __init__(self, *, latency: float = 0.0) -> None:
        self.latency = latency
        self._events: Dict[UUID, Event] = {}

    async def _pause(self) -> None:
        if self.latency > 0:
            await asyncio.sleep(self.latency)

    async def create_event(self, event: Event, *, timeout: Optional[float] = None) -> Event:
        async def _run() -> Event:
            await self._pause()
            event_id = uuid.uuid4()
            while event_id in self._events:
                event_id = uuid.uuid4()
            now = datetime.now(timezone.utc)
            stored = Event(
                id=event_id,
                title=event.title,
                description=event.description,
                start_time=event.start_time,
                end_time=event.end_time,
                created_at=now,
                updated_at=now,
            )
            self._events[event_id] = stored
            return stored

        created = await run_with_deadline(_run(), timeout, "create event")
        return created.model_copy()

    async def get_events(self, *, timeout: Optional[float] = None) -> List[Event]:
        async def _run() -> List[Event]:
            await self._pause()
            ordered = sorted(self._events.values(), key=lambda e: (e.start_time, e.created_at))
            return [event.model_copy() for event in ordered]

        return await run_with_deadline(_run(), timeout, "list events")

    async def get_event_by_id(self, event_id: UUID, *, timeout: Optional[float] = None) -> Event:
        async def _run() -> Event:
            await self._pause()
            stored = self._events.get(event_id)
            if stored is None:
                raise EventNotFoundError(event_id)
            return stored.model_copy()

        return await run_with_deadline(_run(), timeout, "get event")


__all__ = [
    "EventRepository",
    "InMemoryEventRepository",
    "SQLEventRepository",
    "run_with_deadline",
]
