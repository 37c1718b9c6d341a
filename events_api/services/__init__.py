from events_api.services.event_repository import (
    EventRepository,
    InMemoryEventRepository,
    SQLEventRepository,
)

__all__ = ["EventRepository", "InMemoryEventRepository", "SQLEventRepository"]
