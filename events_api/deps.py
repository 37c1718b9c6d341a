from fastapi import Request

from events_api.config import Settings
from events_api.services.event_repository import EventRepository


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_event_repository(request: Request) -> EventRepository:
    """FastAPI dependency returning the repository built at startup."""

    return request.app.state.event_repository
