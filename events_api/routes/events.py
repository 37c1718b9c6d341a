# events_api/routes/events.py

import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from events_api.config import Settings
from events_api.deps import get_event_repository, get_settings
from events_api.exceptions import EventNotFoundError, RepositoryError, RepositoryTimeoutError
from events_api.schemas import Event, EventCreate
from events_api.services.event_repository import EventRepository

logger = logging.getLogger("events")

# Only create, list and fetch are routed. PUT/DELETE on /events/{id} fall
# through to the router's 405 response.
router = APIRouter(prefix="/events", tags=["Events"])


@router.post("", response_model=Event, status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: EventCreate,
    repository: EventRepository = Depends(get_event_repository),
    settings: Settings = Depends(get_settings),
):
    try:
        return await repository.create_event(payload.to_event(), timeout=settings.request_timeout)
    except RepositoryTimeoutError as exc:
        logger.warning("Error creating event: %s", exc)
        raise HTTPException(status.HTTP_408_REQUEST_TIMEOUT, "Request timeout")
    except RepositoryError as exc:
        logger.error("Error creating event: %s", exc)
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to create event")


@router.get("", response_model=List[Event])
async def get_events(
    repository: EventRepository = Depends(get_event_repository),
    settings: Settings = Depends(get_settings),
):
    try:
        return await repository.get_events(timeout=settings.request_timeout)
    except RepositoryTimeoutError as exc:
        logger.warning("Error getting events: %s", exc)
        raise HTTPException(status.HTTP_408_REQUEST_TIMEOUT, "Request timeout")
    except RepositoryError as exc:
        logger.error("Error getting events: %s", exc)
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to get events")


@router.get("/{event_id}", response_model=Event)
async def get_event_by_id(
    event_id: str,
    repository: EventRepository = Depends(get_event_repository),
    settings: Settings = Depends(get_settings),
):
    try:
        parsed_id = uuid.UUID(event_id)
    except ValueError:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Invalid UUID format")

    try:
        return await repository.get_event_by_id(parsed_id, timeout=settings.request_timeout)
    except EventNotFoundError:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Event not found")
    except RepositoryTimeoutError as exc:
        logger.warning("Error getting event by ID: %s", exc)
        raise HTTPException(status.HTTP_408_REQUEST_TIMEOUT, "Request timeout")
    except RepositoryError as exc:
        logger.error("Error getting event by ID: %s", exc)
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to get event")
