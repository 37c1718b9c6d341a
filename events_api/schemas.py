# events_api/schemas.py
# ------------------------------------------------------------
# Pydantic v2 schemas for the events API
# ------------------------------------------------------------
import re
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import AwareDatetime, BaseModel, ConfigDict, field_validator, model_validator

TITLE_MAX_LENGTH = 100

_RFC3339_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})$"
)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` in UTC; naive values are taken to already be UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ============================================================
# Input
# ============================================================

class EventCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str
    description: Optional[str] = None
    start_time: AwareDatetime
    end_time: AwareDatetime

    @field_validator("title")
    @classmethod
    def _check_title(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title is required")
        if len(value) > TITLE_MAX_LENGTH:
            raise ValueError(f"title must be <= {TITLE_MAX_LENGTH} characters")
        return value

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _require_rfc3339(cls, value: Any) -> Any:
        # datetime objects come from Python callers; JSON input must be an RFC3339 string
        if isinstance(value, datetime):
            return value
        if not isinstance(value, str) or not _RFC3339_RE.match(value):
            raise ValueError("start_time and end_time must be RFC3339 timestamps")
        return value

    @field_validator("start_time", "end_time")
    @classmethod
    def _check_time_range(cls, value: datetime) -> datetime:
        # 0001-01-01T00:00:00 is what "unset" timestamps serialize to in many clients
        if value.replace(tzinfo=None) == datetime.min:
            raise ValueError("start_time and end_time are required (RFC3339)")
        try:
            as_utc(value)
        except OverflowError:
            raise ValueError("start_time and end_time are out of range")
        return value

    @model_validator(mode="after")
    def _check_window(self) -> "EventCreate":
        if not self.start_time < self.end_time:
            raise ValueError("start_time must be before end_time")
        return self

    def to_event(self) -> "Event":
        """Build a record with a fresh id and UTC-normalized timestamps."""

        now = datetime.now(timezone.utc)
        return Event(
            id=uuid4(),
            title=self.title,
            description=self.description,
            start_time=as_utc(self.start_time),
            end_time=as_utc(self.end_time),
            created_at=now,
            updated_at=now,
        )


# ============================================================
# Records
# ============================================================

class Event(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    created_at: datetime
    updated_at: datetime

    @field_validator("start_time", "end_time", "created_at", "updated_at")
    @classmethod
    def _normalize_timestamps(cls, value: datetime) -> datetime:
        return as_utc(value)
