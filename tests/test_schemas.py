from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from events_api.schemas import Event, EventCreate, as_utc


def _payload(**overrides):
    data = {
        "title": "Go Conference",
        "start_time": "2025-08-22T10:00:00Z",
        "end_time": "2025-08-22T12:00:00Z",
    }
    data.update(overrides)
    return data


def test_valid_payload_without_description():
    payload = EventCreate.model_validate(_payload())

    assert payload.title == "Go Conference"
    assert payload.description is None
    assert payload.start_time == datetime(2025, 8, 22, 10, tzinfo=timezone.utc)


def test_empty_description_is_kept_distinct_from_missing():
    assert EventCreate.model_validate(_payload(description="")).description == ""


@pytest.mark.parametrize("title", ["", "   ", "\t\n"])
def test_blank_titles_rejected(title):
    with pytest.raises(ValidationError) as excinfo:
        EventCreate.model_validate(_payload(title=title))
    assert "title is required" in str(excinfo.value)


def test_title_length_limit():
    EventCreate.model_validate(_payload(title="x" * 100))
    with pytest.raises(ValidationError) as excinfo:
        EventCreate.model_validate(_payload(title="x" * 101))
    assert "title must be <= 100 characters" in str(excinfo.value)


def test_unknown_fields_rejected():
    with pytest.raises(ValidationError):
        EventCreate.model_validate(_payload(location="Room 1"))


def test_missing_end_time_rejected():
    data = _payload()
    del data["end_time"]
    with pytest.raises(ValidationError):
        EventCreate.model_validate(data)


def test_timestamps_without_offset_rejected():
    with pytest.raises(ValidationError):
        EventCreate.model_validate(_payload(start_time="2025-08-22T10:00:00"))


def test_zero_timestamp_rejected():
    with pytest.raises(ValidationError) as excinfo:
        EventCreate.model_validate(_payload(start_time="0001-01-01T00:00:00Z"))
    assert "required" in str(excinfo.value)


@pytest.mark.parametrize(
    "start, end",
    [
        ("2025-08-22T12:00:00Z", "2025-08-22T10:00:00Z"),
        ("2025-08-22T10:00:00Z", "2025-08-22T10:00:00Z"),
        # same instant written with different offsets
        ("2025-08-22T12:00:00+02:00", "2025-08-22T10:00:00Z"),
    ],
)
def test_start_must_precede_end(start, end):
    with pytest.raises(ValidationError) as excinfo:
        EventCreate.model_validate(_payload(start_time=start, end_time=end))
    assert "start_time must be before end_time" in str(excinfo.value)


def test_to_event_normalizes_to_utc_and_assigns_id():
    payload = EventCreate.model_validate(
        _payload(start_time="2025-08-22T12:00:00+02:00", end_time="2025-08-22T14:00:00+02:00")
    )

    first = payload.to_event()
    second = payload.to_event()

    assert first.id != second.id
    assert first.start_time == datetime(2025, 8, 22, 10, tzinfo=timezone.utc)
    assert first.start_time.utcoffset() == timedelta(0)
    assert first.created_at == first.updated_at


def test_event_treats_naive_timestamps_as_utc():
    naive = datetime(2025, 8, 22, 10, 0)
    event = Event(
        id="8f14e45f-ceea-4c6a-9b0e-1f2d3c4b5a69",
        title="t",
        start_time=naive,
        end_time=naive + timedelta(hours=1),
        created_at=naive,
        updated_at=naive,
    )

    assert event.start_time.tzinfo == timezone.utc
    assert event.model_dump(mode="json")["start_time"] == "2025-08-22T10:00:00Z"
    assert event.model_dump(mode="json")["description"] is None


def test_as_utc_converts_offsets():
    plus_two = timezone(timedelta(hours=2))
    assert as_utc(datetime(2025, 1, 1, 2, tzinfo=plus_two)) == datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "field, value",
    [
        ("start_time", "0001-01-01T00:30:00+01:00"),
        ("end_time", "9999-12-31T23:30:00-01:00"),
    ],
)
def test_timestamps_outside_utc_range_rejected(field, value):
    with pytest.raises(ValidationError) as excinfo:
        EventCreate.model_validate(_payload(**{field: value}))
    assert "out of range" in str(excinfo.value)


@pytest.mark.parametrize(
    "value",
    [1755856800, 1755856800.0, "2025-08-22 10:00:00Z", "2025-08-22", "22/08/2025 10:00"],
)
def test_non_rfc3339_timestamps_rejected(value):
    with pytest.raises(ValidationError) as excinfo:
        EventCreate.model_validate(_payload(start_time=value))
    assert "RFC3339" in str(excinfo.value)


def test_rfc3339_variants_accepted():
    payload = EventCreate.model_validate(
        _payload(start_time="2025-08-22T10:00:00.250Z", end_time="2025-08-22T12:00:00-03:00")
    )
    assert payload.start_time == datetime(2025, 8, 22, 10, 0, 0, 250000, tzinfo=timezone.utc)
    assert as_utc(payload.end_time) == datetime(2025, 8, 22, 15, tzinfo=timezone.utc)


def test_datetime_objects_from_python_callers_accepted():
    start = datetime(2025, 8, 22, 10, tzinfo=timezone.utc)
    payload = EventCreate(title="t", start_time=start, end_time=start + timedelta(hours=1))
    assert payload.start_time == start
