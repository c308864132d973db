"""Validation of event payloads before they reach the store."""

from __future__ import annotations

import re
from datetime import date
from typing import Any

import voluptuous as vol

from .exceptions import InvalidRecurrenceError, ValidationError
from .models import Event, EventForm, RepeatType

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _iso_date(value: Any) -> str:
    if not isinstance(value, str):
        raise vol.Invalid("expected an ISO date string")
    try:
        date.fromisoformat(value)
    except ValueError as err:
        raise vol.Invalid(f"invalid date {value!r}") from err
    return value


def _hhmm(value: Any) -> str:
    if not isinstance(value, str) or not _TIME_RE.match(value):
        raise vol.Invalid(f"invalid time {value!r}, expected HH:MM")
    return value


REPEAT_SCHEMA = vol.Schema(
    {
        vol.Required("type"): vol.In([t.value for t in RepeatType]),
        vol.Required("interval"): vol.All(int, vol.Range(min=0)),
        vol.Optional("end_date"): vol.Any(None, _iso_date),
        vol.Optional("id"): vol.Any(None, str),
    }
)

EVENT_SCHEMA = vol.Schema(
    {
        vol.Optional("id"): str,
        vol.Required("title"): vol.All(str, vol.Length(min=1)),
        vol.Required("date"): _iso_date,
        vol.Required("start_time"): _hhmm,
        vol.Required("end_time"): _hhmm,
        vol.Required("description"): str,
        vol.Required("location"): str,
        vol.Required("category"): str,
        vol.Required("repeat"): REPEAT_SCHEMA,
        vol.Required("notification_time"): vol.All(int, vol.Range(min=0)),
    }
)


def validate_time_range(start_time: str, end_time: str) -> None:
    """Reject ranges where the start is not strictly before the end.

    Zero-padded ``HH:MM`` strings compare correctly as text.
    """
    if start_time >= end_time:
        raise ValidationError(
            "Start time must be earlier than end time.", field="start_time"
        )


def validate_event(event: EventForm | Event) -> None:
    """Validate an event form or stored event.

    Raises:
        InvalidRecurrenceError: On an unknown repeat type or an interval
            below 1 for a repeating event.
        ValidationError: On any other malformed field.
    """
    try:
        EVENT_SCHEMA(event.to_api_dict())
    except vol.MultipleInvalid as err:
        path = [str(p) for p in err.path]
        message = f"{'.'.join(path) or 'event'}: {err.msg}"
        if path and path[0] == "repeat":
            raise InvalidRecurrenceError(message, field=".".join(path)) from err
        raise ValidationError(message, field=".".join(path) or None) from err

    validate_time_range(event.start_time, event.end_time)

    repeat = event.repeat
    if repeat.type != RepeatType.NONE.value:
        if repeat.interval < 1:
            raise InvalidRecurrenceError(
                f"Repeat interval must be at least 1, got {repeat.interval}",
                field="repeat.interval",
            )
        if repeat.end_date is not None and repeat.end_date < event.date:
            raise ValidationError(
                "Repeat end date must not be before the event date.",
                field="repeat.end_date",
            )
