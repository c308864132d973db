"""Data models for calendar events, recurrence definitions and notifications."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from typing import Any

from .const import DEFAULT_CATEGORY, DEFAULT_NOTIFICATION_MINUTES


class RepeatType(str, enum.Enum):
    """Recurrence frequencies understood by the expander."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Scope(str, enum.Enum):
    """Whether a mutation targets one occurrence or its whole series."""

    SINGLE = "single"
    SERIES = "series"


class ViewType(str, enum.Enum):
    """Calendar views that bound the visible event list."""

    WEEK = "week"
    MONTH = "month"


def as_date(value: date | str) -> date:
    """Return ``value`` as a date, parsing ISO ``YYYY-MM-DD`` strings."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


@dataclass(frozen=True)
class RepeatInfo:
    """Recurrence definition attached to an event.

    ``type`` is kept as the raw string so that unknown values coming from the
    store survive parsing; the expander rejects them.
    """

    type: str = RepeatType.NONE.value
    interval: int = 0
    end_date: str | None = None
    id: str | None = None

    @classmethod
    def none(cls) -> RepeatInfo:
        """The repeat value of a standalone event."""
        return cls(type=RepeatType.NONE.value, interval=0)

    @classmethod
    def from_api_response(cls, data: dict[str, Any] | None) -> RepeatInfo:
        """Construct from a decamelized API response dict."""
        if not data:
            return cls.none()
        return cls(
            type=str(data.get("type", RepeatType.NONE.value)),
            interval=int(data.get("interval") or 0),
            end_date=data.get("end_date") or None,
            id=data.get("id") or None,
        )

    @property
    def is_recurring(self) -> bool:
        """Whether this definition produces more than one occurrence."""
        return self.type != RepeatType.NONE.value and self.interval > 0

    def to_api_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "interval": self.interval,
            "end_date": self.end_date,
            "id": self.id,
        }


@dataclass(frozen=True)
class EventForm:
    """Data for creating an event (no identity yet).

    Use ``dataclasses.replace()`` to derive modified copies.
    """

    title: str
    date: str
    start_time: str
    end_time: str
    description: str = ""
    location: str = ""
    category: str = DEFAULT_CATEGORY
    repeat: RepeatInfo = field(default_factory=RepeatInfo.none)
    notification_time: int = DEFAULT_NOTIFICATION_MINUTES

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> EventForm:
        """Construct from a decamelized dict."""
        return cls(
            title=data.get("title", ""),
            date=data["date"],
            start_time=data["start_time"],
            end_time=data["end_time"],
            description=data.get("description") or "",
            location=data.get("location") or "",
            category=data.get("category") or DEFAULT_CATEGORY,
            repeat=RepeatInfo.from_api_response(data.get("repeat")),
            notification_time=int(data.get("notification_time") or 0),
        )

    @property
    def start_datetime(self) -> datetime:
        """Local wall-clock start of the event."""
        return _combine(self.date, self.start_time)

    def with_id(self, event_id: str) -> Event:
        """Attach a store-assigned identity."""
        return Event(
            id=event_id,
            title=self.title,
            date=self.date,
            start_time=self.start_time,
            end_time=self.end_time,
            description=self.description,
            location=self.location,
            category=self.category,
            repeat=self.repeat,
            notification_time=self.notification_time,
        )

    def to_api_dict(self) -> dict[str, Any]:
        """Convert to a dict for the API request body (snake_case)."""
        return {
            "title": self.title,
            "date": self.date,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "description": self.description,
            "location": self.location,
            "category": self.category,
            "repeat": self.repeat.to_api_dict(),
            "notification_time": self.notification_time,
        }


@dataclass(frozen=True)
class Event:
    """A stored calendar event occurrence."""

    id: str
    title: str
    date: str
    start_time: str
    end_time: str
    description: str = ""
    location: str = ""
    category: str = DEFAULT_CATEGORY
    repeat: RepeatInfo = field(default_factory=RepeatInfo.none)
    notification_time: int = DEFAULT_NOTIFICATION_MINUTES

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> Event:
        """Construct from a decamelized API response dict."""
        return EventForm.from_api_response(data).with_id(str(data["id"]))

    @property
    def is_recurring(self) -> bool:
        return self.repeat.is_recurring

    @property
    def start_datetime(self) -> datetime:
        """Local wall-clock start of the event."""
        return _combine(self.date, self.start_time)

    def to_form(self) -> EventForm:
        """Drop the identity, keeping every other field."""
        return EventForm(
            title=self.title,
            date=self.date,
            start_time=self.start_time,
            end_time=self.end_time,
            description=self.description,
            location=self.location,
            category=self.category,
            repeat=self.repeat,
            notification_time=self.notification_time,
        )

    def detached(self) -> Event:
        """Copy of this occurrence with its repeat reset to ``none``."""
        return replace(self, repeat=RepeatInfo.none())

    def to_api_dict(self) -> dict[str, Any]:
        return {"id": self.id, **self.to_form().to_api_dict()}


@dataclass(frozen=True)
class SeriesUpdate:
    """Partial-field update applied to every member of a series.

    When ``date`` is given together with ``id`` (the edited occurrence), the
    store shifts every member by the offset between that occurrence's old
    date and ``date``.
    """

    title: str | None = None
    description: str | None = None
    location: str | None = None
    category: str | None = None
    notification_time: int | None = None
    date: str | None = None
    id: str | None = None

    def to_api_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "location": self.location,
            "category": self.category,
            "notification_time": self.notification_time,
            "date": self.date,
            "id": self.id,
        }


@dataclass(frozen=True)
class Notification:
    """A one-time reminder fired for an upcoming event."""

    event_id: str
    message: str
    fired_at: datetime


def _combine(day: str, hhmm: str) -> datetime:
    return datetime.combine(as_date(day), time.fromisoformat(hhmm))
