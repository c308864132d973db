"""Recurring-event, overlap and notification engine for a personal calendar."""

from .config import CalendarConfig, load_config
from .exceptions import (
    ApiConnectionError,
    ApiResponseError,
    CalendarError,
    InvalidRecurrenceError,
    NotFoundError,
    TransportError,
    ValidationError,
)
from .models import (
    Event,
    EventForm,
    Notification,
    RepeatInfo,
    RepeatType,
    Scope,
    SeriesUpdate,
    ViewType,
)
from .notifications import NotificationScheduler, upcoming_notifications
from .operations import EventOperations, EventStore
from .overlap import find_overlaps, find_series_overlaps, is_overlapping
from .recurrence import build_occurrences, expand, expand_between
from .search import filter_by_view, search_events
from .series import find_related_series, group_series, is_recurring, series_key

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ApiConnectionError",
    "ApiResponseError",
    "CalendarConfig",
    "CalendarError",
    "Event",
    "EventForm",
    "EventOperations",
    "EventStore",
    "InvalidRecurrenceError",
    "NotFoundError",
    "Notification",
    "NotificationScheduler",
    "RepeatInfo",
    "RepeatType",
    "Scope",
    "SeriesUpdate",
    "TransportError",
    "ValidationError",
    "ViewType",
    "build_occurrences",
    "expand",
    "expand_between",
    "filter_by_view",
    "find_overlaps",
    "find_related_series",
    "find_series_overlaps",
    "group_series",
    "is_overlapping",
    "is_recurring",
    "load_config",
    "search_events",
    "series_key",
    "upcoming_notifications",
]
