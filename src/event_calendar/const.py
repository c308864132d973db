"""Constants for the event calendar core."""

from typing import Final

ENV_PREFIX: Final = "EVENT_CALENDAR_"

DEFAULT_BASE_URL: Final = "http://localhost:3000"
DEFAULT_REQUEST_TIMEOUT_SECONDS: Final = 10.0
DEFAULT_POLL_INTERVAL_SECONDS: Final = 1.0
DEFAULT_RECURRENCE_HORIZON_DAYS: Final = 365
DEFAULT_MAX_OCCURRENCES: Final = 500

DEFAULT_CATEGORY: Final = "Work"
DEFAULT_NOTIFICATION_MINUTES: Final = 10

MSG_EVENT_ADDED: Final = "Event added"
MSG_EVENT_UPDATED: Final = "Event updated"
MSG_EVENT_DELETED: Final = "Event deleted"
MSG_SAVE_FAILED: Final = "Failed to save event"
MSG_DELETE_FAILED: Final = "Failed to delete event"
MSG_LOAD_FAILED: Final = "Failed to load events"

LEVEL_SUCCESS: Final = "success"
LEVEL_ERROR: Final = "error"
