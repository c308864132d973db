"""Exception hierarchy for the event calendar core."""

from __future__ import annotations


class CalendarError(Exception):
    """Base exception for all event calendar errors."""


class ValidationError(CalendarError):
    """An event or recurrence definition was rejected before persistence.

    Attributes:
        field: Name of the offending field, if known.
    """

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class InvalidRecurrenceError(ValidationError):
    """Recurrence type is unknown or its interval is not a positive integer."""


class NotFoundError(CalendarError):
    """The event or series targeted by an update/delete no longer exists."""


class TransportError(CalendarError):
    """The persistence service could not complete the request."""


class ApiConnectionError(TransportError):
    """API is unreachable (network error, DNS, timeout)."""


class ApiResponseError(TransportError):
    """API returned an unexpected error response.

    Attributes:
        status_code: HTTP status code, if available.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
