"""Event mutation orchestration: single vs. series edits, deletes and moves."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import replace
from datetime import date, timedelta
from typing import Protocol, TypeVar

from .config import CalendarConfig
from .const import (
    LEVEL_ERROR,
    LEVEL_SUCCESS,
    MSG_DELETE_FAILED,
    MSG_EVENT_ADDED,
    MSG_EVENT_DELETED,
    MSG_EVENT_UPDATED,
    MSG_LOAD_FAILED,
    MSG_SAVE_FAILED,
)
from .exceptions import CalendarError
from .models import Event, EventForm, Scope, SeriesUpdate, as_date
from .overlap import find_overlaps, find_series_overlaps
from .recurrence import build_occurrences
from .series import find_related_series
from .validation import validate_event

_LOGGER = logging.getLogger(__name__)

_T = TypeVar("_T")

MessageCallback = Callable[[str, str], None]


class EventStore(Protocol):
    """Persistence collaborator consumed by ``EventOperations``.

    ``event_calendar.api.EventsApiClient`` implements it over HTTP.
    """

    async def async_get_events(self) -> list[Event]: ...

    async def async_create_event(self, form: EventForm) -> Event: ...

    async def async_create_events(self, forms: Sequence[EventForm]) -> list[Event]: ...

    async def async_update_event(self, event: Event) -> Event: ...

    async def async_update_events(self, events: Sequence[Event]) -> None: ...

    async def async_update_series(self, repeat_id: str, update: SeriesUpdate) -> None: ...

    async def async_delete_event(self, event_id: str) -> None: ...

    async def async_delete_events(self, event_ids: Sequence[str]) -> None: ...

    async def async_delete_series(self, repeat_id: str) -> None: ...


def shift_date(day: date | str, offset_days: int) -> str:
    """Move an ISO date by a whole number of days."""
    return (as_date(day) + timedelta(days=offset_days)).isoformat()


def apply_series_edit(
    members: Sequence[Event],
    original: Event,
    updated: Event,
) -> list[Event]:
    """Apply an edit of one occurrence to every member of its series.

    Text fields and the notification time are copied from ``updated``. If the
    edited occurrence moved, every member moves by the same number of days,
    so the spacing between occurrences is kept as it is.
    """
    offset = (as_date(updated.date) - as_date(original.date)).days
    return [
        replace(
            ev,
            title=updated.title,
            description=updated.description,
            location=updated.location,
            category=updated.category,
            notification_time=updated.notification_time,
            date=shift_date(ev.date, offset) if offset else ev.date,
        )
        for ev in members
    ]


class EventOperations:
    """Holds the current event list and applies user mutations to the store.

    The list only changes after a successful reload from the store. A failed
    write reports a message, leaves the list as it was and re-raises.
    Validation happens before anything is sent.
    """

    def __init__(
        self,
        store: EventStore,
        *,
        config: CalendarConfig | None = None,
        on_message: MessageCallback | None = None,
    ) -> None:
        self._store = store
        self._config = config or CalendarConfig()
        self._on_message = on_message
        self._events: tuple[Event, ...] = ()

    @property
    def events(self) -> tuple[Event, ...]:
        """The last successfully loaded event list."""
        return self._events

    # ------------------------------------------------------------------ #
    #  Queries
    # ------------------------------------------------------------------ #

    def find_related_series(self, event: Event) -> list[Event]:
        """Series members of ``event`` in the current list (empty if none)."""
        return find_related_series(event, self._events)

    def find_overlaps(self, candidate: Event | EventForm) -> list[Event]:
        """Current events overlapping a candidate about to be saved.

        A recurring form is checked occurrence by occurrence.
        """
        if isinstance(candidate, EventForm) and candidate.repeat.is_recurring:
            return find_series_overlaps(self._occurrences(candidate), self._events)
        return find_overlaps(candidate, self._events)

    # ------------------------------------------------------------------ #
    #  Loading and creation
    # ------------------------------------------------------------------ #

    async def async_fetch_events(self) -> tuple[Event, ...]:
        """Reload the full event list from the store."""
        try:
            events = await self._store.async_get_events()
        except CalendarError:
            _LOGGER.warning("Loading events failed", exc_info=True)
            self._notify(MSG_LOAD_FAILED, LEVEL_ERROR)
            raise
        self._events = tuple(events)
        _LOGGER.debug("Loaded %d events", len(self._events))
        return self._events

    async def async_save_event(self, item: EventForm | Event) -> Event:
        """Create a new event from a form, or replace a stored event."""
        validate_event(item)
        if isinstance(item, Event):
            return await self._write(
                self._store.async_update_event(item),
                failure=MSG_SAVE_FAILED,
                success=MSG_EVENT_UPDATED,
            )
        return await self._write(
            self._store.async_create_event(item),
            failure=MSG_SAVE_FAILED,
            success=MSG_EVENT_ADDED,
        )

    async def async_create_recurring_event(self, form: EventForm) -> list[Event]:
        """Materialize every occurrence of ``form`` and create them as one batch."""
        validate_event(form)
        if not form.repeat.is_recurring:
            return [await self.async_save_event(form)]
        occurrences = self._occurrences(form)
        return await self._write(
            self._store.async_create_events(occurrences),
            failure=MSG_SAVE_FAILED,
            success=MSG_EVENT_ADDED,
        )

    # ------------------------------------------------------------------ #
    #  Edit / move / delete
    # ------------------------------------------------------------------ #

    async def async_edit_event(
        self,
        updated: Event,
        scope: Scope | str = Scope.SINGLE,
    ) -> None:
        """Save an edited occurrence, alone or together with its series.

        A single-scope edit (or an edit of an event with no series) detaches
        the occurrence by resetting its repeat to ``none``.
        """
        validate_event(updated)
        original = next((ev for ev in self._events if ev.id == updated.id), None)
        # An event unknown locally has no series here; the store decides
        # whether it still exists.
        related = self.find_related_series(original) if original else []
        if original is None or not related or Scope(scope) is Scope.SINGLE:
            await self._write(
                self._store.async_update_event(updated.detached()),
                failure=MSG_SAVE_FAILED,
                success=MSG_EVENT_UPDATED,
            )
            return

        await self._write(
            self._update_series(original, updated, related),
            failure=MSG_SAVE_FAILED,
            success=MSG_EVENT_UPDATED,
        )

    async def async_move_event(
        self,
        target: Event,
        new_date: date | str,
        scope: Scope | str = Scope.SINGLE,
    ) -> None:
        """Drag an occurrence to another day; same scoping as an edit."""
        moved = replace(target, date=as_date(new_date).isoformat())
        if moved.date == target.date:
            return
        await self.async_edit_event(moved, scope)

    async def async_delete_event(
        self,
        target: Event,
        scope: Scope | str = Scope.SINGLE,
    ) -> None:
        """Delete an occurrence, or every member of its series.

        Without a series, a series-scope delete removes just ``target``.
        """
        related = self.find_related_series(target)

        if not related or Scope(scope) is Scope.SINGLE:
            operation = self._store.async_delete_event(target.id)
        elif target.repeat.id:
            operation = self._store.async_delete_series(target.repeat.id)
        else:
            operation = self._store.async_delete_events([ev.id for ev in related])

        await self._write(
            operation,
            failure=MSG_DELETE_FAILED,
            success=MSG_EVENT_DELETED,
        )

    # ------------------------------------------------------------------ #
    #  Internals
    # ------------------------------------------------------------------ #

    def _occurrences(self, form: EventForm) -> list[EventForm]:
        until = None
        if not form.repeat.end_date:
            until = as_date(form.date) + timedelta(
                days=self._config.recurrence_horizon_days
            )
        return build_occurrences(
            form, until=until, max_count=self._config.max_occurrences
        )

    async def _update_series(
        self,
        original: Event,
        updated: Event,
        related: Sequence[Event],
    ) -> None:
        date_changed = original.date != updated.date

        if original.repeat.id:
            # The store shifts every member by the offset of the reference event.
            update = SeriesUpdate(
                title=updated.title,
                description=updated.description,
                location=updated.location,
                category=updated.category,
                notification_time=updated.notification_time,
                date=updated.date if date_changed else None,
                id=original.id if date_changed else None,
            )
            await self._store.async_update_series(original.repeat.id, update)
            return

        await self._store.async_update_events(
            apply_series_edit(related, original, updated)
        )

    async def _write(
        self,
        operation: Awaitable[_T],
        *,
        failure: str,
        success: str,
    ) -> _T:
        try:
            result = await operation
        except CalendarError as err:
            _LOGGER.warning("%s: %s", failure, err)
            self._notify(failure, LEVEL_ERROR)
            raise
        self._notify(success, LEVEL_SUCCESS)
        # A failed reload is reported by async_fetch_events; the write stands.
        with contextlib.suppress(CalendarError):
            await self.async_fetch_events()
        return result

    def _notify(self, message: str, level: str) -> None:
        if self._on_message is not None:
            self._on_message(message, level)
