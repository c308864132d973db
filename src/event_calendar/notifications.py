"""One-time reminders for events entering their notification window."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Collection, Iterable, Sequence
from datetime import datetime

from .config import CalendarConfig
from .models import Event, Notification

_LOGGER = logging.getLogger(__name__)


def minutes_until(event: Event, now: datetime) -> float:
    """Minutes from ``now`` until the event starts (negative once started)."""
    return (event.start_datetime - now).total_seconds() / 60


def upcoming_notifications(
    events: Iterable[Event],
    now: datetime,
    notified_ids: Collection[str],
) -> list[Event]:
    """Events whose notification is due at ``now`` and has not fired yet.

    An event is due while ``0 < minutes_until <= notification_time``: the
    upper bound is inclusive, events that already started never fire, and a
    ``notification_time`` of 0 disables the reminder. Events whose date or
    start time cannot be parsed are skipped.
    """
    due: list[Event] = []
    for ev in events:
        if ev.id in notified_ids or ev.notification_time <= 0:
            continue
        try:
            remaining = minutes_until(ev, now)
        except ValueError:
            _LOGGER.debug("Skipping event %s in notification check", ev.id, exc_info=True)
            continue
        if 0 < remaining <= ev.notification_time:
            due.append(ev)
    return due


def notification_message(event: Event) -> str:
    return f"{event.title} starts in {event.notification_time} minutes."


class NotificationScheduler:
    """Polls the current event list and fires each reminder exactly once.

    The notified-id set lives for the lifetime of the scheduler and is only
    cleared by ``reset()``. Events are never mutated; fired state is kept
    here, not on the events.

    Usage::

        scheduler = NotificationScheduler(config=load_config())
        await scheduler.async_start(lambda: operations.events, on_fire=show)
        ...
        await scheduler.async_stop()
    """

    def __init__(
        self,
        poll_interval: float | None = None,
        *,
        config: CalendarConfig | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._config = config or CalendarConfig()
        self._poll_interval = (
            self._config.poll_interval if poll_interval is None else poll_interval
        )
        self._clock = clock
        self._notified: set[str] = set()
        self._notifications: list[Notification] = []
        self._task: asyncio.Task[None] | None = None

    @property
    def notified_ids(self) -> frozenset[str]:
        """Ids of every event that has fired this session."""
        return frozenset(self._notified)

    @property
    def notifications(self) -> tuple[Notification, ...]:
        """Fired notifications still on display, oldest first."""
        return tuple(self._notifications)

    @property
    def poll_interval(self) -> float:
        """Seconds between two polls."""
        return self._poll_interval

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def check(
        self,
        events: Sequence[Event],
        now: datetime | None = None,
    ) -> list[Notification]:
        """Run one poll and return the notifications fired by it."""
        now = now or self._clock()
        fired: list[Notification] = []
        for ev in upcoming_notifications(events, now, self._notified):
            if ev.id in self._notified:
                # Same id listed twice in one snapshot.
                continue
            self._notified.add(ev.id)
            fired.append(
                Notification(
                    event_id=ev.id,
                    message=notification_message(ev),
                    fired_at=now,
                )
            )
            _LOGGER.debug("Notification fired for event %s (%s)", ev.id, ev.title)
        self._notifications.extend(fired)
        return fired

    def dismiss(self, index: int) -> Notification:
        """Remove a displayed notification. Its event stays notified."""
        return self._notifications.pop(index)

    def reset(self) -> None:
        """Forget every fired notification (full application reset)."""
        self._notified.clear()
        self._notifications.clear()

    async def async_start(
        self,
        get_events: Callable[[], Sequence[Event]],
        *,
        on_fire: Callable[[Notification], None] | None = None,
    ) -> None:
        """Start polling on the running event loop.

        ``get_events`` is called on every tick so the latest list is used.
        Starting an already running scheduler does nothing.
        """
        if self.running:
            return
        self._task = asyncio.create_task(self._run(get_events, on_fire))

    async def async_stop(self) -> None:
        """Cancel the polling task and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run(
        self,
        get_events: Callable[[], Sequence[Event]],
        on_fire: Callable[[Notification], None] | None,
    ) -> None:
        while True:
            try:
                fired = self.check(get_events())
                if on_fire is not None:
                    for notification in fired:
                        on_fire(notification)
            except Exception:  # noqa: BLE001
                _LOGGER.exception("Notification poll failed")
            await asyncio.sleep(self._poll_interval)
