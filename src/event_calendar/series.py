"""Series identity: which occurrences belong to the same recurring series.

A series is never stored. Members either share an explicit ``repeat.id`` or,
for occurrences created without one, match structurally on repeat type,
interval, title, times, description, location and category. The occurrence
date and event id never take part in the comparison.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable

from .models import Event


def is_recurring(event: Event) -> bool:
    """Whether the event carries a real recurrence definition."""
    return event.repeat.is_recurring


def _structure(event: Event) -> tuple[str, int, str, str, str, str, str, str]:
    return (
        event.repeat.type,
        event.repeat.interval,
        event.title,
        event.start_time,
        event.end_time,
        event.description,
        event.location,
        event.category,
    )


def is_same_series(a: Event, b: Event) -> bool:
    """Structural equality used when no explicit series id exists."""
    return _structure(a) == _structure(b)


def series_key(event: Event) -> Hashable:
    """Stable grouping key: the explicit series id, else the structure."""
    if event.repeat.id:
        return ("id", event.repeat.id)
    return ("structure", *_structure(event))


def find_related_series(target: Event, pool: Iterable[Event]) -> list[Event]:
    """Return every event in ``pool`` that shares ``target``'s series.

    The result includes ``target`` itself when it is in the pool. A match of
    one event or none means there is no series to act on, and the result is
    empty.
    """
    if not is_recurring(target):
        return []

    if target.repeat.id:
        members = [
            ev
            for ev in pool
            if is_recurring(ev) and ev.repeat.id == target.repeat.id
        ]
    else:
        members = [
            ev for ev in pool if is_recurring(ev) and is_same_series(ev, target)
        ]

    return members if len(members) > 1 else []


def group_series(events: Iterable[Event]) -> dict[Hashable, list[Event]]:
    """Group recurring events by ``series_key``; singletons are dropped."""
    groups: dict[Hashable, list[Event]] = {}
    for ev in events:
        if is_recurring(ev):
            groups.setdefault(series_key(ev), []).append(ev)
    return {key: members for key, members in groups.items() if len(members) > 1}
