"""Time-overlap detection between events on the same date."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .models import Event, EventForm


def is_overlapping(a: Event | EventForm, b: Event | EventForm) -> bool:
    """Whether two events share a date and their ``[start, end)`` intersect.

    Back-to-back events (one ends exactly when the other starts) do not
    overlap. The relation is symmetric.
    """
    if a.date != b.date:
        return False
    return a.start_time < b.end_time and a.end_time > b.start_time


def find_overlaps(
    candidate: Event | EventForm,
    pool: Iterable[Event],
) -> list[Event]:
    """Return the events in ``pool`` that overlap ``candidate``.

    When the candidate is a stored event being edited, its own entry is
    excluded from the pool first.
    """
    own_id = getattr(candidate, "id", None)
    return [
        other
        for other in pool
        if (own_id is None or other.id != own_id) and is_overlapping(candidate, other)
    ]


def find_series_overlaps(
    candidates: Sequence[Event | EventForm],
    pool: Sequence[Event],
) -> list[Event]:
    """Overlaps of every materialized occurrence of a recurring candidate.

    Each pool event appears at most once, in pool order.
    """
    hits: set[str] = set()
    for candidate in candidates:
        hits.update(ev.id for ev in find_overlaps(candidate, pool))
    return [ev for ev in pool if ev.id in hits]
