"""Search and week/month view filtering of the event list."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta

from dateutil.relativedelta import relativedelta

from .models import Event, ViewType, as_date


def week_range(day: date | str) -> tuple[date, date]:
    """Sunday through Saturday of the week containing ``day``."""
    current = as_date(day)
    # date.weekday(): Monday == 0 ... Sunday == 6
    start = current - timedelta(days=(current.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def month_range(day: date | str) -> tuple[date, date]:
    """First and last day of the month containing ``day``."""
    first = as_date(day).replace(day=1)
    return first, first + relativedelta(months=1, days=-1)


def filter_by_view(
    events: Iterable[Event],
    current_date: date | str,
    view: ViewType | str,
) -> list[Event]:
    """Keep the events whose date falls inside the visible week or month."""
    if ViewType(view) is ViewType.WEEK:
        start, end = week_range(current_date)
    else:
        start, end = month_range(current_date)
    return [ev for ev in events if start <= as_date(ev.date) <= end]


def _matches(event: Event, term: str) -> bool:
    return any(
        term in text.lower()
        for text in (event.title, event.description, event.location)
    )


def search_events(
    events: Iterable[Event],
    term: str,
    current_date: date | str,
    view: ViewType | str,
) -> list[Event]:
    """Case-insensitive substring search within the current view.

    Title, description and location are searched. An empty term returns
    every event of the view.
    """
    visible = filter_by_view(events, current_date, view)
    needle = term.strip().lower()
    if not needle:
        return visible
    return [ev for ev in visible if _matches(ev, needle)]
