"""Expansion of recurrence definitions into concrete occurrence dates.

Built on ``dateutil.rrule``. Monthly and yearly rules keep the anchor's
day-of-month; months (or years) that lack that day are skipped rather than
clamped, so a Jan 31 monthly series lands on Mar 31, May 31, ... and a
Feb 29 yearly series only on leap years.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import replace
from datetime import date, datetime, time
from itertools import islice

from dateutil.rrule import DAILY, MONTHLY, WEEKLY, YEARLY, rrule

from .exceptions import InvalidRecurrenceError
from .models import EventForm, RepeatInfo, RepeatType, as_date

_LOGGER = logging.getLogger(__name__)

_FREQUENCIES = {
    RepeatType.DAILY: DAILY,
    RepeatType.WEEKLY: WEEKLY,
    RepeatType.MONTHLY: MONTHLY,
    RepeatType.YEARLY: YEARLY,
}


def _parse_type(repeat: RepeatInfo) -> RepeatType:
    try:
        return RepeatType(repeat.type)
    except ValueError as err:
        raise InvalidRecurrenceError(
            f"Unknown repeat type {repeat.type!r}", field="repeat.type"
        ) from err


def _parse_end_date(repeat: RepeatInfo) -> date | None:
    if not repeat.end_date:
        return None
    try:
        return as_date(repeat.end_date)
    except ValueError as err:
        raise InvalidRecurrenceError(
            f"Invalid repeat end date {repeat.end_date!r}", field="repeat.end_date"
        ) from err


def _earliest(*bounds: date | str | None) -> date | None:
    dates = [as_date(b) for b in bounds if b]
    return min(dates) if dates else None


def expand(
    anchor_date: date | str,
    repeat: RepeatInfo,
    *,
    until: date | str | None = None,
    max_count: int | None = None,
) -> Iterator[date]:
    """Return the occurrence dates of a recurrence definition, in order.

    The result is a lazy iterator; call again to restart. Iteration stops
    after ``repeat.end_date`` or ``until`` (both inclusive, whichever comes
    first) and after ``max_count`` dates.

    Args:
        anchor_date: Date of the first occurrence.
        repeat: The recurrence definition.
        until: Caller-supplied horizon, e.g. the last visible day.
        max_count: Caller-supplied cap on the number of occurrences.

    Raises:
        InvalidRecurrenceError: On an unknown type, an interval below 1, a
            malformed end date, or an open-ended rule (no end date) with
            neither ``until`` nor ``max_count``.
    """
    anchor = as_date(anchor_date)
    repeat_type = _parse_type(repeat)

    if repeat_type is RepeatType.NONE:
        return iter([anchor])

    if repeat.interval < 1:
        raise InvalidRecurrenceError(
            f"Repeat interval must be at least 1, got {repeat.interval}",
            field="repeat.interval",
        )

    stop = _earliest(_parse_end_date(repeat), until)
    if stop is None and max_count is None:
        raise InvalidRecurrenceError(
            "Recurrence without an end date needs an explicit horizon",
            field="repeat.end_date",
        )

    rule = rrule(
        _FREQUENCIES[repeat_type],
        dtstart=datetime.combine(anchor, time()),
        interval=repeat.interval,
        until=datetime.combine(stop, time()) if stop is not None else None,
    )
    dates = (dt.date() for dt in rule)
    if max_count is not None:
        return islice(dates, max_count)
    return dates


def expand_between(
    anchor_date: date | str,
    repeat: RepeatInfo,
    start: date | str,
    end: date | str,
) -> list[date]:
    """Occurrences of a definition that fall within ``[start, end]``.

    This is what a calendar grid needs for the visible range.
    """
    first = as_date(start)
    return [d for d in expand(anchor_date, repeat, until=end) if d >= first]


def build_occurrences(
    form: EventForm,
    *,
    until: date | str | None = None,
    max_count: int | None = None,
) -> list[EventForm]:
    """Materialize one event form per occurrence of ``form.repeat``.

    Every occurrence keeps the full repeat definition; the store assigns the
    shared series id when the batch is created.
    """
    occurrences = [
        replace(form, date=day.isoformat())
        for day in expand(form.date, form.repeat, until=until, max_count=max_count)
    ]
    _LOGGER.debug(
        "Expanded %s repeat of %r from %s into %d occurrences",
        form.repeat.type,
        form.title,
        form.date,
        len(occurrences),
    )
    return occurrences
