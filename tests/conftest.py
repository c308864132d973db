"""Shared fixtures: event factories and an in-memory event store.

``FakeEventStore`` follows the REST service semantics the client talks to
(batch creation assigns one series id, series updates shift dates by the
offset of a reference event, missing targets raise ``NotFoundError``). The
same store backs the aiohttp test server used by the API client tests.
"""

from __future__ import annotations

import itertools
from collections.abc import Callable, Sequence
from dataclasses import replace
from datetime import date, timedelta
from typing import Any

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from event_calendar.api._serialization import camelize, decamelize
from event_calendar.exceptions import ApiResponseError, NotFoundError
from event_calendar.models import Event, EventForm, RepeatInfo, SeriesUpdate


# --------------------------------------------------------------------------- #
#  Factories
# --------------------------------------------------------------------------- #


def _make_event(
    *,
    event_id: str = "evt_1",
    title: str = "Daily standup",
    day: str = "2025-10-15",
    start_time: str = "09:00",
    end_time: str = "10:00",
    description: str = "Team sync",
    location: str = "Room A",
    category: str = "Work",
    repeat: RepeatInfo | None = None,
    notification_time: int = 10,
) -> Event:
    return Event(
        id=event_id,
        title=title,
        date=day,
        start_time=start_time,
        end_time=end_time,
        description=description,
        location=location,
        category=category,
        repeat=repeat or RepeatInfo.none(),
        notification_time=notification_time,
    )


def _make_series(
    count: int,
    *,
    start: str = "2025-10-15",
    step_days: int = 1,
    repeat: RepeatInfo | None = None,
    id_prefix: str = "occ",
    **kwargs: Any,
) -> list[Event]:
    """Materialized occurrences of one series, ``step_days`` apart."""
    repeat = repeat or RepeatInfo(type="daily", interval=step_days)
    first = date.fromisoformat(start)
    return [
        _make_event(
            event_id=f"{id_prefix}_{i}",
            day=(first + timedelta(days=i * step_days)).isoformat(),
            repeat=repeat,
            **kwargs,
        )
        for i in range(count)
    ]


@pytest.fixture
def make_event() -> Callable[..., Event]:
    return _make_event


@pytest.fixture
def make_series() -> Callable[..., list[Event]]:
    return _make_series


# --------------------------------------------------------------------------- #
#  In-memory store
# --------------------------------------------------------------------------- #


class FakeEventStore:
    """EventStore implementation kept in a list, with failure injection."""

    def __init__(self, events: Sequence[Event] = ()) -> None:
        self.events: list[Event] = list(events)
        self.calls: list[tuple[str, Any]] = []
        self.failures: dict[str, Exception] = {}
        self._ids = itertools.count(1)
        self._series_ids = itertools.count(1)

    def fail(self, method: str, error: Exception | None = None) -> None:
        """Make ``method`` raise ``error`` (a 500 response by default)."""
        self.failures[method] = error or ApiResponseError(
            "API error: HTTP 500", status_code=500
        )

    def _enter(self, method: str, arg: Any = None) -> None:
        self.calls.append((method, arg))
        if method in self.failures:
            raise self.failures[method]

    def _index(self, event_id: str) -> int | None:
        return next(
            (i for i, ev in enumerate(self.events) if ev.id == event_id), None
        )

    async def async_get_events(self) -> list[Event]:
        self._enter("async_get_events")
        return list(self.events)

    async def async_create_event(self, form: EventForm) -> Event:
        self._enter("async_create_event", form)
        event = form.with_id(str(next(self._ids)))
        self.events.append(event)
        return event

    async def async_create_events(self, forms: Sequence[EventForm]) -> list[Event]:
        self._enter("async_create_events", list(forms))
        repeat_id = f"series_{next(self._series_ids)}"
        created = []
        for form in forms:
            if form.repeat.is_recurring:
                form = replace(form, repeat=replace(form.repeat, id=repeat_id))
            created.append(form.with_id(str(next(self._ids))))
        self.events.extend(created)
        return created

    async def async_update_event(self, event: Event) -> Event:
        self._enter("async_update_event", event)
        index = self._index(event.id)
        if index is None:
            raise NotFoundError(f"Event {event.id} not found")
        self.events[index] = event
        return event

    async def async_update_events(self, events: Sequence[Event]) -> None:
        self._enter("async_update_events", list(events))
        updated = False
        for event in events:
            index = self._index(event.id)
            if index is not None:
                self.events[index] = event
                updated = True
        if not updated:
            raise NotFoundError("Event not found")

    async def async_update_series(self, repeat_id: str, update: SeriesUpdate) -> None:
        self._enter("async_update_series", (repeat_id, update))
        members = [ev for ev in self.events if ev.repeat.id == repeat_id]
        if not members:
            raise NotFoundError(f"Recurring series {repeat_id} not found")

        offset = 0
        if update.date:
            reference = next(
                (ev for ev in members if ev.id == update.id),
                min(members, key=lambda ev: ev.date),
            )
            offset = (
                date.fromisoformat(update.date) - date.fromisoformat(reference.date)
            ).days

        changes = {
            key: value
            for key, value in (
                ("title", update.title),
                ("description", update.description),
                ("location", update.location),
                ("category", update.category),
                ("notification_time", update.notification_time),
            )
            if value is not None
        }
        for i, ev in enumerate(self.events):
            if ev.repeat.id != repeat_id:
                continue
            new_date = (date.fromisoformat(ev.date) + timedelta(days=offset)).isoformat()
            self.events[i] = replace(ev, date=new_date, **changes)

    async def async_delete_event(self, event_id: str) -> None:
        self._enter("async_delete_event", event_id)
        self.events = [ev for ev in self.events if ev.id != event_id]

    async def async_delete_events(self, event_ids: Sequence[str]) -> None:
        self._enter("async_delete_events", list(event_ids))
        self.events = [ev for ev in self.events if ev.id not in event_ids]

    async def async_delete_series(self, repeat_id: str) -> None:
        self._enter("async_delete_series", repeat_id)
        remaining = [ev for ev in self.events if ev.repeat.id != repeat_id]
        if len(remaining) == len(self.events):
            raise NotFoundError(f"Recurring series {repeat_id} not found")
        self.events = remaining


@pytest.fixture
def store() -> FakeEventStore:
    return FakeEventStore()


# --------------------------------------------------------------------------- #
#  HTTP test server backed by the fake store
# --------------------------------------------------------------------------- #


def _json(data: Any, status: int = 200) -> web.Response:
    return web.json_response(camelize(data), status=status)


def _build_app(backend: FakeEventStore) -> web.Application:
    async def get_events(request: web.Request) -> web.Response:
        events = await backend.async_get_events()
        return _json({"events": [ev.to_api_dict() for ev in events]})

    async def create_event(request: web.Request) -> web.Response:
        form = EventForm.from_api_response(decamelize(await request.json()))
        event = await backend.async_create_event(form)
        return _json(event.to_api_dict(), status=201)

    async def update_event(request: web.Request) -> web.Response:
        body = decamelize(await request.json())
        body["id"] = request.match_info["event_id"]
        try:
            event = await backend.async_update_event(Event.from_api_response(body))
        except NotFoundError:
            return web.Response(status=404, text="Event not found")
        return _json(event.to_api_dict())

    async def delete_event(request: web.Request) -> web.Response:
        await backend.async_delete_event(request.match_info["event_id"])
        return web.Response(status=204)

    async def create_events(request: web.Request) -> web.Response:
        body = decamelize(await request.json())
        forms = [EventForm.from_api_response(e) for e in body["events"]]
        created = await backend.async_create_events(forms)
        return _json([ev.to_api_dict() for ev in created], status=201)

    async def update_events(request: web.Request) -> web.Response:
        body = decamelize(await request.json())
        try:
            await backend.async_update_events(
                [Event.from_api_response(e) for e in body["events"]]
            )
        except NotFoundError:
            return web.Response(status=404, text="Event not found")
        return _json({"events": [ev.to_api_dict() for ev in backend.events]})

    async def delete_events(request: web.Request) -> web.Response:
        body = decamelize(await request.json())
        await backend.async_delete_events(body["event_ids"])
        return web.Response(status=204)

    async def update_series(request: web.Request) -> web.Response:
        body = decamelize(await request.json())
        update = SeriesUpdate(**body)
        try:
            await backend.async_update_series(request.match_info["repeat_id"], update)
        except NotFoundError:
            return web.Response(status=404, text="Recurring series not found")
        return _json([])

    async def delete_series(request: web.Request) -> web.Response:
        try:
            await backend.async_delete_series(request.match_info["repeat_id"])
        except NotFoundError:
            return web.Response(status=404, text="Recurring series not found")
        return web.Response(status=204)

    async def broken(request: web.Request) -> web.Response:
        return web.Response(status=500, text="boom")

    app = web.Application()
    app.router.add_get("/api/events", get_events)
    app.router.add_post("/api/events", create_event)
    app.router.add_put("/api/events/{event_id}", update_event)
    app.router.add_delete("/api/events/{event_id}", delete_event)
    app.router.add_post("/api/events-list", create_events)
    app.router.add_put("/api/events-list", update_events)
    app.router.add_delete("/api/events-list", delete_events)
    app.router.add_put("/api/recurring-events/{repeat_id}", update_series)
    app.router.add_delete("/api/recurring-events/{repeat_id}", delete_series)
    app.router.add_get("/broken/api/events", broken)
    return app


@pytest.fixture
async def api_server(store: FakeEventStore):
    server = TestServer(_build_app(store))
    await server.start_server()
    yield server
    await server.close()
