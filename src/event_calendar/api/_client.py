"""Events persistence API client."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

import aiohttp

from ..config import CalendarConfig
from ..exceptions import ApiConnectionError, ApiResponseError, NotFoundError
from ..models import Event, EventForm, SeriesUpdate
from ._serialization import camelize, decamelize
from .const import (
    CONTENT_TYPE_JSON,
    EVENT_DETAIL_ENDPOINT,
    EVENTS_BATCH_ENDPOINT,
    EVENTS_ENDPOINT,
    HEADER_CONTENT_TYPE,
    RECURRING_SERIES_ENDPOINT,
)

_LOGGER = logging.getLogger(__name__)


class EventsApiClient:
    """Async client for the events REST store.

    Usage::

        async with aiohttp.ClientSession() as session:
            client = EventsApiClient(session, base_url="http://localhost:3000")
            events = await client.async_get_events()

    If no session is provided, the client creates and manages its own.
    The caller is responsible for calling ``async_close()`` when done
    (or use the client as an async context manager).
    """

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        *,
        base_url: str | None = None,
        config: CalendarConfig | None = None,
    ) -> None:
        self._config = config or CalendarConfig()
        self._base_url = (base_url or self._config.base_url).rstrip("/")
        self._owns_session = session is None
        self._session = session or aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self._config.request_timeout)
        )

    async def __aenter__(self) -> EventsApiClient:
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.async_close()

    async def async_close(self) -> None:
        """Close the HTTP session if the client owns it."""
        if self._owns_session:
            await self._session.close()

    # ------------------------------------------------------------------ #
    #  Single events
    # ------------------------------------------------------------------ #

    async def async_get_events(self) -> list[Event]:
        """Fetch the full event snapshot."""
        data = await self._request("GET", EVENTS_ENDPOINT)
        raw = data if isinstance(data, list) else data.get("events", [])
        return [Event.from_api_response(e) for e in raw]

    async def async_create_event(self, form: EventForm) -> Event:
        """Create a new event; the store assigns its id."""
        data = await self._request("POST", EVENTS_ENDPOINT, json_body=form.to_api_dict())
        return Event.from_api_response(data)

    async def async_update_event(self, event: Event) -> Event:
        """Replace an existing event.

        Raises:
            NotFoundError: If the store has no event with this id.
        """
        url = EVENT_DETAIL_ENDPOINT.format(event_id=event.id)
        data = await self._request("PUT", url, json_body=event.to_api_dict())
        return Event.from_api_response(data) if isinstance(data, dict) else event

    async def async_delete_event(self, event_id: str) -> None:
        """Delete a single event."""
        url = EVENT_DETAIL_ENDPOINT.format(event_id=event_id)
        await self._request("DELETE", url)

    # ------------------------------------------------------------------ #
    #  Batches
    # ------------------------------------------------------------------ #

    async def async_create_events(self, forms: Sequence[EventForm]) -> list[Event]:
        """Create the occurrences of a recurring event in one request.

        The store assigns one shared ``repeat.id`` to the whole batch.
        """
        body = {"events": [f.to_api_dict() for f in forms]}
        data = await self._request("POST", EVENTS_BATCH_ENDPOINT, json_body=body)
        raw = data if isinstance(data, list) else data.get("events", [])
        return [Event.from_api_response(e) for e in raw]

    async def async_update_events(self, events: Sequence[Event]) -> None:
        """Replace several events at once.

        Raises:
            NotFoundError: If none of the ids exist in the store.
        """
        body = {"events": [e.to_api_dict() for e in events]}
        await self._request("PUT", EVENTS_BATCH_ENDPOINT, json_body=body)

    async def async_delete_events(self, event_ids: Sequence[str]) -> None:
        """Delete several events by id."""
        body = {"event_ids": list(event_ids)}
        await self._request("DELETE", EVENTS_BATCH_ENDPOINT, json_body=body)

    # ------------------------------------------------------------------ #
    #  Recurring series
    # ------------------------------------------------------------------ #

    async def async_update_series(self, repeat_id: str, update: SeriesUpdate) -> None:
        """Apply a partial update to every member of a series.

        Raises:
            NotFoundError: If no event carries ``repeat_id``.
        """
        url = RECURRING_SERIES_ENDPOINT.format(repeat_id=repeat_id)
        await self._request("PUT", url, json_body=update.to_api_dict())

    async def async_delete_series(self, repeat_id: str) -> None:
        """Delete every member of a series.

        Raises:
            NotFoundError: If no event carries ``repeat_id``.
        """
        url = RECURRING_SERIES_ENDPOINT.format(repeat_id=repeat_id)
        await self._request("DELETE", url)

    # ------------------------------------------------------------------ #
    #  Internal HTTP layer
    # ------------------------------------------------------------------ #

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: dict[str, Any] | None = None,
    ) -> Any:
        """Execute an API request with serialization and error mapping.

        All outgoing JSON bodies are camelized; all incoming JSON responses
        are decamelized.

        Raises:
            NotFoundError: On 404 responses.
            ApiResponseError: On other non-2xx responses and on 2xx
                responses whose body is not JSON.
            ApiConnectionError: On network errors and timeouts.
        """
        kwargs: dict[str, Any] = {"headers": {HEADER_CONTENT_TYPE: CONTENT_TYPE_JSON}}
        if json_body is not None:
            kwargs["json"] = camelize(json_body)

        url = f"{self._base_url}{path}"
        _LOGGER.debug("%s %s", method, url)

        try:
            async with self._session.request(method, url, **kwargs) as resp:
                if resp.status == 404:
                    body = await resp.text()
                    raise NotFoundError(f"Not found: {method} {path} - {body}")

                if resp.status == 204:
                    return None

                if resp.status >= 400:
                    body = await resp.text()
                    raise ApiResponseError(
                        f"API error: HTTP {resp.status} - {body}",
                        status_code=resp.status,
                    )

                try:
                    data = await resp.json(content_type=None)
                except ValueError as err:
                    raise ApiResponseError(
                        f"Invalid JSON in response: HTTP {resp.status}",
                        status_code=resp.status,
                    ) from err
                return decamelize(data)

        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            raise ApiConnectionError(f"Connection error: {err}") from err
