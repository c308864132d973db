"""Endpoint constants for the events persistence API."""

EVENTS_ENDPOINT = "/api/events"
EVENT_DETAIL_ENDPOINT = "/api/events/{event_id}"
EVENTS_BATCH_ENDPOINT = "/api/events-list"
RECURRING_SERIES_ENDPOINT = "/api/recurring-events/{repeat_id}"

HEADER_CONTENT_TYPE = "Content-Type"
CONTENT_TYPE_JSON = "application/json"
