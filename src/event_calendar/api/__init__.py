"""Async client for the events persistence REST API."""

from ._client import EventsApiClient

__all__ = ["EventsApiClient"]
