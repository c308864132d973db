"""Runtime configuration for the event calendar core."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import voluptuous as vol

from .const import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_OCCURRENCES,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_RECURRENCE_HORIZON_DAYS,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    ENV_PREFIX,
)
from .exceptions import ValidationError

_LOGGER = logging.getLogger(__name__)

CONF_BASE_URL = "base_url"
CONF_REQUEST_TIMEOUT = "request_timeout"
CONF_POLL_INTERVAL = "poll_interval"
CONF_RECURRENCE_HORIZON_DAYS = "recurrence_horizon_days"
CONF_MAX_OCCURRENCES = "max_occurrences"

CONFIG_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_BASE_URL, default=DEFAULT_BASE_URL): vol.All(
            str, vol.Length(min=1)
        ),
        vol.Optional(
            CONF_REQUEST_TIMEOUT, default=DEFAULT_REQUEST_TIMEOUT_SECONDS
        ): vol.All(vol.Coerce(float), vol.Range(min=0, min_included=False)),
        vol.Optional(
            CONF_POLL_INTERVAL, default=DEFAULT_POLL_INTERVAL_SECONDS
        ): vol.All(vol.Coerce(float), vol.Range(min=0, min_included=False)),
        vol.Optional(
            CONF_RECURRENCE_HORIZON_DAYS, default=DEFAULT_RECURRENCE_HORIZON_DAYS
        ): vol.All(vol.Coerce(int), vol.Range(min=1)),
        vol.Optional(CONF_MAX_OCCURRENCES, default=DEFAULT_MAX_OCCURRENCES): vol.All(
            vol.Coerce(int), vol.Range(min=1)
        ),
    }
)


@dataclass(frozen=True)
class CalendarConfig:
    """Settings shared by the API client, orchestrator and scheduler."""

    base_url: str = DEFAULT_BASE_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS
    # Horizon used to bound recurring creation when no end date is given.
    recurrence_horizon_days: int = DEFAULT_RECURRENCE_HORIZON_DAYS
    max_occurrences: int = DEFAULT_MAX_OCCURRENCES


def _from_environ(environ: Mapping[str, str]) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for key in CONFIG_SCHEMA.schema:
        name = f"{ENV_PREFIX}{str(key).upper()}"
        if name in environ:
            data[str(key)] = environ[name]
    return data


def load_config(
    data: Mapping[str, Any] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> CalendarConfig:
    """Build a validated config.

    Values come from ``EVENT_CALENDAR_*`` environment variables, overridden
    by explicit ``data`` entries.

    Raises:
        ValidationError: If a value fails the schema.
    """
    merged = _from_environ(os.environ if environ is None else environ)
    merged.update(data or {})
    try:
        validated = CONFIG_SCHEMA(merged)
    except vol.Invalid as err:
        raise ValidationError(f"Invalid configuration: {err}") from err
    _LOGGER.debug("Loaded configuration: %s", validated)
    return CalendarConfig(**validated)
