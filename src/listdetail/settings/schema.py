"""Schema helpers for the screen settings file."""

from __future__ import annotations

from copy import deepcopy
from typing import Any

from jsonschema import Draft202012Validator

from listdetail.config import (
    DEFAULT_PAGE_SIZE,
    LIST_FETCH_RETRY_INTERVAL_SEC,
    REFRESH_RETRY_INTERVAL_SEC,
)

SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "listdetail/settings.schema.json",
    "type": "object",
    "required": ["schema", "pagination"],
    "properties": {
        "schema": {"const": "listdetail/settings@1"},
        "pagination": {
            "type": "object",
            "properties": {
                "page_size": {"type": "integer", "minimum": 1},
                "refresh_retry_interval_sec": {"type": "number", "exclusiveMinimum": 0},
            },
            "additionalProperties": False,
        },
        "list_retry_interval_sec": {"type": "number", "exclusiveMinimum": 0},
    },
    "additionalProperties": False,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": "listdetail/settings@1",
    "pagination": {
        "page_size": DEFAULT_PAGE_SIZE,
        "refresh_retry_interval_sec": REFRESH_RETRY_INTERVAL_SEC,
    },
    "list_retry_interval_sec": LIST_FETCH_RETRY_INTERVAL_SEC,
}

_VALIDATOR = Draft202012Validator(SETTINGS_SCHEMA)


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Overlay *data* on the defaults and validate the result."""

    merged = deepcopy(DEFAULT_SETTINGS)
    if data:
        for key, value in data.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key].update(value)
            else:
                merged[key] = value
    _VALIDATOR.validate(merged)
    return merged
