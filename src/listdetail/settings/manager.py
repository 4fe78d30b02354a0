"""Loading of screen settings from an optional JSON file."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jsonschema import ValidationError

from listdetail.application.services.retry import RetryPolicy
from listdetail.errors import SettingsLoadError, SettingsValidationError

from .schema import DEFAULT_SETTINGS, merge_with_defaults


@dataclass(frozen=True)
class ScreenSettings:
    page_size: int
    refresh_retry_interval: float
    list_retry_interval: float

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScreenSettings:
        pagination = data["pagination"]
        return cls(
            page_size=int(pagination["page_size"]),
            refresh_retry_interval=float(pagination["refresh_retry_interval_sec"]),
            list_retry_interval=float(data["list_retry_interval_sec"]),
        )

    def refresh_retry_policy(self) -> RetryPolicy:
        return RetryPolicy(interval=self.refresh_retry_interval)

    def list_retry_policy(self) -> RetryPolicy:
        return RetryPolicy(interval=self.list_retry_interval)


def default_settings() -> ScreenSettings:
    return ScreenSettings.from_dict(DEFAULT_SETTINGS)


def parse_settings(payload: dict[str, Any] | None) -> ScreenSettings:
    try:
        merged = merge_with_defaults(payload)
    except ValidationError as exc:
        raise SettingsValidationError(exc.message) from exc
    return ScreenSettings.from_dict(merged)


def load_settings(path: Path | None) -> ScreenSettings:
    """Read settings from *path*; missing files yield the defaults."""

    if path is None or not path.exists():
        return default_settings()
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise SettingsLoadError(f"Cannot read settings from {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise SettingsLoadError(f"Settings file {path} must contain a JSON object")
    return parse_settings(payload)
