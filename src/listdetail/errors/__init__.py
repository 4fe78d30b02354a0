"""Custom exception hierarchy for listdetail."""

from __future__ import annotations

from typing import Optional


class ListDetailError(Exception):
    """Base class for all custom errors raised by listdetail."""


# --- 3-layer hierarchy ---

class DomainError(ListDetailError):
    """Base class for domain-level errors."""


class InfrastructureError(ListDetailError):
    """Base class for infrastructure-level errors."""


class ApplicationError(ListDetailError):
    """Base class for application-level errors."""


# --- Domain errors ---

class ConfigurationError(DomainError):
    """Raised when a view mode has no remote handler."""


# --- Infrastructure errors ---

class TransientFetchError(InfrastructureError):
    """Raised when fetching a page from the remote source fails."""

    def __init__(self, message: str, *, page: Optional[int] = None) -> None:
        super().__init__(message)
        self.page = page


class ListUnavailableError(InfrastructureError):
    """Raised when the list entity backing a screen cannot be fetched."""


# --- Application errors ---

class MutationError(ApplicationError):
    """Raised when a single-item mutation (reaction, type change, delete) fails."""

    def __init__(
        self,
        message: str,
        *,
        item_id: Optional[str] = None,
        alias: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.item_id = item_id
        self.alias = alias


# --- Settings ---

class SettingsError(ListDetailError):
    """Base class for settings related failures."""


class SettingsLoadError(SettingsError):
    """Raised when the settings file cannot be parsed or loaded."""


class SettingsValidationError(SettingsError):
    """Raised when settings data fails schema validation."""
