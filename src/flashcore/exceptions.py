"""Custom exception hierarchy for flashcore."""

from __future__ import annotations

from typing import Any


class FlashcoreError(Exception):
    """Base exception for all flashcore errors."""


class ConfigError(FlashcoreError):
    """Invalid or missing configuration."""


class ValidationError(FlashcoreError, ValueError):
    """An action payload (or the state it targets) is invalid.

    Raised by the reducer before any new snapshot is produced, so the
    store keeps its previous state.  ``field`` names the offending
    field and ``value`` carries what was received.
    """

    def __init__(
        self,
        message: str,
        *,
        field: str = "",
        value: Any = None,
    ) -> None:
        self.field = field
        self.value = value
        super().__init__(message)


class CascadeDepthError(FlashcoreError):
    """A chain of derived transitions exceeded the configured depth.

    This indicates a reducer bug (a cascade cycle) and is never
    swallowed by cascade fallbacks.
    """


class StoreError(FlashcoreError):
    """The store was used outside its lifecycle (closed, re-entrant dispatch)."""


class PersistenceError(FlashcoreError):
    """Settings could not be written to durable storage."""

    def __init__(self, message: str, *, location: str = "") -> None:
        self.location = location
        super().__init__(message)
