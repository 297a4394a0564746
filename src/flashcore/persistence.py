"""Settings persistence adapter.

Only the ``settings`` subtree of the state is ever persisted.  At startup
it is merged into the default snapshot as-is: a hand-edited file may add
keys or odd values, and that is tolerated rather than failing startup.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

from flashcore._constants import PERSISTED_KEY
from flashcore.exceptions import PersistenceError
from flashcore.models import ApplicationState, Settings

_logger = logging.getLogger(__name__)


class SettingsStorage(Protocol):
    """Durable text storage for the serialized settings."""

    def read(self) -> str | None:
        """Return the stored text, or ``None`` when nothing was stored yet."""
        ...

    def write(self, text: str) -> None: ...


class MemoryStorage:
    """In-process storage, mainly for tests and ephemeral sessions."""

    def __init__(self, text: str | None = None) -> None:
        self.text = text
        self.writes = 0

    def read(self) -> str | None:
        return self.text

    def write(self, text: str) -> None:
        self.text = text
        self.writes += 1


class JsonFileStorage:
    """Settings stored in a JSON file, replaced atomically on write."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def read(self) -> str | None:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def write(self, text: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(text)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise PersistenceError(f"Failed to write settings: {exc}", location=str(self.path)) from exc


class SettingsPersistence:
    """Load and save the persisted settings subtree."""

    def __init__(self, storage: SettingsStorage, *, key: str = PERSISTED_KEY) -> None:
        self.storage = storage
        self.key = key
        self._last_written: str | None = None

    def _read_subset(self) -> dict[str, Any] | None:
        try:
            text = self.storage.read()
        except OSError:
            _logger.warning("Could not read persisted settings, keeping defaults", exc_info=True)
            return None
        if not text:
            return None
        self._last_written = text

        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            _logger.warning("Ignoring malformed persisted settings: %s", exc)
            return None

        subset = document.get(self.key) if isinstance(document, Mapping) else None
        if subset is None:
            return None
        if not isinstance(subset, Mapping):
            _logger.warning("Ignoring persisted %r: expected an object, got %s", self.key, type(subset).__name__)
            return None
        return dict(subset)

    def load(self, state: ApplicationState) -> ApplicationState:
        """Merge the persisted settings into *state*, bypassing validation."""
        subset = self._read_subset()
        if subset is None:
            _logger.debug("No persisted settings to merge")
            return state
        _logger.debug("Merging persisted settings: %s", sorted(subset))
        return state.model_copy(update={"settings": Settings.merged(subset)})

    def serialize(self, state: ApplicationState) -> str:
        return json.dumps({self.key: state.settings.to_dict()}, sort_keys=True)

    def save(self, state: ApplicationState) -> bool:
        """Write the settings subtree if it changed since the last write.

        Returns whether anything was written.
        """
        text = self.serialize(state)
        if text == self._last_written:
            return False
        self.storage.write(text)
        self._last_written = text
        return True
