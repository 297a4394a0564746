"""Store configuration for flashcore."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from flashcore._constants import MAX_CASCADE_DEPTH, MIN_CASCADE_DEPTH, PERSISTED_KEY
from flashcore.exceptions import ConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class StoreConfig:
    """State store configuration.

    Parameters
    ----------
    settings_path : Path or None
        JSON file the settings subtree is persisted to.  ``None`` keeps
        settings in memory only.
    persisted_key : str
        Top-level key the settings are stored under in that file.
    persist_enabled : bool
        Master switch for settings persistence.
    max_cascade_depth : int
        Maximum nesting of derived transitions within one dispatch.
    """

    settings_path: Path | None = None
    persisted_key: str = PERSISTED_KEY
    persist_enabled: bool = True
    max_cascade_depth: int = MAX_CASCADE_DEPTH

    def __post_init__(self) -> None:
        if self.max_cascade_depth < MIN_CASCADE_DEPTH:
            raise ConfigError(
                f"max_cascade_depth must be at least {MIN_CASCADE_DEPTH}, got {self.max_cascade_depth}"
            )
        if not self.persisted_key:
            raise ConfigError("persisted_key must be non-empty")
        if self.settings_path is not None and not isinstance(self.settings_path, Path):
            object.__setattr__(self, "settings_path", Path(self.settings_path))

    @property
    def persists(self) -> bool:
        return self.persist_enabled and self.settings_path is not None

    @classmethod
    def from_env(cls, **overrides: Any) -> StoreConfig:
        """Create configuration from environment variables.

        Reads ``FLASHCORE_SETTINGS_PATH``, ``FLASHCORE_PERSISTED_KEY``,
        ``FLASHCORE_PERSIST_ENABLED`` and ``FLASHCORE_MAX_CASCADE_DEPTH``.
        Explicit keyword arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        path_env = env.get("FLASHCORE_SETTINGS_PATH")
        if path_env:
            config_kwargs["settings_path"] = Path(path_env).expanduser()

        key_env = env.get("FLASHCORE_PERSISTED_KEY")
        if key_env is not None:
            config_kwargs["persisted_key"] = key_env

        config_kwargs["persist_enabled"] = _env_bool(env.get("FLASHCORE_PERSIST_ENABLED"), True)

        depth_env = env.get("FLASHCORE_MAX_CASCADE_DEPTH")
        if depth_env is not None:
            try:
                config_kwargs["max_cascade_depth"] = int(depth_env)
            except ValueError as exc:
                raise ConfigError(f"FLASHCORE_MAX_CASCADE_DEPTH must be an integer, got {depth_env!r}") from exc

        config_kwargs.update(overrides)
        return cls(**config_kwargs)
