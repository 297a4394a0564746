"""Internal constants shared across the library."""

from __future__ import annotations

from typing import Any

#: State subtree written to durable storage.
PERSISTED_KEY = "settings"

#: Checksum algorithm assumed for OS images that do not declare one.
DEFAULT_CHECKSUM_TYPE = "md5"

#: Upper bound on nested derived transitions within a single dispatch.
MAX_CASCADE_DEPTH = 8

#: Nesting reached by legitimate chains, e.g. SELECT_OS ->
#: SET_AVAILABLE_DRIVES -> SELECT_DRIVE -> SELECT_IMAGE.
MIN_CASCADE_DEPTH = 3

# ------------------------------------------------------------------
# Default snapshot values
# ------------------------------------------------------------------

DEFAULT_FLASH_STATE: dict[str, Any] = {
    "percentage": 0,
    "speed": -1,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "unsafeMode": False,
    "errorReporting": True,
    "unmountOnSuccess": True,
    "validateWriteOnSuccess": True,
    "sleepUpdateCheck": False,
    "lastUpdateNotify": None,
    "downloadPath": None,
    "downloadSource": "default/boards.json",
}

SETTING_KEYS: frozenset[str] = frozenset(DEFAULT_SETTINGS)
