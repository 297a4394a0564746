"""flashcore - State-transition core for disk imaging and flashing applications."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("flashcore")
except PackageNotFoundError:
    __version__ = "0+local"
from flashcore.config import StoreConfig
from flashcore.exceptions import (
    CascadeDepthError,
    ConfigError,
    FlashcoreError,
    PersistenceError,
    StoreError,
    ValidationError,
)
from flashcore.models import (
    DEFAULT_STATE,
    ApplicationState,
    Drive,
    FlashResults,
    FlashState,
    Image,
    ImageDescriptor,
    OperatingSystem,
    Selection,
    Settings,
)
from flashcore.persistence import JsonFileStorage, MemoryStorage, SettingsPersistence, SettingsStorage
from flashcore.state.actions import Action, ActionType
from flashcore.state.constraints import DEFAULT_CONSTRAINTS, DriveConstraints
from flashcore.state.reducer import reduce
from flashcore.state.store import StateStore

__all__ = [
    "__version__",
    "DEFAULT_CONSTRAINTS",
    "DEFAULT_STATE",
    "Action",
    "ActionType",
    "ApplicationState",
    "CascadeDepthError",
    "ConfigError",
    "Drive",
    "DriveConstraints",
    "FlashResults",
    "FlashState",
    "FlashcoreError",
    "Image",
    "ImageDescriptor",
    "JsonFileStorage",
    "MemoryStorage",
    "OperatingSystem",
    "PersistenceError",
    "Selection",
    "Settings",
    "SettingsPersistence",
    "SettingsStorage",
    "StateStore",
    "StoreConfig",
    "StoreError",
    "ValidationError",
    "reduce",
]
