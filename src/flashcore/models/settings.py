"""User settings record."""

from __future__ import annotations

from typing import Any

from pydantic.alias_generators import to_camel

from flashcore._constants import DEFAULT_SETTINGS
from flashcore.models._base import FlashBaseModel


class Settings(FlashBaseModel):
    """Persisted user settings.

    The key set is closed: the reducer only ever writes the keys listed
    here.  Extra keys can only appear when a persisted settings file
    was merged at startup, which intentionally skips validation.
    """

    unsafe_mode: bool = DEFAULT_SETTINGS["unsafeMode"]
    error_reporting: bool = DEFAULT_SETTINGS["errorReporting"]
    unmount_on_success: bool = DEFAULT_SETTINGS["unmountOnSuccess"]
    validate_write_on_success: bool = DEFAULT_SETTINGS["validateWriteOnSuccess"]
    sleep_update_check: bool = DEFAULT_SETTINGS["sleepUpdateCheck"]
    last_update_notify: Any = DEFAULT_SETTINGS["lastUpdateNotify"]
    download_path: str | None = DEFAULT_SETTINGS["downloadPath"]
    download_source: str | None = DEFAULT_SETTINGS["downloadSource"]

    @classmethod
    def field_for_key(cls, key: str) -> str | None:
        """Map a camelCase setting key to its field name."""
        for name in cls.model_fields:
            if to_camel(name) == key:
                return name
        return None

    def get(self, key: str, default: Any = None) -> Any:
        """Read a setting by its camelCase key."""
        name = self.field_for_key(key)
        if name is not None:
            return getattr(self, name)
        return (self.model_extra or {}).get(key, default)

    def with_value(self, key: str, value: Any) -> Settings:
        """Return a copy with one setting replaced."""
        name = self.field_for_key(key)
        if name is None:
            raise KeyError(key)
        return self.model_copy(update={name: value})

    def to_dict(self) -> dict[str, Any]:
        # Unset values (``None``) are part of the persisted key set.
        return self.model_dump(by_alias=True)

    @classmethod
    def merged(cls, subset: dict[str, Any]) -> Settings:
        """Overlay *subset* on the defaults without validating it."""
        values: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in subset.items():
            name = cls.field_for_key(key) or (key if key in cls.model_fields else None)
            if name is None:
                extra[key] = value
            else:
                values[name] = value
        return cls.model_construct(**values, **extra)
