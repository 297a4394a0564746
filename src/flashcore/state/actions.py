"""Action catalog.

External collaborators (drive scanner, OS catalog, flashing engine, UI)
only ever talk to the store through these messages.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError

from flashcore.exceptions import ValidationError


class ActionType(StrEnum):
    SET_AVAILABLE_DRIVES = "SET_AVAILABLE_DRIVES"
    SET_FLASH_STATE = "SET_FLASH_STATE"
    RESET_FLASH_STATE = "RESET_FLASH_STATE"
    SET_FLASHING_FLAG = "SET_FLASHING_FLAG"
    UNSET_FLASHING_FLAG = "UNSET_FLASHING_FLAG"
    SELECT_OS = "SELECT_OS"
    SELECT_DRIVE = "SELECT_DRIVE"
    SELECT_IMAGE = "SELECT_IMAGE"
    REMOVE_OS = "REMOVE_OS"
    REMOVE_DRIVE = "REMOVE_DRIVE"
    REMOVE_IMAGE = "REMOVE_IMAGE"
    SET_SETTING = "SET_SETTING"

    @classmethod
    def parse(cls, value: str) -> ActionType | None:
        """Return the catalog member for *value*, or ``None`` if it is not one."""
        try:
            return cls(value)
        except ValueError:
            return None


class Action(BaseModel):
    """A message dispatched to the store.

    ``type`` is kept as a plain string so messages from newer or unrelated
    producers can still be constructed; the reducer ignores kinds outside
    :class:`ActionType`.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: str
    data: Any = None

    @field_validator("type", mode="before")
    @classmethod
    def _type_value(cls, value: Any) -> Any:
        if isinstance(value, ActionType):
            return value.value
        return value

    @classmethod
    def of(cls, type: ActionType | str, data: Any = None) -> Action:  # noqa: A002
        return cls(type=type, data=data)

    @classmethod
    def from_dict(cls, message: Mapping[str, Any]) -> Action:
        """Build an action from its ``{"type": ..., "data": ...}`` wire form."""
        kind = message.get("type")
        if kind is None:
            raise ValidationError("Missing action type", field="type", value=kind)
        try:
            return cls(type=kind, data=message.get("data"))
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            raise ValidationError(f"Invalid action type: {first.get('msg')}", field="type", value=kind) from exc

    @property
    def kind(self) -> ActionType | None:
        return ActionType.parse(self.type)

    def describe(self) -> str:
        """Short one-line summary for debug logs."""
        data = self.data
        if data is None:
            return self.type
        if isinstance(data, (list, tuple)):
            return f"{self.type}(<{len(data)} items>)"
        if isinstance(data, Mapping):
            return f"{self.type}({', '.join(sorted(str(key) for key in data))})"
        return f"{self.type}({data!r})"
