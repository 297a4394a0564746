"""Drive records produced by the external drive enumerator."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import Field, field_validator

from flashcore.models._base import FlashBaseModel
from flashcore.models.image import ImageDescriptor


class Drive(FlashBaseModel):
    """A storage target candidate.

    ``device`` is the key other state refers to.  ``recommended_image``
    is computed from the selected OS and never taken from the enumerator
    as-is.  Any additional enumerator fields (``description``,
    ``displayName``, ...) are kept on the record.
    """

    device: str
    size: int | float | None = None
    protected: bool = False
    system: bool = False
    mountpoints: tuple[str, ...] = Field(default_factory=tuple)
    recommended_image: ImageDescriptor | None = None

    @field_validator("mountpoints", mode="before")
    @classmethod
    def _mountpoint_paths(cls, value: Any) -> Any:
        """Accept ``[{"path": "/media/usb"}]`` as well as plain path strings."""
        if not isinstance(value, (list, tuple)):
            return value
        paths: list[Any] = []
        for item in value:
            if isinstance(item, Mapping):
                item = item.get("path")
            if item:
                paths.append(item)
        return tuple(paths)
