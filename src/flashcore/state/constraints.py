"""Drive constraints policy.

Pure predicates over plain drive and image records.  The reducer consults
them through a :class:`DriveConstraints` bundle so an application (or a
test) can substitute its own platform heuristics.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from pathlib import PurePath
from typing import Any

from flashcore.models.drive import Drive


def _size(record: Any, attribute: str) -> float:
    if record is None:
        return 0
    value = getattr(record, attribute, None)
    return value or 0


def is_system_drive(drive: Drive) -> bool:
    """Whether the drive hosts the running operating system."""
    return bool(drive.system)


def is_drive_locked(drive: Drive) -> bool:
    """Whether the drive is write-protected."""
    return bool(drive.protected)


def is_source_drive(drive: Drive, image: Any = None) -> bool:
    """Whether the image file lives on one of the drive's mountpoints."""
    path = getattr(image, "path", None)
    if not path or not drive.mountpoints:
        return False
    image_path = PurePath(path)
    return any(image_path.is_relative_to(mountpoint) for mountpoint in drive.mountpoints)


def is_drive_large_enough(drive: Drive, image: Any = None) -> bool:
    """Whether the drive can hold the image.  Missing sizes count as zero."""
    return _size(drive, "size") >= _size(image, "size")


def is_drive_size_recommended(drive: Drive, image: Any = None) -> bool:
    """Whether the drive meets the image's recommended drive size."""
    return _size(drive, "size") >= _size(image, "recommended_drive_size")


def is_drive_valid(drive: Drive, image: Any = None, os_selected: bool = False) -> bool:
    """Whether the image can be written to the drive.

    With an OS selected the concrete image is only derived once a drive is
    picked, so size adequacy is left to :func:`is_drive_size_recommended`.
    """
    if is_drive_locked(drive) or is_source_drive(drive, image):
        return False
    return os_selected or is_drive_large_enough(drive, image)


@dataclasses.dataclass(frozen=True)
class DriveConstraints:
    """The predicates the reducer relies on."""

    is_drive_valid: Callable[..., bool] = is_drive_valid
    is_drive_large_enough: Callable[[Drive, Any], bool] = is_drive_large_enough
    is_drive_size_recommended: Callable[[Drive, Any], bool] = is_drive_size_recommended
    is_system_drive: Callable[[Drive], bool] = is_system_drive


DEFAULT_CONSTRAINTS = DriveConstraints()
