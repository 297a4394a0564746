"""Image and operating system records."""

from __future__ import annotations

from pydantic import Field

from flashcore.models._base import FlashBaseModel


class ImageDescriptor(FlashBaseModel):
    """A candidate image offered by an operating system catalog entry."""

    url: str | None = None
    size: int | float | None = None
    recommended_drive_size: int | float | None = None
    checksum: str | None = None
    checksum_type: str | None = None


class OperatingSystem(FlashBaseModel):
    """An operating system catalog entry with its candidate images."""

    name: str | None = None
    logo: str | None = None
    version: str | None = None
    images: tuple[ImageDescriptor, ...] = Field(default_factory=tuple)


class Image(FlashBaseModel):
    """The concrete artifact to be written to the selected drive.

    Either supplied directly (local file flow) or derived from the
    recommended :class:`ImageDescriptor` of the selected OS.
    """

    path: str
    size: int | float
    url: str | None = None
    name: str | None = None
    logo: str | None = None
    version: str | None = None
    download_checksum: str | None = None
    download_checksum_type: str | None = None
    recommended_drive_size: int | float | None = None
