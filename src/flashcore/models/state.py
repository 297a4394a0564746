"""Application state snapshot."""

from __future__ import annotations

from pydantic import Field

from flashcore.models._base import FlashBaseModel
from flashcore.models.drive import Drive
from flashcore.models.flash import FlashResults, FlashState
from flashcore.models.image import Image, OperatingSystem
from flashcore.models.settings import Settings


def _same(current: object, value: object) -> bool:
    return current is value or (isinstance(value, str) and current == value)


class Selection(FlashBaseModel):
    """What the user picked: an OS (or nothing, for a local image), a drive and an image."""

    os: OperatingSystem | None = None
    drive: str | None = None
    image: Image | None = None


class ApplicationState(FlashBaseModel):
    """A complete, immutable snapshot of the application state.

    Transitions never mutate a snapshot; they return a new one built with
    ``model_copy``.  Subscribers may keep old snapshots around freely.
    """

    available_drives: tuple[Drive, ...] = Field(default_factory=tuple)
    selection: Selection = Field(default_factory=Selection)
    is_flashing: bool = False
    flash_state: FlashState = Field(default_factory=FlashState)
    flash_results: FlashResults = Field(default_factory=FlashResults)
    settings: Settings = Field(default_factory=Settings)

    def find_drive(self, device: str | None) -> Drive | None:
        """Look up an available drive by device identifier."""
        if device is None:
            return None
        for drive in self.available_drives:
            if drive.device == device:
                return drive
        return None

    @property
    def selected_drive(self) -> Drive | None:
        return self.find_drive(self.selection.drive)

    @property
    def has_os(self) -> bool:
        return self.selection.os is not None

    @property
    def has_drive(self) -> bool:
        return self.selection.drive is not None

    @property
    def has_image(self) -> bool:
        return self.selection.image is not None

    def with_selection(self, **update: object) -> ApplicationState:
        """Return a copy with some selection fields replaced.

        Returns ``self`` when every field already holds the given value, so
        no-op removals keep the snapshot identity.
        """
        if all(_same(getattr(self.selection, name), value) for name, value in update.items()):
            return self
        return self.model_copy(update={"selection": self.selection.model_copy(update=update)})


DEFAULT_STATE = ApplicationState()
