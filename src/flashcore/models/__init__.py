"""State records for the flashing application."""

from flashcore.models._base import FlashBaseModel, as_mapping, is_composite, is_number, is_record
from flashcore.models.drive import Drive
from flashcore.models.flash import FlashResults, FlashState
from flashcore.models.image import Image, ImageDescriptor, OperatingSystem
from flashcore.models.settings import Settings
from flashcore.models.state import DEFAULT_STATE, ApplicationState, Selection

__all__ = [
    "DEFAULT_STATE",
    "ApplicationState",
    "Drive",
    "FlashBaseModel",
    "FlashResults",
    "FlashState",
    "Image",
    "ImageDescriptor",
    "OperatingSystem",
    "Selection",
    "Settings",
    "as_mapping",
    "is_composite",
    "is_number",
    "is_record",
]
