"""Flashing progress and result records."""

from __future__ import annotations

from typing import Any

from flashcore.models._base import FlashBaseModel


class FlashState(FlashBaseModel):
    """Progress of the running flash, as reported by the flashing engine.

    Only meaningful while the state's ``is_flashing`` flag is set; the
    default (``percentage=0``, ``speed=-1``) stands for "no progress".
    """

    type: str | None = None
    percentage: int | float = 0
    speed: Any = -1
    eta: int | float | None = None


class FlashResults(FlashBaseModel):
    """Outcome of the last flash.  Empty until a flash ends."""

    cancelled: bool | None = None
    source_checksum: str | None = None
    error_code: str | int | float | None = None
