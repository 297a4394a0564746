"""Pure state transition function.

``reduce(state, action)`` computes the next snapshot from the current one
and a single action.  Derived transitions (an OS selection re-annotating
the drive list, a drive selection picking the recommended image, ...)
are applied by calling back into the same dispatcher with an increasing
depth, all within the one call.

Validation failures raise :class:`~flashcore.exceptions.ValidationError`
before any snapshot is returned.  The only exception is a *derived*
transition wrapped in :func:`attempt`: if it fails validation, the outer
transition continues from the state it had before the cascade.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic.alias_generators import to_snake

from flashcore._constants import DEFAULT_CHECKSUM_TYPE, MAX_CASCADE_DEPTH, SETTING_KEYS
from flashcore.exceptions import CascadeDepthError, ValidationError
from flashcore.models import (
    ApplicationState,
    Drive,
    FlashResults,
    FlashState,
    Image,
    ImageDescriptor,
    OperatingSystem,
    as_mapping,
    is_composite,
    is_number,
    is_record,
)
from flashcore.state.actions import Action, ActionType
from flashcore.state.constraints import DEFAULT_CONSTRAINTS, DriveConstraints

_logger = logging.getLogger(__name__)

_OPTIONAL_IMAGE_STRINGS: dict[str, str] = {
    "url": "url",
    "name": "name",
    "logo": "logo",
    "version": "version",
    "downloadChecksum": "download checksum",
    "downloadChecksumType": "download checksum type",
}

# ------------------------------------------------------------------
# Cascade fallback
# ------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class Attempt:
    """Outcome of a derived transition: a new state or the validation error."""

    state: ApplicationState | None = None
    error: ValidationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def or_else(self, fallback: ApplicationState) -> ApplicationState:
        if self.state is None:
            return fallback
        return self.state


def attempt(transition: Callable[[], ApplicationState]) -> Attempt:
    """Run a derived transition, capturing only validation failures."""
    try:
        return Attempt(state=transition())
    except ValidationError as exc:
        _logger.debug("Derived transition rejected (%s), keeping pre-cascade state", exc)
        return Attempt(error=exc)


@dataclasses.dataclass(frozen=True)
class _Context:
    constraints: DriveConstraints
    max_depth: int


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _field(record: Mapping[str, Any], key: str) -> Any:
    """Read a camelCase payload key, falling back to its snake_case spelling."""
    if key in record:
        return record[key]
    return record.get(to_snake(key))


def recommended_image(
    drive: Drive,
    os: OperatingSystem,
    constraints: DriveConstraints = DEFAULT_CONSTRAINTS,
) -> ImageDescriptor | None:
    """Pick the OS image with the largest recommended drive size that suits *drive*.

    Candidates without a recommended drive size, or that the drive is not
    size-recommended for, are skipped.  On equal recommended sizes the
    first-listed candidate wins.
    """
    best: ImageDescriptor | None = None
    best_size: float = 0
    for candidate in os.images:
        size = candidate.recommended_drive_size
        if size is None or not constraints.is_drive_size_recommended(drive, candidate):
            continue
        if best is None or size > best_size:
            best, best_size = candidate, size
    return best


def _offered_by(os: OperatingSystem, image: Image) -> bool:
    """Whether *image* was derived from one of the candidates of *os*."""
    return image.url is not None and any(candidate.url == image.url for candidate in os.images)


def _drive_record(raw: Any) -> dict[str, Any]:
    record = as_mapping(raw)
    record.pop("recommendedImage", None)
    record.pop("recommended_image", None)
    return record


# ------------------------------------------------------------------
# Per-action transitions
# ------------------------------------------------------------------


def _select_os(state: ApplicationState, data: Any, ctx: _Context, depth: int) -> ApplicationState:
    if not data:
        raise ValidationError("Missing selected operating system", field="os", value=data)

    os = OperatingSystem.from_payload(data, field="os")
    selected_drive = state.selected_drive

    new_state = state.with_selection(os=os)
    image = state.selection.image
    if image is not None and not _offered_by(os, image):
        new_state = _cascade(new_state, ActionType.REMOVE_IMAGE, ctx, depth)
    new_state = _cascade(new_state, ActionType.SET_AVAILABLE_DRIVES, ctx, depth, list(state.available_drives))

    if selected_drive is None:
        return new_state
    drive: Drive = selected_drive

    def reselect() -> ApplicationState:
        if recommended_image(drive, os, ctx.constraints) is None:
            return _cascade(new_state, ActionType.REMOVE_DRIVE, ctx, depth)
        return _cascade(new_state, ActionType.SELECT_DRIVE, ctx, depth, drive.device)

    return attempt(reselect).or_else(new_state)


def _set_available_drives(state: ApplicationState, data: Any, ctx: _Context, depth: int) -> ApplicationState:
    if data is None:
        raise ValidationError("Missing drives", field="drives", value=data)

    if not isinstance(data, (list, tuple)) or not all(is_record(item) for item in data):
        raise ValidationError(f"Invalid drives: {data!r}", field="drives", value=data)

    os = state.selection.os
    image = state.selection.image

    drives: list[Drive] = []
    for item in data:
        drive = Drive.from_payload(_drive_record(item), field="drives")
        if os is not None:
            recommended = recommended_image(drive, os, ctx.constraints)
            if recommended is not None:
                drive = drive.model_copy(update={"recommended_image": recommended})
        drives.append(drive)

    new_state = state.model_copy(update={"available_drives": tuple(drives)})

    if len(drives) == 1:
        drive = drives[0]
        constraints = ctx.constraints
        if all(
            (
                constraints.is_drive_valid(drive, image, os is not None),
                constraints.is_drive_size_recommended(drive, image),
                not constraints.is_system_drive(drive),
            )
        ):
            return _cascade(new_state, ActionType.SELECT_DRIVE, ctx, depth, drive.device)

    selected_device = new_state.selection.drive
    if selected_device is not None and new_state.find_drive(selected_device) is None:
        return _cascade(new_state, ActionType.REMOVE_DRIVE, ctx, depth)

    return new_state


def _set_flash_state(state: ApplicationState, data: Any) -> ApplicationState:
    if not state.is_flashing:
        raise ValidationError("Can't set the flashing state when not flashing", field="isFlashing", value=False)

    if not is_record(data):
        raise ValidationError("Missing flash state", field="flashState", value=data)
    record = as_mapping(data)

    state_type = record.get("type")
    if not state_type:
        raise ValidationError("Missing state type", field="type", value=state_type)
    if not isinstance(state_type, str):
        raise ValidationError(f"Invalid state type: {state_type!r}", field="type", value=state_type)

    percentage = record.get("percentage")
    if percentage is None:
        raise ValidationError("Missing state percentage", field="percentage", value=percentage)
    if not is_number(percentage):
        raise ValidationError(f"Invalid state percentage: {percentage!r}", field="percentage", value=percentage)

    eta = record.get("eta")
    if eta is None:
        raise ValidationError("Missing state eta", field="eta", value=eta)
    if not is_number(eta):
        raise ValidationError(f"Invalid state eta: {eta!r}", field="eta", value=eta)

    if record.get("speed") is None:
        raise ValidationError("Missing state speed", field="speed", value=None)

    return state.model_copy(update={"flash_state": FlashState.from_payload(record, field="flashState")})


def _unset_flashing_flag(state: ApplicationState, data: Any) -> ApplicationState:
    if data is None:
        raise ValidationError("Missing results", field="flashResults", value=data)
    if not is_record(data):
        raise ValidationError(f"Invalid results: {data!r}", field="flashResults", value=data)

    record = as_mapping(data)
    record.setdefault("cancelled", False)

    cancelled = record["cancelled"]
    if not isinstance(cancelled, bool):
        raise ValidationError(f"Invalid results cancelled: {cancelled!r}", field="cancelled", value=cancelled)

    source_checksum = _field(record, "sourceChecksum")
    if cancelled and source_checksum is not None:
        raise ValidationError(
            "The sourceChecksum value can't exist if the flashing was cancelled",
            field="sourceChecksum",
            value=source_checksum,
        )
    if source_checksum is not None and not isinstance(source_checksum, str):
        raise ValidationError(
            f"Invalid results sourceChecksum: {source_checksum!r}", field="sourceChecksum", value=source_checksum
        )

    error_code = _field(record, "errorCode")
    if error_code is not None and not isinstance(error_code, str) and not is_number(error_code):
        raise ValidationError(f"Invalid results errorCode: {error_code!r}", field="errorCode", value=error_code)

    return state.model_copy(
        update={
            "is_flashing": False,
            "flash_results": FlashResults.from_payload(record, field="flashResults"),
            "flash_state": FlashState(),
        }
    )


def _select_drive(state: ApplicationState, data: Any, ctx: _Context, depth: int) -> ApplicationState:
    if not data:
        raise ValidationError("Missing drive", field="drive", value=data)
    if not isinstance(data, str):
        raise ValidationError(f"Invalid drive: {data!r}", field="drive", value=data)

    drive = state.find_drive(data)
    if drive is None:
        raise ValidationError(f"The drive is not available: {data}", field="drive", value=data)
    if drive.protected:
        raise ValidationError("The drive is write-protected", field="drive", value=data)

    os = state.selection.os
    if os is None:
        # A local image file, if any, was picked directly.
        image = state.selection.image
        if image is not None and not ctx.constraints.is_drive_large_enough(drive, image):
            raise ValidationError("The drive is not large enough", field="drive", value=data)
        return state.with_selection(drive=data)

    recommended = drive.recommended_image
    if recommended is not None:
        payload = {
            "path": recommended.url,
            "url": recommended.url,
            "size": recommended.size if recommended.size is not None else recommended.recommended_drive_size,
            "logo": os.logo,
            "version": os.version,
            "downloadChecksum": recommended.checksum,
            "downloadChecksumType": recommended.checksum_type or DEFAULT_CHECKSUM_TYPE,
        }
        payload = {key: value for key, value in payload.items() if value is not None}
        state = attempt(lambda: _cascade(state, ActionType.SELECT_IMAGE, ctx, depth, payload)).or_else(state)

    return state.with_selection(drive=data)


def _select_image(state: ApplicationState, data: Any, ctx: _Context, depth: int) -> ApplicationState:
    if not is_record(data):
        raise ValidationError(f"Invalid image: {data!r}", field="image", value=data)
    record = as_mapping(data)

    path = record.get("path")
    if not path:
        raise ValidationError("Missing image path", field="path", value=path)
    if not isinstance(path, str):
        raise ValidationError(f"Invalid image path: {path!r}", field="path", value=path)

    size = record.get("size")
    if size is None:
        raise ValidationError("Missing image size", field="size", value=size)
    if not is_number(size):
        raise ValidationError(f"Invalid image size: {size!r}", field="size", value=size)

    for key, label in _OPTIONAL_IMAGE_STRINGS.items():
        value = _field(record, key)
        if value is not None and not isinstance(value, str):
            raise ValidationError(f"Invalid image {label}: {value!r}", field=key, value=value)

    image = Image.from_payload(record, field="image")

    if state.selection.os is not None:
        return state.with_selection(image=image)

    selected_drive = state.selected_drive
    constraints = ctx.constraints
    if selected_drive is not None and not (
        constraints.is_drive_valid(selected_drive, image)
        and constraints.is_drive_size_recommended(selected_drive, image)
    ):
        state = attempt(lambda: _cascade(state, ActionType.REMOVE_DRIVE, ctx, depth)).or_else(state)

    return state.with_selection(image=image)


def _remove_os(state: ApplicationState, ctx: _Context, depth: int) -> ApplicationState:
    if state.has_image:
        state = attempt(lambda: _cascade(state, ActionType.REMOVE_IMAGE, ctx, depth)).or_else(state)
    return state.with_selection(os=None)


def _remove_drive(state: ApplicationState, ctx: _Context, depth: int) -> ApplicationState:
    if state.has_os:
        state = attempt(lambda: _cascade(state, ActionType.REMOVE_IMAGE, ctx, depth)).or_else(state)
    return state.with_selection(drive=None)


def _set_setting(state: ApplicationState, data: Any) -> ApplicationState:
    if not is_record(data):
        raise ValidationError(f"Invalid setting: {data!r}", field="setting", value=data)
    record = as_mapping(data)

    key = record.get("key")
    value = record.get("value")

    if not key:
        raise ValidationError("Missing setting key", field="key", value=key)
    if not isinstance(key, str):
        raise ValidationError(f"Invalid setting key: {key!r}", field="key", value=key)
    if key not in SETTING_KEYS:
        raise ValidationError(f"Unsupported setting: {key}", field="key", value=key)
    if is_composite(value):
        raise ValidationError(f"Invalid setting value: {value!r}", field=key, value=value)

    current = state.settings.get(key)
    if current is value or (type(current) is type(value) and current == value):
        return state
    return state.model_copy(update={"settings": state.settings.with_value(key, value)})


# ------------------------------------------------------------------
# Dispatcher
# ------------------------------------------------------------------


def _cascade(
    state: ApplicationState,
    kind: ActionType,
    ctx: _Context,
    depth: int,
    data: Any = None,
) -> ApplicationState:
    _logger.debug("Cascading %s at depth %d", kind, depth + 1)
    return _transition(state, Action(type=kind, data=data), ctx, depth + 1)


def _transition(state: ApplicationState, action: Action, ctx: _Context, depth: int) -> ApplicationState:
    if depth > ctx.max_depth:
        raise CascadeDepthError(f"Derived transitions nested deeper than {ctx.max_depth} levels at {action.type}")

    data = action.data
    match action.kind:
        case ActionType.SELECT_OS:
            return _select_os(state, data, ctx, depth)
        case ActionType.SET_AVAILABLE_DRIVES:
            return _set_available_drives(state, data, ctx, depth)
        case ActionType.SET_FLASH_STATE:
            return _set_flash_state(state, data)
        case ActionType.RESET_FLASH_STATE:
            return state.model_copy(update={"flash_state": FlashState(), "flash_results": FlashResults()})
        case ActionType.SET_FLASHING_FLAG:
            return state.model_copy(update={"is_flashing": True, "flash_results": FlashResults()})
        case ActionType.UNSET_FLASHING_FLAG:
            return _unset_flashing_flag(state, data)
        case ActionType.SELECT_DRIVE:
            return _select_drive(state, data, ctx, depth)
        case ActionType.SELECT_IMAGE:
            return _select_image(state, data, ctx, depth)
        case ActionType.REMOVE_OS:
            return _remove_os(state, ctx, depth)
        case ActionType.REMOVE_DRIVE:
            return _remove_drive(state, ctx, depth)
        case ActionType.REMOVE_IMAGE:
            return state.with_selection(image=None)
        case ActionType.SET_SETTING:
            return _set_setting(state, data)
        case None:
            return state


def reduce(
    state: ApplicationState,
    action: Action,
    *,
    constraints: DriveConstraints = DEFAULT_CONSTRAINTS,
    max_depth: int = MAX_CASCADE_DEPTH,
) -> ApplicationState:
    """Return the state that results from applying *action* to *state*.

    Unknown action kinds return *state* itself.
    """
    return _transition(state, action, _Context(constraints=constraints, max_depth=max_depth), 0)
