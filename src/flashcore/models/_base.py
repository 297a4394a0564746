"""Base model and shared value predicates for state records.

Every state record inherits from :class:`FlashBaseModel` which
provides:

* ``alias_generator=to_camel`` so the camelCase keys used by drive
  enumerators, OS catalogs and persisted settings map automatically to
  snake_case fields.
* ``frozen=True`` so a snapshot handed to a subscriber can never be
  changed by a later dispatch.
* A ``model_validator(mode="before")`` that drops ``None`` values so the
  field default is used instead.
"""

from __future__ import annotations

from collections.abc import Mapping, Set
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from flashcore.exceptions import ValidationError

# ---------------------------------------------------------------------------
# Shared value predicates
# ---------------------------------------------------------------------------


def is_number(value: Any) -> bool:
    """Return ``True`` for ints and floats, but not for ``bool``."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_record(value: Any) -> bool:
    """Return ``True`` for plain key/value records (mappings or models)."""
    return isinstance(value, (Mapping, BaseModel))


def is_composite(value: Any) -> bool:
    """Return ``True`` for object-typed values (records and collections)."""
    if isinstance(value, (str, bytes, bytearray)):
        return False
    return isinstance(value, (Mapping, BaseModel, list, tuple, Set))


def as_mapping(value: Any) -> dict[str, Any]:
    """Copy a mapping or model into a plain camelCase dict."""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, exclude_none=True)
    return dict(value)


class FlashBaseModel(BaseModel):
    """Base for immutable state records."""

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_none(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        return {key: value for key, value in values.items() if value is not None}

    @classmethod
    def from_payload(cls, payload: Any, *, field: str) -> Self:
        """Validate *payload*, translating pydantic errors to :class:`ValidationError`."""
        if isinstance(payload, cls):
            return payload
        try:
            return cls.model_validate(as_mapping(payload) if is_record(payload) else payload)
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            location = ".".join(str(part) for part in first.get("loc", ()))
            name = f"{field}.{location}" if location else field
            raise ValidationError(f"Invalid {name}: {first.get('msg')}", field=name, value=payload) from exc

    def to_dict(self) -> dict[str, Any]:
        """Plain camelCase representation, omitting unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)
