"""Base model and enum for thermostat backend documents.

Every document model inherits from :class:`InfinitiveBaseModel` which
provides:

* ``alias_generator=to_camel`` so camelCase API keys map
  automatically to snake_case fields.
* ``extra="allow"`` so fields the backend adds later pass through.
* A ``raw`` dict that captures the original document.
* :meth:`InfinitiveBaseModel.from_document`, which never rejects a
  document: fields that fail validation fall back to their default.

String enums inherit from :class:`InfinitiveEnum` which adds an
``UNKNOWN`` member and a ``_missing_`` hook that returns it for any
value without a mapped member.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

_logger = logging.getLogger(__name__)


class InfinitiveEnum(enum.StrEnum):
    """Base for backend string enums.

    Every subclass **must** define ``UNKNOWN = "unknown"``, which is also
    what the backend reports for raw values it cannot name.
    """

    @classmethod
    def _missing_(cls, value: object) -> InfinitiveEnum:
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        unknown: InfinitiveEnum = cls.UNKNOWN  # type: ignore[attr-defined]
        return unknown

    @classmethod
    def parse(cls, value: str) -> InfinitiveEnum:
        """Strict lookup used for outgoing values.

        Unlike construction, this raises :class:`ValueError` rather than
        mapping unrecognised input to ``UNKNOWN``.
        """
        member = cls(value)
        if member.value == "unknown":
            allowed = ", ".join(m.value for m in cls if m.value != "unknown")
            raise ValueError(f"{cls.__name__} must be one of {allowed}, got {value!r}")
        return member


class InfinitiveBaseModel(BaseModel):
    """Base for backend document models."""

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original document as received."""

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        if "raw" in values:
            return values
        # None means "not reported"; let the field default apply.
        cleaned = {key: value for key, value in values.items() if value is not None}
        cleaned["raw"] = dict(values)
        return cleaned

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> Self:
        """Build a typed view that is never stricter than the document.

        Keys whose value does not fit the declared field type are left
        unset (the original value stays in ``raw``).
        """
        try:
            return cls.model_validate(document)
        except ValidationError as exc:
            rejected = {err["loc"][0] for err in exc.errors() if err["loc"]}
        _logger.debug("%s: ignoring ill-typed fields %s", cls.__name__, sorted(map(str, rejected)))
        kept = {key: value for key, value in document.items() if key not in rejected and value is not None}
        kept["raw"] = dict(document)
        return cls.model_validate(kept)
