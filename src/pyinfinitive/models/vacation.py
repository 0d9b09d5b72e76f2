"""Vacation schedule model for ``/api/zone/{zone}/vacation``."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from pyinfinitive.models._base import InfinitiveBaseModel
from pyinfinitive.models.thermostat import FanMode


class VacationConfig(InfinitiveBaseModel):
    """Vacation mode settings.

    The same shape is used for reads and writes. On writes only the
    fields that are set are sent, so the backend leaves the rest alone.
    """

    active: bool | None = None
    days: int | None = Field(default=None, ge=0)
    min_temperature: int | None = None
    max_temperature: int | None = None
    min_humidity: int | None = Field(default=None, ge=0, le=100)
    max_humidity: int | None = Field(default=None, ge=0, le=100)
    fan_mode: FanMode | None = None

    def to_api_patch(self) -> dict[str, Any]:
        """Camel-cased body with unset fields and ``raw`` dropped."""
        fields = set(type(self).model_fields) - {"raw"}
        return self.model_dump(by_alias=True, exclude_none=True, include=fields, mode="json")
