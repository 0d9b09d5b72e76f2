"""Thermostat settings table model.

``GET /api/tstat/settings`` returns the thermostat's settings table with
PascalCase keys; the dealer fields are fixed-width, NUL-padded byte
arrays.
"""

from __future__ import annotations

from pydantic import ConfigDict
from pydantic.alias_generators import to_pascal

from pyinfinitive.models._base import InfinitiveBaseModel


def _bytes_to_text(value: list[int] | None) -> str | None:
    if value is None:
        return None
    return bytes(value).split(b"\x00", 1)[0].decode("ascii", errors="replace").strip()


class TstatSettings(InfinitiveBaseModel):
    """Typed view of the thermostat settings table."""

    model_config = ConfigDict(alias_generator=to_pascal)

    backlight_setting: int | None = None
    auto_mode: int | None = None
    dead_band: int | None = None
    cycles_per_hour: int | None = None
    schedule_periods: int | None = None
    programs_enabled: int | None = None
    temp_units: int | None = None
    dealer_name: list[int] | None = None
    dealer_phone: list[int] | None = None

    @property
    def dealer_name_text(self) -> str | None:
        return _bytes_to_text(self.dealer_name)

    @property
    def dealer_phone_text(self) -> str | None:
        return _bytes_to_text(self.dealer_phone)
