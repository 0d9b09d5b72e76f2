"""Thermostat zone configuration model.

Mapped from ``GET /api/zone/{zone}/config`` and from live channel frames
with ``source == "tstat"``.
"""

from __future__ import annotations

from pydantic import Field

from pyinfinitive.models._base import InfinitiveBaseModel, InfinitiveEnum

__all__ = [
    "FanMode",
    "OperatingMode",
    "ThermostatState",
]


class FanMode(InfinitiveEnum):
    """Blower fan speed selection."""

    UNKNOWN = "unknown"
    AUTO = "auto"
    LOW = "low"
    MED = "med"
    HIGH = "high"


class OperatingMode(InfinitiveEnum):
    """HVAC operating mode."""

    UNKNOWN = "unknown"
    HEAT = "heat"
    COOL = "cool"
    AUTO = "auto"
    OFF = "off"


class ThermostatState(InfinitiveBaseModel):
    """Typed view of the thermostat mirror.

    Every field is optional because the mirror starts empty and the
    backend owns the schema; unlisted keys are kept as extras.
    """

    cool_setpoint: float | None = None
    heat_setpoint: float | None = None
    fan_mode: FanMode | None = None
    mode: OperatingMode | None = None
    hold: bool | str | None = Field(default=None, description="True/False, or a named hold state")
    temp_unit: str | None = None
    current_temp: float | None = None
    current_humidity: float | None = None
    outdoor_temp: float | None = None
    stage: int | None = None
    raw_mode: int | None = Field(default=None, description="Undecoded mode byte from the thermostat")
