"""Equipment models: air handler (blower) and heat pump.

Mapped from ``GET /api/airhandler`` / ``GET /api/heatpump`` and from
live channel frames with ``source`` ``"blower"`` / ``"heatpump"``.
"""

from __future__ import annotations

from pydantic import Field

from pyinfinitive.models._base import InfinitiveBaseModel


class BlowerState(InfinitiveBaseModel):
    """Typed view of the blower mirror."""

    blower_rpm: int | None = Field(default=None, alias="blowerRPM")
    air_flow_cfm: int | None = Field(default=None, alias="airFlowCFM")
    elec_heat: bool | None = None


class HeatPumpState(InfinitiveBaseModel):
    """Typed view of the heat pump mirror."""

    temp_unit: str | None = None
    coil_temp: float | None = None
    outside_temp: float | None = None
    stage: int | None = None
