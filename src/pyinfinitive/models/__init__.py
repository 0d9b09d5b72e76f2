"""Data models for thermostat backend documents."""

from pyinfinitive.models._base import InfinitiveBaseModel, InfinitiveEnum
from pyinfinitive.models.equipment import BlowerState, HeatPumpState
from pyinfinitive.models.message import InboundMessage, MessageSource
from pyinfinitive.models.settings import TstatSettings
from pyinfinitive.models.thermostat import FanMode, OperatingMode, ThermostatState
from pyinfinitive.models.vacation import VacationConfig

__all__ = [
    "BlowerState",
    "FanMode",
    "HeatPumpState",
    "InboundMessage",
    "InfinitiveBaseModel",
    "InfinitiveEnum",
    "MessageSource",
    "OperatingMode",
    "ThermostatState",
    "TstatSettings",
    "VacationConfig",
]
