"""pyinfinitive - Async Python client for the infinitive thermostat controller API."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyinfinitive")
except PackageNotFoundError:
    __version__ = "0+local"
from pyinfinitive._channel import StateChannel
from pyinfinitive.config import InfinitiveConfig
from pyinfinitive.exceptions import (
    InfinitiveChannelError,
    InfinitiveConfigError,
    InfinitiveDecodeError,
    InfinitiveError,
    InfinitiveRequestError,
    InfinitiveStateError,
    InfinitiveTransportError,
)
from pyinfinitive.models import (
    BlowerState,
    FanMode,
    HeatPumpState,
    InboundMessage,
    MessageSource,
    OperatingMode,
    ThermostatState,
    TstatSettings,
    VacationConfig,
)
from pyinfinitive.session import ThermostatSession
from pyinfinitive.state.events import MirrorChange, UpdateOrigin

__all__ = [
    "__version__",
    "BlowerState",
    "FanMode",
    "HeatPumpState",
    "InboundMessage",
    "InfinitiveChannelError",
    "InfinitiveConfig",
    "InfinitiveConfigError",
    "InfinitiveDecodeError",
    "InfinitiveError",
    "InfinitiveRequestError",
    "InfinitiveStateError",
    "InfinitiveTransportError",
    "MessageSource",
    "MirrorChange",
    "OperatingMode",
    "StateChannel",
    "ThermostatSession",
    "ThermostatState",
    "TstatSettings",
    "UpdateOrigin",
    "VacationConfig",
]
