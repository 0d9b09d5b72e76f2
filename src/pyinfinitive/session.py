"""High-level async session for an infinitive thermostat backend."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import aiohttp
from pydantic import ValidationError

from pyinfinitive._api import equipment as _equipment_api
from pyinfinitive._api import tstat as _tstat_api
from pyinfinitive._api import vacation as _vacation_api
from pyinfinitive._api import zone_config as _zone_api
from pyinfinitive._channel import StateChannel
from pyinfinitive._transport import HttpTransport, Transport
from pyinfinitive.config import InfinitiveConfig
from pyinfinitive.exceptions import (
    InfinitiveChannelError,
    InfinitiveDecodeError,
    InfinitiveError,
    InfinitiveRequestError,
    InfinitiveStateError,
)
from pyinfinitive.models.equipment import BlowerState, HeatPumpState
from pyinfinitive.models.message import InboundMessage, MessageSource
from pyinfinitive.models.settings import TstatSettings
from pyinfinitive.models.thermostat import FanMode, OperatingMode, ThermostatState
from pyinfinitive.models.vacation import VacationConfig
from pyinfinitive.state.events import UpdateOrigin
from pyinfinitive.state.store import MirrorListener, MirrorStore

_logger = logging.getLogger(__name__)

T = TypeVar("T")

ErrorListener = Callable[[InfinitiveError], None]


def _require_number(value: Any, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InfinitiveStateError(f"{field} is not known yet; call refresh_state() or wait for a tstat update")
    return value


def _whole_degrees(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{field} must be a number, got {type(value).__name__}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"{field} must be a whole number of degrees, got {value}")
    return int(value)


def _as_setpoint(value: Any, field: str) -> int:
    """Return *value* as a setpoint the backend can store (one unsigned byte)."""
    setpoint = _whole_degrees(value, field)
    if not 0 <= setpoint <= 255:
        raise ValueError(f"{field} out of range 0-255: {setpoint}")
    return setpoint


class ThermostatSession:
    """Mirror of thermostat state plus the configuration operations.

    Usage::

        async with ThermostatSession(config) as session:
            session.add_listener(lambda change: print(change.section, change.data))
            await session.initialize()
            await session.refresh_state()
            await session.set_fan_speed("high")

    The mirrors are copies of server-owned state. Mutations are sent as
    partial PUTs and are never applied locally; the backend pushes the
    corrected snapshot over the live channel, and that replaces the
    mirror. Setpoint increments are computed from the cached value, so
    two increments sent before a snapshot arrives both start from the
    same base.
    """

    def __init__(
        self,
        config: InfinitiveConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        on_state_change: MirrorListener | None = None,
        on_error: ErrorListener | None = None,
    ) -> None:
        self._config = config or InfinitiveConfig()
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._external_transport = transport is not None
        self._channel: StateChannel | None = None
        self._store = MirrorStore()
        self._error_listeners: list[ErrorListener] = []
        self._last_error: InfinitiveRequestError | None = None
        if on_state_change is not None:
            self._store.add_listener(on_state_change)
        if on_error is not None:
            self._error_listeners.append(on_error)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ThermostatSession:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        if self._transport is None:
            self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Stop the live channel and release the HTTP session if owned."""
        channel = self._channel
        self._channel = None
        if channel is not None:
            await channel.stop()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None

    # ------------------------------------------------------------------
    # Live channel
    # ------------------------------------------------------------------

    async def initialize(self, ws_url: str | None = None) -> StateChannel:
        """Open the live channel and route its messages into the mirrors.

        *ws_url* defaults to ``config.ws_url``, or to the URL derived from
        ``config.base_url``.
        """
        if self._http_session is None:
            raise InfinitiveError("Session not initialized. Use 'async with ThermostatSession(...) as session:'")
        if self._channel is not None:
            raise InfinitiveChannelError("Live channel already initialized for this session")
        url = ws_url or self._config.live_url
        channel = StateChannel(
            self._http_session,
            reconnect_if_not_normal_close=True,
            initial_delay=self._config.reconnect_initial_delay,
            max_delay=self._config.reconnect_max_delay,
            max_attempts=self._config.reconnect_max_attempts,
            stable_after=self._config.reconnect_stable_after,
            heartbeat=self._config.heartbeat,
            on_error=self._notify_error,
            logger=_logger,
        )
        channel.start(url, self.dispatch)
        self._channel = channel
        return channel

    @property
    def channel(self) -> StateChannel | None:
        return self._channel

    def dispatch(self, message: Any) -> None:
        """Apply one decoded live channel message.

        Known sources replace their mirror with ``data`` (no merge). Unknown
        sources are ignored. Anything that is not a ``{source, data}``
        object is reported as a decode error and dropped.
        """
        try:
            inbound = InboundMessage.model_validate(message)
        except ValidationError as exc:
            error = InfinitiveDecodeError(f"Malformed live channel message: {exc.error_count()} validation error(s)")
            _logger.warning("%s: %r", error, message)
            self._notify_error(error)
            return

        section = inbound.known_source
        if section is None:
            _logger.debug("Ignoring live channel message with unknown source %r", inbound.source)
            return
        self._store.replace(section, inbound.data, UpdateOrigin.CHANNEL)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def add_listener(self, listener: MirrorListener) -> Callable[[], None]:
        """Call *listener* with a :class:`MirrorChange` after every mirror replace."""
        return self._store.add_listener(listener)

    def add_error_listener(self, listener: ErrorListener) -> Callable[[], None]:
        """Call *listener* with request, decode and channel give-up errors."""
        self._error_listeners.append(listener)

        def _remove() -> None:
            if listener in self._error_listeners:
                self._error_listeners.remove(listener)

        return _remove

    def _notify_error(self, error: InfinitiveError) -> None:
        for listener in list(self._error_listeners):
            try:
                listener(error)
            except Exception:
                _logger.debug("Error listener failed", exc_info=True)

    # ------------------------------------------------------------------
    # Mirrors
    # ------------------------------------------------------------------

    @property
    def tstat(self) -> dict[str, Any]:
        """Copy of the thermostat mirror."""
        return self._store.get(MessageSource.TSTAT)

    @property
    def blower(self) -> dict[str, Any]:
        """Copy of the blower mirror."""
        return self._store.get(MessageSource.BLOWER)

    @property
    def heatpump(self) -> dict[str, Any]:
        """Copy of the heat pump mirror."""
        return self._store.get(MessageSource.HEATPUMP)

    @property
    def thermostat(self) -> ThermostatState:
        return ThermostatState.from_document(self.tstat)

    @property
    def blower_state(self) -> BlowerState:
        return BlowerState.from_document(self.blower)

    @property
    def heat_pump_state(self) -> HeatPumpState:
        return HeatPumpState.from_document(self.heatpump)

    @property
    def last_error(self) -> InfinitiveRequestError | None:
        """Most recent failed HTTP call; cleared by the next successful one."""
        return self._last_error

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise InfinitiveError("Session not initialized. Use 'async with ThermostatSession(...) as session:'")
        return self._transport

    async def _call(self, fn: Callable[[], Awaitable[T]]) -> T:
        """Run an HTTP call, recording and broadcasting request failures."""
        try:
            result = await fn()
        except InfinitiveRequestError as exc:
            self._last_error = exc
            _logger.warning("Request failed: %s", exc)
            self._notify_error(exc)
            raise
        self._last_error = None
        return result

    async def _update_config(self, patch: dict[str, Any]) -> None:
        async def _put() -> Any:
            return await _zone_api.update_zone_config(self._config, self._require_transport(), patch)

        await self._call(_put)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def refresh_state(self) -> ThermostatState:
        """Fetch the zone configuration and replace the thermostat mirror with it."""

        async def _fetch() -> dict[str, Any]:
            return await _zone_api.fetch_zone_config(self._config, self._require_transport())

        body = await self._call(_fetch)
        self._store.replace(MessageSource.TSTAT, body, UpdateOrigin.HTTP)
        return ThermostatState.from_document(body)

    async def get_air_handler(self) -> BlowerState:
        """Fetch air handler status and replace the blower mirror with it."""

        async def _fetch() -> dict[str, Any]:
            return await _equipment_api.fetch_air_handler(self._require_transport())

        body = await self._call(_fetch)
        self._store.replace(MessageSource.BLOWER, body, UpdateOrigin.HTTP)
        return BlowerState.from_document(body)

    async def get_heat_pump(self) -> HeatPumpState:
        """Fetch heat pump status and replace the heat pump mirror with it."""

        async def _fetch() -> dict[str, Any]:
            return await _equipment_api.fetch_heat_pump(self._require_transport())

        body = await self._call(_fetch)
        self._store.replace(MessageSource.HEATPUMP, body, UpdateOrigin.HTTP)
        return HeatPumpState.from_document(body)

    async def get_vacation(self) -> VacationConfig:
        """Fetch vacation settings."""

        async def _fetch() -> VacationConfig:
            return await _vacation_api.fetch_vacation(self._config, self._require_transport())

        return await self._call(_fetch)

    async def get_tstat_settings(self) -> TstatSettings:
        """Fetch the thermostat settings table (backlight, dead band, dealer info)."""

        async def _fetch() -> dict[str, Any]:
            return await _tstat_api.fetch_tstat_settings(self._require_transport())

        return TstatSettings.from_document(await self._call(_fetch))

    async def read_raw_table(self, device: int | str, table: bytes | str) -> bytes:
        """Read a table straight off the bus.

        *device* is a 16-bit bus address (``0x2001`` or ``"2001"``) and
        *table* a 3-byte table address (``b"\\x00\\x3b\\x02"`` or
        ``"003b02"``). Malformed addresses raise :class:`ValueError`
        without a request being sent.
        """
        device_hex = _tstat_api.normalize_device(device)
        table_hex = _tstat_api.normalize_table(table)

        async def _fetch() -> bytes:
            return await _tstat_api.read_raw_table(self._require_transport(), device_hex, table_hex)

        return await self._call(_fetch)

    # ------------------------------------------------------------------
    # Configuration changes
    # ------------------------------------------------------------------

    async def set_fan_speed(self, speed: FanMode | str) -> None:
        """Send ``{"fanMode": speed}``."""
        value = FanMode.parse(speed)
        await self._update_config({"fanMode": value.value})

    async def set_mode(self, mode: OperatingMode | str) -> None:
        """Send ``{"mode": mode}``."""
        value = OperatingMode.parse(mode)
        await self._update_config({"mode": value.value})

    async def set_hold(self, hold: bool) -> None:
        """Send ``{"hold": hold}``."""
        if not isinstance(hold, bool):
            raise TypeError(f"hold must be a bool, got {type(hold).__name__}")
        await self._update_config({"hold": hold})

    async def set_cool_setpoint(self, value: int) -> None:
        """Send an absolute ``{"coolSetpoint": value}`` (whole degrees)."""
        await self._update_config({"coolSetpoint": _as_setpoint(value, "coolSetpoint")})

    async def set_heat_setpoint(self, value: int) -> None:
        """Send an absolute ``{"heatSetpoint": value}`` (whole degrees)."""
        await self._update_config({"heatSetpoint": _as_setpoint(value, "heatSetpoint")})

    async def inc_cool_setpoint(self, delta: int) -> int:
        """Send the cached cool setpoint plus *delta*; return the value sent."""
        return await self._inc_setpoint("coolSetpoint", delta)

    async def inc_heat_setpoint(self, delta: int) -> int:
        """Send the cached heat setpoint plus *delta*; return the value sent."""
        return await self._inc_setpoint("heatSetpoint", delta)

    async def _inc_setpoint(self, field: str, delta: int) -> int:
        step = _whole_degrees(delta, f"{field} delta")
        current = _require_number(self._store.get(MessageSource.TSTAT).get(field), field)
        target = _as_setpoint(current + step, field)
        await self._update_config({field: target})
        return target

    async def set_vacation(
        self,
        *,
        active: bool | None = None,
        days: int | None = None,
        min_temperature: int | None = None,
        max_temperature: int | None = None,
        min_humidity: int | None = None,
        max_humidity: int | None = None,
        fan_mode: FanMode | str | None = None,
    ) -> None:
        """Update vacation settings; only the arguments given are sent."""
        vacation = VacationConfig(
            active=active,
            days=days,
            min_temperature=min_temperature,
            max_temperature=max_temperature,
            min_humidity=min_humidity,
            max_humidity=max_humidity,
            fan_mode=FanMode.parse(fan_mode) if fan_mode is not None else None,
        )

        async def _put() -> None:
            await _vacation_api.update_vacation(self._config, self._require_transport(), vacation)

        await self._call(_put)

