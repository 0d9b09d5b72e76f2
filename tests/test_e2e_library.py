from __future__ import annotations

import asyncio
import json
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from pyinfinitive import (
    FanMode,
    InfinitiveConfig,
    InfinitiveError,
    InfinitiveRequestError,
    MirrorChange,
    ThermostatSession,
    UpdateOrigin,
)


@dataclass
class FakeInfinitiveBackend:
    """In-process stand-in for the thermostat web server."""

    tstat: dict[str, Any] = field(
        default_factory=lambda: {
            "tempUnit": "F",
            "currentTemp": 72,
            "currentHumidity": 41,
            "outdoorTemp": 60,
            "mode": "cool",
            "stage": 0,
            "fanMode": "auto",
            "hold": False,
            "heatSetpoint": 66,
            "coolSetpoint": 74,
            "rawMode": 1,
        }
    )
    blower: dict[str, Any] = field(default_factory=lambda: {"blowerRPM": 0, "airFlowCFM": 0, "elecHeat": False})
    heatpump: dict[str, Any] = field(
        default_factory=lambda: {"tempUnit": "F", "coilTemp": 55.0, "outsideTemp": 60.0, "stage": 0}
    )
    vacation: dict[str, Any] = field(
        default_factory=lambda: {
            "active": False,
            "days": 0,
            "minTemperature": 55,
            "maxTemperature": 85,
            "minHumidity": 10,
            "maxHumidity": 65,
            "fanMode": "auto",
        }
    )
    tstat_settings: dict[str, Any] = field(
        default_factory=lambda: {
            "BacklightSetting": 1,
            "AutoMode": 1,
            "Unknown1": 0,
            "DeadBand": 2,
            "CyclesPerHour": 4,
            "SchedulePeriods": 4,
            "ProgramsEnabled": 0,
            "TempUnits": 0,
            "Unknown2": 0,
            "DealerName": list(b"ACME HVAC".ljust(20, b"\x00")),
            "DealerPhone": list(b"555-0100".ljust(20, b"\x00")),
        }
    )
    raw_tables: dict[tuple[str, str], bytes] = field(default_factory=lambda: {("2001", "003b02"): b"\x01\x02\xff"})
    config_puts: list[dict[str, Any]] = field(default_factory=list)
    clients: list[web.WebSocketResponse] = field(default_factory=list)
    connections: int = 0

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/api/ws", self._ws)
        app.router.add_get("/api/zone/{zone}/config", self._get_config)
        app.router.add_put("/api/zone/{zone}/config", self._put_config)
        app.router.add_get("/api/airhandler", self._json(lambda: self.blower))
        app.router.add_get("/api/heatpump", self._json(lambda: self.heatpump))
        app.router.add_get("/api/zone/1/vacation", self._json(lambda: self.vacation))
        app.router.add_put("/api/zone/1/vacation", self._put_vacation)
        app.router.add_get("/api/tstat/settings", self._json(lambda: self.tstat_settings))
        app.router.add_get("/api/raw/{device}/{table}", self._raw)
        return app

    @staticmethod
    def _json(source: Callable[[], dict[str, Any]]) -> Callable[[web.Request], Any]:
        async def handler(_request: web.Request) -> web.Response:
            return web.json_response(source())

        return handler

    @staticmethod
    def _zone_ok(request: web.Request) -> bool:
        zone = request.match_info["zone"]
        return zone.isdigit() and 1 <= int(zone) <= 8

    async def _get_config(self, request: web.Request) -> web.Response:
        if not self._zone_ok(request):
            return web.json_response([{"error": "invalid zone"}], status=400)
        return web.json_response(self.tstat)

    async def _put_config(self, request: web.Request) -> web.Response:
        if not self._zone_ok(request):
            return web.json_response([{"error": "invalid zone"}], status=400)
        patch = await request.json()
        self.config_puts.append(patch)
        self.tstat = {**self.tstat, **patch}
        await self.broadcast("tstat", self.tstat)
        return web.Response()

    async def _put_vacation(self, request: web.Request) -> web.Response:
        self.vacation = {**self.vacation, **await request.json()}
        return web.Response()

    async def _raw(self, request: web.Request) -> web.Response:
        device, table = request.match_info["device"], request.match_info["table"]
        if not re.fullmatch(r"[a-f0-9]{4}", device) or not re.fullmatch(r"[a-f0-9]{6}", table):
            return web.json_response([{"error": "bad address"}], status=400)
        data = self.raw_tables.get((device, table))
        if data is None:
            return web.json_response([{"error": "timed out waiting for response"}], status=504)
        return web.json_response({"response": data.hex()})

    async def _ws(self, request: web.Request) -> web.WebSocketResponse:
        self.connections += 1
        ws = web.WebSocketResponse()
        await ws.prepare(request)
        for source, data in (("tstat", self.tstat), ("blower", self.blower), ("heatpump", self.heatpump)):
            await ws.send_str(json.dumps({"source": source, "data": data}))
        self.clients.append(ws)
        try:
            async for _msg in ws:
                pass
        finally:
            if ws in self.clients:
                self.clients.remove(ws)
        return ws

    async def broadcast(self, source: str, data: dict[str, Any]) -> None:
        frame = json.dumps({"source": source, "data": data})
        for ws in list(self.clients):
            await ws.send_str(frame)

    async def drop_clients(self) -> None:
        dropped, self.clients = self.clients, []
        for ws in dropped:
            await ws.close(code=aiohttp.WSCloseCode.INTERNAL_ERROR)


async def _eventually(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_poll(), timeout)


def _config(server: TestServer, **overrides: Any) -> InfinitiveConfig:
    return InfinitiveConfig(base_url=str(server.make_url("/")), reconnect_initial_delay=0.01, **overrides)


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_live_updates_follow_configuration_changes() -> None:
    backend = FakeInfinitiveBackend()
    changes: list[MirrorChange] = []

    async with TestServer(backend.app()) as server:
        async with ThermostatSession(_config(server), on_state_change=changes.append) as session:
            channel = await session.initialize()
            await channel.wait_connected(timeout=5)
            await _eventually(lambda: session.heatpump != {})

            assert session.tstat == backend.tstat
            assert session.blower == backend.blower
            assert session.thermostat.cool_setpoint == 74

            await session.set_fan_speed("high")
            await _eventually(lambda: session.tstat.get("fanMode") == "high")
            assert session.thermostat.fan_mode is FanMode.HIGH

            await session.inc_cool_setpoint(2)
            await _eventually(lambda: session.tstat.get("coolSetpoint") == 76)

            await session.set_hold(True)
            await session.set_mode("heat")
            await _eventually(lambda: session.tstat.get("mode") == "heat")
            assert session.tstat["hold"] is True

        assert channel.is_running is False

    assert backend.config_puts == [
        {"fanMode": "high"},
        {"coolSetpoint": 76},
        {"hold": True},
        {"mode": "heat"},
    ]
    assert all(c.origin is UpdateOrigin.CHANNEL for c in changes)


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_channel_recovers_after_server_drop() -> None:
    backend = FakeInfinitiveBackend()

    async with TestServer(backend.app()) as server:
        async with ThermostatSession(_config(server)) as session:
            await session.initialize()
            await _eventually(lambda: len(backend.clients) == 1)

            await backend.drop_clients()
            await _eventually(lambda: backend.connections == 2 and len(backend.clients) == 1)

            await backend.broadcast("tstat", {"coolSetpoint": 80})
            await _eventually(lambda: session.tstat == {"coolSetpoint": 80})


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_http_reads_and_vacation() -> None:
    backend = FakeInfinitiveBackend()

    async with TestServer(backend.app()) as server:
        async with ThermostatSession(_config(server)) as session:
            state = await session.refresh_state()
            blower = await session.get_air_handler()
            heat_pump = await session.get_heat_pump()

            await session.set_vacation(active=True, days=3)
            vacation = await session.get_vacation()

    assert state.cool_setpoint == 74
    assert blower.elec_heat is False
    assert heat_pump.coil_temp == pytest.approx(55.0)
    assert vacation.active is True
    assert vacation.days == 3
    assert vacation.max_temperature == 85


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_rejected_zone_surfaces_request_error() -> None:
    backend = FakeInfinitiveBackend()
    errors: list[InfinitiveError] = []

    async with TestServer(backend.app()) as server:
        async with ThermostatSession(_config(server, zone=9), on_error=errors.append) as session:
            with pytest.raises(InfinitiveRequestError) as excinfo:
                await session.set_mode("off")

            assert session.last_error is excinfo.value

    assert excinfo.value.status_code == 400
    assert errors == [excinfo.value]
    assert backend.config_puts == []


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_tstat_settings_and_raw_tables() -> None:
    backend = FakeInfinitiveBackend()

    async with TestServer(backend.app()) as server:
        async with ThermostatSession(_config(server)) as session:
            settings = await session.get_tstat_settings()
            data = await session.read_raw_table(0x2001, b"\x00\x3b\x02")
            same = await session.read_raw_table("2001", "003B02")
            with pytest.raises(InfinitiveRequestError) as excinfo:
                await session.read_raw_table("4001", "003b03")

    assert settings.dead_band == 2
    assert settings.cycles_per_hour == 4
    assert settings.dealer_name_text == "ACME HVAC"
    assert settings.dealer_phone_text == "555-0100"
    assert settings.model_extra == {"Unknown1": 0, "Unknown2": 0}
    assert data == same == b"\x01\x02\xff"
    assert excinfo.value.status_code == 504
