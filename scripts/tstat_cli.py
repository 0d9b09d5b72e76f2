#!/usr/bin/env python3
"""Command line access to an infinitive thermostat backend.

Examples::

    tstat_cli.py --base-url http://thermostat:8080 watch
    tstat_cli.py show
    tstat_cli.py fan high
    tstat_cli.py mode cool
    tstat_cli.py hold on
    tstat_cli.py cool +2
    tstat_cli.py heat 68
    tstat_cli.py raw 2001 003b02

Connection settings fall back to ``INFINITIVE_*`` environment variables.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyinfinitive import (  # noqa: E402
    InfinitiveConfig,
    InfinitiveError,
    MirrorChange,
    ThermostatSession,
)


def _print_json(label: str, data: Any) -> None:
    print(f"{label}: {json.dumps(data, sort_keys=True)}")


def _setpoint_arg(raw: str) -> tuple[bool, int]:
    """Return ``(is_relative, value)`` for ``+2``/``-1``/``70`` style input."""
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected whole degrees like 70, +2 or -1, got {raw!r}") from None
    return raw.startswith(("+", "-")), value


async def _watch(session: ThermostatSession, duration: float | None) -> None:
    def _on_change(change: MirrorChange) -> None:
        _print_json(f"{change.origin}:{change.section}", change.data)

    session.add_listener(_on_change)
    session.add_error_listener(lambda err: print(f"error: {err}", file=sys.stderr))
    channel = await session.initialize()
    await channel.wait_connected(timeout=30)
    if duration is None:
        await asyncio.Event().wait()
    else:
        await asyncio.sleep(duration)


async def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, Any] = {}
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.ws_url:
        overrides["ws_url"] = args.ws_url
    if args.zone is not None:
        overrides["zone"] = args.zone
    config = InfinitiveConfig.from_env(**overrides)

    async with ThermostatSession(config) as session:
        if args.command == "watch":
            await _watch(session, args.duration)
        elif args.command == "show":
            await session.refresh_state()
            _print_json("tstat", session.tstat)
            _print_json("blower", (await session.get_air_handler()).raw)
            _print_json("heatpump", (await session.get_heat_pump()).raw)
        elif args.command == "fan":
            await session.set_fan_speed(args.value)
        elif args.command == "mode":
            await session.set_mode(args.value)
        elif args.command == "hold":
            await session.set_hold(args.value == "on")
        elif args.command in {"cool", "heat"}:
            relative, value = args.value
            if relative:
                await session.refresh_state()
                inc = session.inc_cool_setpoint if args.command == "cool" else session.inc_heat_setpoint
                sent = await inc(value)
            else:
                setter = session.set_cool_setpoint if args.command == "cool" else session.set_heat_setpoint
                await setter(value)
                sent = value
            print(f"{args.command}Setpoint -> {sent}")
        elif args.command == "vacation":
            _print_json("vacation", (await session.get_vacation()).to_api_patch())
        elif args.command == "settings":
            settings = await session.get_tstat_settings()
            _print_json("settings", settings.raw)
            print(f"dealer: {settings.dealer_name_text} {settings.dealer_phone_text}")
        elif args.command == "raw":
            print((await session.read_raw_table(args.device, args.table)).hex())
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--base-url", help="Backend HTTP base URL (INFINITIVE_BASE_URL)")
    parser.add_argument("--ws-url", help="Live channel URL (INFINITIVE_WS_URL)")
    parser.add_argument("--zone", type=int, help="Zone number (INFINITIVE_ZONE)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    watch = sub.add_parser("watch", help="Print live state updates")
    watch.add_argument("--duration", type=float, help="Stop after N seconds")
    sub.add_parser("show", help="Fetch and print current state")
    sub.add_parser("vacation", help="Print vacation settings")
    sub.add_parser("fan", help="Set fan speed").add_argument("value", choices=["auto", "low", "med", "high"])
    sub.add_parser("mode", help="Set operating mode").add_argument("value", choices=["heat", "cool", "auto", "off"])
    sub.add_parser("hold", help="Set hold").add_argument("value", choices=["on", "off"])
    sub.add_parser("cool", help="Set cool setpoint (70) or adjust it (+2, -1)").add_argument(
        "value", type=_setpoint_arg
    )
    sub.add_parser("heat", help="Set heat setpoint (68) or adjust it (+2, -1)").add_argument(
        "value", type=_setpoint_arg
    )
    sub.add_parser("settings", help="Print the thermostat settings table")
    raw = sub.add_parser("raw", help="Read a raw table from a bus device")
    raw.add_argument("device", help="4 hex digit device address, e.g. 2001")
    raw.add_argument("table", help="6 hex digit table address, e.g. 003b02")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return asyncio.run(_run(args))
    except KeyboardInterrupt:
        return 130
    except (InfinitiveError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
