"""Thermostat settings and raw bus table endpoints.

Endpoints:
  - GET /api/tstat/settings
  - GET /api/raw/{device}/{table}

The backend only accepts lowercase hex for raw reads: a 4 digit device
address and a 6 digit table address. It answers ``{"response": hex}``
and 504 when the device does not reply.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from pyinfinitive._api._common import require_object
from pyinfinitive._constants import TSTAT_SETTINGS_PATH, raw_table_path
from pyinfinitive._transport import Transport
from pyinfinitive.exceptions import InfinitiveRequestError

_logger = logging.getLogger(__name__)

_DEVICE_RE = re.compile(r"[a-f0-9]{4}")
_TABLE_RE = re.compile(r"[a-f0-9]{6}")


def normalize_device(device: int | str) -> str:
    """Return *device* as the 4 digit lowercase hex the backend expects."""
    if isinstance(device, bool):
        raise ValueError(f"device must be an int or hex string, got {device!r}")
    if isinstance(device, int):
        if not 0 <= device <= 0xFFFF:
            raise ValueError(f"device address out of range: {device:#x}")
        return f"{device:04x}"
    text = device.strip().lower()
    if not _DEVICE_RE.fullmatch(text):
        raise ValueError(f"device must be a 4 character hex string, got {device!r}")
    return text


def normalize_table(table: bytes | str) -> str:
    """Return *table* as the 6 digit lowercase hex the backend expects."""
    text = table.hex() if isinstance(table, bytes) else table.strip().lower()
    if not _TABLE_RE.fullmatch(text):
        raise ValueError(f"table must be a 6 character hex string, got {table!r}")
    return text


async def fetch_tstat_settings(transport: Transport) -> dict[str, Any]:
    """Fetch the thermostat settings table."""
    return require_object(await transport.get_json(TSTAT_SETTINGS_PATH), TSTAT_SETTINGS_PATH)


async def read_raw_table(transport: Transport, device: int | str, table: bytes | str) -> bytes:
    """Read one table from a bus device and return its raw contents."""
    endpoint = raw_table_path(normalize_device(device), normalize_table(table))
    body = require_object(await transport.get_json(endpoint), endpoint)
    response = body.get("response")
    if not isinstance(response, str):
        raise InfinitiveRequestError(f"Missing 'response' in reply from {endpoint}", endpoint=endpoint)
    try:
        data = bytes.fromhex(response)
    except ValueError as exc:
        raise InfinitiveRequestError(
            f"Non-hex 'response' from {endpoint}: {response[:40]!r}",
            endpoint=endpoint,
        ) from exc
    _logger.debug("Raw table %s -> %d bytes", endpoint, len(data))
    return data
