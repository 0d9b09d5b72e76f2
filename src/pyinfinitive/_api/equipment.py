"""Equipment status endpoints.

Endpoints:
  - GET /api/airhandler
  - GET /api/heatpump
"""

from __future__ import annotations

from typing import Any

from pyinfinitive._api._common import require_object
from pyinfinitive._constants import AIR_HANDLER_PATH, HEAT_PUMP_PATH
from pyinfinitive._transport import Transport


async def fetch_air_handler(transport: Transport) -> dict[str, Any]:
    """Fetch the air handler (blower) status document."""
    return require_object(await transport.get_json(AIR_HANDLER_PATH), AIR_HANDLER_PATH)


async def fetch_heat_pump(transport: Transport) -> dict[str, Any]:
    """Fetch the heat pump status document."""
    return require_object(await transport.get_json(HEAT_PUMP_PATH), HEAT_PUMP_PATH)
