"""Vacation schedule endpoints.

Endpoints:
  - GET /api/zone/{zone}/vacation
  - PUT /api/zone/{zone}/vacation

The backend only routes zone 1 for these.
"""

from __future__ import annotations

import logging

from pyinfinitive._api._common import require_object
from pyinfinitive._constants import zone_vacation_path
from pyinfinitive._transport import Transport
from pyinfinitive.config import InfinitiveConfig
from pyinfinitive.models.vacation import VacationConfig

_logger = logging.getLogger(__name__)


async def fetch_vacation(config: InfinitiveConfig, transport: Transport) -> VacationConfig:
    """Fetch the vacation settings."""
    endpoint = zone_vacation_path(config.zone)
    body = require_object(await transport.get_json(endpoint), endpoint)
    return VacationConfig.model_validate(body)


async def update_vacation(config: InfinitiveConfig, transport: Transport, vacation: VacationConfig) -> None:
    """Send the fields set on *vacation*; unset fields keep their value."""
    patch = vacation.to_api_patch()
    if not patch:
        raise ValueError("vacation update must set at least one field")
    endpoint = zone_vacation_path(config.zone)
    response = await transport.put_json(endpoint, patch)
    _logger.debug("Vacation update %s accepted response=%r", patch, response)
