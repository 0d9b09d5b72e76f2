"""Zone configuration endpoints.

Endpoints:
  - GET /api/zone/{zone}/config
  - PUT /api/zone/{zone}/config
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pyinfinitive._api._common import require_object
from pyinfinitive._constants import zone_config_path
from pyinfinitive._transport import Transport
from pyinfinitive.config import InfinitiveConfig

_logger = logging.getLogger(__name__)


async def fetch_zone_config(config: InfinitiveConfig, transport: Transport) -> dict[str, Any]:
    """Fetch the full configuration document of the configured zone."""
    endpoint = zone_config_path(config.zone)
    body = await transport.get_json(endpoint)
    return require_object(body, endpoint)


async def update_zone_config(
    config: InfinitiveConfig,
    transport: Transport,
    patch: Mapping[str, Any],
) -> Any:
    """PUT a partial configuration document.

    The backend applies only the keys present in *patch*. The response
    is not a state document; the corrected state arrives later on the
    live channel.
    """
    if not patch:
        raise ValueError("patch must contain at least one field")
    endpoint = zone_config_path(config.zone)
    response = await transport.put_json(endpoint, patch)
    _logger.debug("Zone config update %s accepted response=%r", dict(patch), response)
    return response
