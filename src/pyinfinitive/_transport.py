"""HTTP transport for the thermostat configuration API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyinfinitive._constants import USER_AGENT
from pyinfinitive.config import InfinitiveConfig
from pyinfinitive.exceptions import InfinitiveRequestError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, endpoint: str) -> Any: ...

    async def put_json(self, endpoint: str, body: Mapping[str, Any]) -> Any: ...


class HttpTransport:
    """JSON-over-HTTP transport with a bounded per-request timeout."""

    def __init__(self, config: InfinitiveConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def get_json(self, endpoint: str) -> Any:
        """GET *endpoint* and return the decoded JSON body."""
        text = await self._request("GET", endpoint)
        return self._decode(endpoint, text, allow_empty=False)

    async def put_json(self, endpoint: str, body: Mapping[str, Any]) -> Any:
        """PUT a JSON *body* to *endpoint*.

        The backend answers configuration writes with an empty body, so
        an empty response decodes to ``None`` and a non-JSON body is
        returned as text. The write already succeeded at that point.
        """
        payload = json.dumps(dict(body), separators=(",", ":"))
        text = await self._request("PUT", endpoint, data=payload)
        try:
            return self._decode(endpoint, text, allow_empty=True)
        except InfinitiveRequestError:
            return text

    async def _request(self, method: str, endpoint: str, *, data: str | None = None) -> str:
        url = f"{self._config.base_url}{endpoint}"
        headers = {"accept": "application/json", "user-agent": USER_AGENT}
        if data is not None:
            headers["content-type"] = "application/json; charset=UTF-8"

        _logger.debug("%s %s body=%s", method, url, data)

        try:
            async with self._http.request(method, url, data=data, headers=headers, timeout=self._timeout) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    raise InfinitiveRequestError(
                        f"HTTP {resp.status} from {method} {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except InfinitiveRequestError:
            raise
        except TimeoutError as exc:
            raise InfinitiveRequestError(
                f"{method} {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise InfinitiveRequestError(
                f"{method} {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        _logger.debug("%s %s -> %d bytes", method, endpoint, len(text))
        return text

    @staticmethod
    def _decode(endpoint: str, text: str, *, allow_empty: bool) -> Any:
        if not text.strip():
            if allow_empty:
                return None
            raise InfinitiveRequestError(f"Empty response from {endpoint}", endpoint=endpoint)
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise InfinitiveRequestError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc
