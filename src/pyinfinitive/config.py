"""Client configuration for pyinfinitive."""

from __future__ import annotations

import dataclasses
import os
from typing import Any
from urllib.parse import urlsplit, urlunsplit

from pyinfinitive._constants import BASE_URL, DEFAULT_ZONE, WS_PATH
from pyinfinitive.exceptions import InfinitiveConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def derive_ws_url(base_url: str) -> str:
    """Build the live channel URL from an HTTP base URL.

    ``http://host:port`` becomes ``ws://host:port/api/ws`` and ``https``
    maps to ``wss``. Any path on *base_url* is replaced.
    """
    parts = urlsplit(base_url)
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise InfinitiveConfigError(f"base_url must be an absolute http(s) URL, got {base_url!r}")
    scheme = "wss" if parts.scheme == "https" else "ws"
    return urlunsplit((scheme, parts.netloc, WS_PATH, "", ""))


@dataclasses.dataclass(frozen=True)
class InfinitiveConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        HTTP base URL of the thermostat backend (scheme, host and port).
    ws_url : str or None
        Live channel URL. Derived from ``base_url`` when omitted.
    zone : int
        Zone addressed by the configuration endpoints.
    request_timeout : float
        Total timeout in seconds for each HTTP request.
    reconnect_initial_delay : float
        Delay in seconds before the first reconnect attempt after an
        abnormal close. Doubles on every further failed attempt.
    reconnect_max_delay : float
        Upper bound for the reconnect delay.
    reconnect_max_attempts : int or None
        Consecutive failed attempts after which the channel gives up.
        ``None`` retries forever. Connections that drop before
        ``reconnect_stable_after`` count as failed attempts.
    reconnect_stable_after : float
        Seconds a connection must stay up before the reconnect delay
        starts over from ``reconnect_initial_delay``.
    heartbeat : float or None
        WebSocket ping interval in seconds, or ``None`` to disable.
    """

    base_url: str = BASE_URL
    ws_url: str | None = None
    zone: int = DEFAULT_ZONE
    request_timeout: float = 10.0
    reconnect_initial_delay: float = 0.5
    reconnect_max_delay: float = 30.0
    reconnect_max_attempts: int | None = None
    reconnect_stable_after: float = 5.0
    heartbeat: float | None = None

    def __post_init__(self) -> None:
        if self.zone < 1:
            raise InfinitiveConfigError(f"zone must be >= 1, got {self.zone}")
        if self.request_timeout <= 0:
            raise InfinitiveConfigError("request_timeout must be positive")
        if self.reconnect_initial_delay < 0 or self.reconnect_max_delay < 0:
            raise InfinitiveConfigError("reconnect delays must not be negative")
        if self.reconnect_stable_after < 0:
            raise InfinitiveConfigError("reconnect_stable_after must not be negative")
        if self.reconnect_max_attempts is not None and self.reconnect_max_attempts < 1:
            raise InfinitiveConfigError("reconnect_max_attempts must be >= 1 or None")
        # Strip a trailing slash so paths can be appended verbatim.
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @property
    def live_url(self) -> str:
        """Configured live channel URL, or the one derived from ``base_url``."""
        return self.ws_url or derive_ws_url(self.base_url)

    @classmethod
    def from_env(cls, **overrides: Any) -> InfinitiveConfig:
        """Create configuration from environment variables.

        Reads ``INFINITIVE_BASE_URL``, ``INFINITIVE_WS_URL``,
        ``INFINITIVE_ZONE`` and the optional tuning variables listed in
        the mapping below. Explicit keyword arguments override
        environment values.
        """
        env = os.environ

        config_kwargs: dict[str, Any] = {}
        _ENV_CONFIG_MAP = {
            "INFINITIVE_BASE_URL": ("base_url", str),
            "INFINITIVE_WS_URL": ("ws_url", str),
            "INFINITIVE_ZONE": ("zone", int),
            "INFINITIVE_REQUEST_TIMEOUT": ("request_timeout", float),
            "INFINITIVE_RECONNECT_INITIAL_DELAY": ("reconnect_initial_delay", float),
            "INFINITIVE_RECONNECT_MAX_DELAY": ("reconnect_max_delay", float),
            "INFINITIVE_RECONNECT_MAX_ATTEMPTS": ("reconnect_max_attempts", int),
            "INFINITIVE_RECONNECT_STABLE_AFTER": ("reconnect_stable_after", float),
            "INFINITIVE_HEARTBEAT": ("heartbeat", float),
        }
        for env_key, (field_name, parse) in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = parse(val)
            except ValueError as exc:
                raise InfinitiveConfigError(f"{env_key} is not a valid {parse.__name__}: {val!r}") from exc

        # INFINITIVE_HEARTBEAT_ENABLED=0 wins over INFINITIVE_HEARTBEAT.
        if "heartbeat" not in overrides and not _env_bool(env.get("INFINITIVE_HEARTBEAT_ENABLED"), True):
            config_kwargs["heartbeat"] = None

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
