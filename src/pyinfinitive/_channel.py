"""Live state channel: a reconnecting WebSocket subscription."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from pyinfinitive.exceptions import (
    InfinitiveChannelError,
    InfinitiveDecodeError,
    InfinitiveError,
    InfinitiveTransportError,
)

MessageHandler = Callable[[Any], None]
ErrorHandler = Callable[[InfinitiveError], None]


def backoff_delay(attempt: int, initial: float, maximum: float) -> float:
    """Delay before reconnect *attempt* (1-based): doubling, capped at *maximum*."""
    if attempt < 1:
        return 0.0
    return min(maximum, initial * 2 ** (attempt - 1))


class StateChannel:
    """Single-consumer live update subscription running on the asyncio loop.

    Frames are JSON-decoded and handed to the registered handler in the
    order they arrive. Closing with anything but a normal close (1000)
    triggers a reconnect after a backoff delay; the handler stays
    registered across reconnects. The backoff only starts over once a
    connection has stayed up for *stable_after* seconds, so a server
    that accepts and then drops every connection is retried ever more
    slowly.
    """

    def __init__(
        self,
        http_session: aiohttp.ClientSession,
        *,
        reconnect_if_not_normal_close: bool = True,
        initial_delay: float = 0.5,
        max_delay: float = 30.0,
        max_attempts: int | None = None,
        stable_after: float = 5.0,
        heartbeat: float | None = None,
        on_error: ErrorHandler | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._http = http_session
        self._reconnect_if_not_normal_close = reconnect_if_not_normal_close
        self._initial_delay = initial_delay
        self._max_delay = max_delay
        self._max_attempts = max_attempts
        self._stable_after = stable_after
        self._heartbeat = heartbeat
        self._on_error = on_error
        self._logger = logger or logging.getLogger(__name__)
        self._url: str | None = None
        self._on_message: MessageHandler | None = None
        self._task: asyncio.Task[None] | None = None
        self._connected = asyncio.Event()
        self._failures = 0
        self._connections = 0

    @property
    def is_running(self) -> bool:
        """Whether the background connection loop is alive."""
        return self._task is not None and not self._task.done()

    @property
    def is_connected(self) -> bool:
        """Whether a WebSocket is currently open."""
        return self._connected.is_set()

    @property
    def connections(self) -> int:
        """Number of successful handshakes so far, reconnects included."""
        return self._connections

    def start(self, url: str, on_message: MessageHandler) -> None:
        """Open the subscription to *url* and deliver frames to *on_message*."""
        if self._task is not None:
            raise InfinitiveChannelError(f"Live channel already started for {self._url}")
        self._url = url
        self._on_message = on_message
        self._task = asyncio.get_running_loop().create_task(self._run(), name=f"pyinfinitive-channel {url}")
        self._logger.debug("Live channel start requested url=%s", url)

    async def wait_connected(self, timeout: float | None = None) -> None:
        """Block until a WebSocket is open."""
        await asyncio.wait_for(self._connected.wait(), timeout)

    async def stop(self) -> None:
        """Cancel the connection loop and close the socket."""
        task = self._task
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        self._logger.debug("Live channel stopped")

    async def _run(self) -> None:
        assert self._url is not None  # noqa: S101
        while True:
            try:
                close_code = await self._connect_once(self._url)
            except (aiohttp.ClientError, OSError, TimeoutError) as exc:
                error = InfinitiveTransportError(f"Live channel connection to {self._url} failed: {exc}")
            else:
                if close_code == aiohttp.WSCloseCode.OK:
                    self._logger.info("Live channel closed normally by %s", self._url)
                    return
                error = InfinitiveTransportError(
                    f"Live channel to {self._url} closed abnormally (code={close_code})",
                    close_code=close_code,
                )
                if not self._reconnect_if_not_normal_close:
                    self._logger.warning("%s; not reconnecting", error)
                    return

            self._failures += 1
            if self._max_attempts is not None and self._failures > self._max_attempts:
                self._logger.error("%s; giving up after %d attempts", error, self._max_attempts)
                self._report(error)
                return
            delay = backoff_delay(self._failures, self._initial_delay, self._max_delay)
            self._logger.warning("%s; reconnecting in %.2fs (attempt %d)", error, delay, self._failures)
            await asyncio.sleep(delay)

    async def _connect_once(self, url: str) -> int | None:
        """Run one connection until it closes; return the close code.

        A connection that ends without a close frame (EOF, reset,
        heartbeat timeout) reports ``ABNORMAL_CLOSURE``.
        """
        async with self._http.ws_connect(url, heartbeat=self._heartbeat, autoclose=True) as ws:
            self._connections += 1
            self._connected.set()
            self._logger.info("Live channel connected url=%s", url)
            loop = asyncio.get_running_loop()
            connected_at = loop.time()
            try:
                while True:
                    msg = await ws.receive()
                    if msg.type in (aiohttp.WSMsgType.TEXT, aiohttp.WSMsgType.BINARY):
                        self._handle_frame(msg.data)
                    elif msg.type == aiohttp.WSMsgType.CLOSE:
                        return int(msg.data)
                    elif msg.type == aiohttp.WSMsgType.ERROR:
                        self._logger.debug("Live channel error: %s", ws.exception())
                        return int(aiohttp.WSCloseCode.ABNORMAL_CLOSURE)
                    elif msg.type in (aiohttp.WSMsgType.CLOSING, aiohttp.WSMsgType.CLOSED):
                        return int(aiohttp.WSCloseCode.ABNORMAL_CLOSURE)
            finally:
                self._connected.clear()
                if loop.time() - connected_at >= self._stable_after:
                    self._failures = 0

    def _handle_frame(self, frame: str | bytes) -> None:
        try:
            text = frame.decode("utf-8") if isinstance(frame, bytes) else frame
            decoded = json.loads(text)
        except ValueError as exc:
            error = InfinitiveDecodeError(f"Dropping undecodable live channel frame: {exc}", frame=frame)
            self._logger.warning("%s", error)
            self._report(error)
            return

        self._logger.debug("Live channel frame %s", decoded)
        if self._on_message is None:
            return
        try:
            self._on_message(decoded)
        except Exception:
            self._logger.warning("Live channel message handler failed", exc_info=True)

    def _report(self, error: InfinitiveError) -> None:
        if self._on_error is None:
            return
        try:
            self._on_error(error)
        except Exception:
            self._logger.debug("Live channel error callback failed", exc_info=True)
