"""Async client for a running relay."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any

import aiohttp

from zeepstream._constants import DEFAULT_PORT
from zeepstream.codec import WireCodec
from zeepstream.config import WireProfile
from zeepstream.exceptions import ZeepDecodeError, ZeepTransportError
from zeepstream.models.command import ControlCommand
from zeepstream.models.state import StateSnapshot

_logger = logging.getLogger(__name__)

DEFAULT_URL = f"ws://127.0.0.1:{DEFAULT_PORT}/"


class RelayClient:
    """WebSocket client speaking the relay's wire profiles.

    Use as an async context manager::

        async with RelayClient("ws://127.0.0.1:8080/") as client:
            await client.request_state()
            state = await client.receive_state(timeout=1.0)

    Parameters
    ----------
    url : str
        Relay WebSocket URL.
    profile : WireProfile
        Must match the relay's profile.
    session : aiohttp.ClientSession, optional
        Reused when given; otherwise the client owns one.
    heartbeat : float, optional
        Ping interval in seconds.
    """

    def __init__(
        self,
        url: str = DEFAULT_URL,
        *,
        profile: WireProfile | str = WireProfile.MSGPACK,
        session: aiohttp.ClientSession | None = None,
        heartbeat: float | None = None,
    ) -> None:
        self._url = url
        self._codec = WireCodec(profile)
        self._external_session = session is not None
        self._http_session = session
        self._heartbeat = heartbeat
        self._ws: aiohttp.ClientWebSocketResponse | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> RelayClient:
        await self.connect()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    @property
    def url(self) -> str:
        return self._url

    @property
    def closed(self) -> bool:
        return self._ws is None or self._ws.closed

    async def connect(self) -> None:
        """Open the WebSocket.

        Raises
        ------
        ZeepTransportError
            If the relay cannot be reached.
        """
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        try:
            self._ws = await self._http_session.ws_connect(self._url, heartbeat=self._heartbeat)
        except aiohttp.ClientError as exc:
            raise ZeepTransportError(f"Cannot connect to {self._url}: {exc}") from exc
        _logger.debug("Connected to %s", self._url)

    async def close(self) -> None:
        ws = self._ws
        self._ws = None
        if ws is not None and not ws.closed:
            await ws.close()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    def _require_ws(self) -> aiohttp.ClientWebSocketResponse:
        ws = self._ws
        if ws is None or ws.closed:
            raise ZeepTransportError("Client is not connected")
        return ws

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    async def send_command(self, command: ControlCommand) -> None:
        ws = self._require_ws()
        frame = self._codec.encode_command(command)
        try:
            if isinstance(frame, str):
                await ws.send_str(frame)
            else:
                await ws.send_bytes(frame)
        except (ConnectionError, RuntimeError) as exc:
            raise ZeepTransportError(f"Send to {self._url} failed: {exc}") from exc

    async def send_action(
        self,
        *,
        steer: float = 0.0,
        brake: float = 0.0,
        arms_up: float = 0.0,
        reset: float = 0.0,
    ) -> None:
        await self.send_command(ControlCommand.action(steer=steer, brake=brake, arms_up=arms_up, reset=reset))

    async def request_state(self) -> None:
        await self.send_command(ControlCommand.state_request())

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    async def receive_state(self, timeout: float | None = None) -> StateSnapshot:
        """Wait for the next state frame.

        Raises
        ------
        TimeoutError
            If nothing arrives within *timeout* seconds.
        ZeepTransportError
            If the connection closes or errors.
        ZeepDecodeError
            If the frame is not a state payload.
        """
        ws = self._require_ws()
        msg = await ws.receive(timeout=timeout)
        if msg.type in (aiohttp.WSMsgType.BINARY, aiohttp.WSMsgType.TEXT):
            return self._codec.decode_state(msg.data)
        if msg.type == aiohttp.WSMsgType.ERROR:
            raise ZeepTransportError(f"WebSocket error: {ws.exception()}")
        raise ZeepTransportError(f"Connection to {self._url} closed ({msg.type.name})")

    async def fetch_state(self, timeout: float | None = None) -> StateSnapshot:
        """Send a ``STATE_REQUEST`` and wait for the answer."""
        await self.request_state()
        return await self.receive_state(timeout=timeout)

    async def states(self) -> AsyncIterator[StateSnapshot]:
        """Yield state frames until the connection closes.

        Frames that fail to decode are skipped.
        """
        while True:
            try:
                yield await self.receive_state()
            except ZeepDecodeError as exc:
                _logger.debug("Skipping undecodable frame: %s", exc)
            except ZeepTransportError:
                return

    def __aiter__(self) -> AsyncIterator[StateSnapshot]:
        return self.states()
