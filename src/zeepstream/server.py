"""WebSocket relay server.

Network side: aiohttp accepts WebSocket clients on every path, registers
them, decodes each frame and pushes the command into the queue.  Nothing
on the network side touches the vehicle or broadcasts.

Tick side: the host calls :meth:`RelayServer.tick` from its fixed update.
A tick drains the queue into the input translator, answers pending
``STATE_REQUEST`` commands and, in ``tick`` mode, broadcasts.  In
``interval`` mode a single asyncio timer task broadcasts instead.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from enum import StrEnum
from typing import Any

from aiohttp import WSCloseCode, WSMsgType, web

from zeepstream.codec import Frame, WireCodec
from zeepstream.command_queue import CommandQueue
from zeepstream.config import BroadcastMode, InputPolicy, StreamerConfig
from zeepstream.exceptions import ZeepBindError, ZeepDecodeError, ZeepError
from zeepstream.models.command import NEUTRAL_COMMAND, ControlCommand
from zeepstream.registry import ConnectionRegistry, WebSocketConnection
from zeepstream.sampler import StateSampler
from zeepstream.translator import InputTranslator
from zeepstream.vehicle import TargetBinding

_logger = logging.getLogger(__name__)


class ServerState(StrEnum):
    STOPPED = "stopped"
    LISTENING = "listening"


class RelayServer:
    """Relay between WebSocket clients and the tracked vehicle.

    Parameters
    ----------
    config : StreamerConfig, optional
        Listener, profile and policy settings.
    binding : TargetBinding, optional
        Holder for the tracked vehicle; shared with the host spawn hook.
    codec, registry, queue, translator, sampler : optional
        Collaborators; built from *config* when omitted.
    """

    def __init__(
        self,
        config: StreamerConfig | None = None,
        binding: TargetBinding | None = None,
        *,
        codec: WireCodec | None = None,
        registry: ConnectionRegistry | None = None,
        queue: CommandQueue | None = None,
        translator: InputTranslator | None = None,
        sampler: StateSampler | None = None,
    ) -> None:
        self._config = config or StreamerConfig()
        self._binding = binding if binding is not None else TargetBinding()
        self._codec = codec or WireCodec(self._config.profile)
        self._registry = registry if registry is not None else ConnectionRegistry()
        self._queue = (
            queue
            if queue is not None
            else CommandQueue(self._config.queue_policy, maxlen=self._config.queue_maxlen)
        )
        self._translator = translator or InputTranslator(threshold=self._config.press_threshold)
        self._sampler = sampler or StateSampler()

        self._state = ServerState.STOPPED
        self._runner: web.AppRunner | None = None
        self._interval_task: asyncio.Task[None] | None = None
        self._held: ControlCommand | None = None
        self._held_generation = self._binding.generation

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> RelayServer:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> StreamerConfig:
        return self._config

    @property
    def binding(self) -> TargetBinding:
        return self._binding

    @property
    def registry(self) -> ConnectionRegistry:
        return self._registry

    @property
    def queue(self) -> CommandQueue:
        return self._queue

    @property
    def state(self) -> ServerState:
        return self._state

    @property
    def is_listening(self) -> bool:
        return self._state is ServerState.LISTENING

    @property
    def port(self) -> int:
        """Port actually bound; differs from the config when it asked for 0."""
        runner = self._runner
        if runner is not None and runner.addresses:
            return int(runner.addresses[0][1])
        return self._config.port

    # ------------------------------------------------------------------
    # Start / stop
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Bind the listener and start accepting clients.

        Raises
        ------
        ZeepError
            If the server is already listening.
        ZeepBindError
            If the configured address cannot be bound.
        """
        if self._state is ServerState.LISTENING:
            raise ZeepError("relay server is already listening")

        host, port = self._config.host, self._config.port
        app = web.Application()
        app.router.add_get("/{tail:.*}", self._handle_websocket)
        app.on_shutdown.append(self._on_shutdown)

        runner = web.AppRunner(app, access_log=None)
        await runner.setup()
        site = web.TCPSite(runner, host, port)
        try:
            await site.start()
        except OSError as exc:
            await runner.cleanup()
            raise ZeepBindError(f"Cannot bind {host}:{port}: {exc}", host=host, port=port) from exc

        self._runner = runner
        self._state = ServerState.LISTENING
        if self._config.broadcast_mode is BroadcastMode.INTERVAL:
            self._interval_task = asyncio.get_running_loop().create_task(self._interval_loop())

        _logger.info(
            "Relay listening on ws://%s:%d profile=%s broadcast=%s queue=%s input=%s",
            host,
            self.port,
            self._config.profile,
            self._config.broadcast_mode,
            self._config.queue_policy,
            self._config.input_policy,
        )

    async def stop(self) -> None:
        """Close every connection and release the listener.

        Does nothing when the server was never started.
        """
        if self._state is ServerState.STOPPED:
            return

        task = self._interval_task
        self._interval_task = None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        runner = self._runner
        self._runner = None
        if runner is not None:
            await runner.cleanup()

        self._registry.close_all()
        self._held = None
        self._state = ServerState.STOPPED
        _logger.info("Relay stopped")

    async def _on_shutdown(self, _app: web.Application) -> None:
        conns = self._registry.clear()
        for conn in conns:
            if isinstance(conn, WebSocketConnection):
                await conn.aclose(code=WSCloseCode.GOING_AWAY, message=b"Server shutdown")
            else:
                conn.close()

    # ------------------------------------------------------------------
    # Network context
    # ------------------------------------------------------------------

    async def _handle_websocket(self, request: web.Request) -> web.WebSocketResponse:
        ws = web.WebSocketResponse(heartbeat=self._config.heartbeat)
        await ws.prepare(request)

        conn = WebSocketConnection(ws, asyncio.get_running_loop(), remote=request.remote)
        self._registry.add(conn)
        _logger.info("Client connected id=%s remote=%s total=%d", conn.id, conn.remote, self._registry.count())

        try:
            async for msg in ws:
                if msg.type in (WSMsgType.BINARY, WSMsgType.TEXT):
                    self.handle_frame(conn.id, msg.data)
                elif msg.type == WSMsgType.ERROR:
                    _logger.warning("WebSocket error on %s: %s", conn.id, ws.exception())
        finally:
            self._registry.remove(conn.id)
            _logger.info("Client disconnected id=%s total=%d", conn.id, self._registry.count())
        return ws

    def handle_frame(self, conn_id: str, data: Frame) -> None:
        """Decode one inbound frame and queue the command.

        Malformed frames are logged and dropped; they never raise.
        """
        try:
            command = self._codec.decode_command(data)
        except ZeepDecodeError as exc:
            _logger.warning("Dropping malformed frame from %s: %s", conn_id, exc)
            return
        _logger.debug("Frame from %s decoded kind=%s", conn_id, command.kind)
        self._queue.push(command)

    # ------------------------------------------------------------------
    # Tick context
    # ------------------------------------------------------------------

    def tick(self) -> None:
        """Run one fixed-update step.

        Call from the host's fixed-timestep callback.  Applies pending
        input, serves state requests and, in ``tick`` mode, broadcasts.
        """
        commands = self._queue.drain_all()
        generation = self._binding.generation
        if generation != self._held_generation:
            self._held = None
            self._held_generation = generation

        applied = 0
        if commands:
            applied = self._translator.apply_all(commands, self._binding)
            if applied:
                self._held = commands[-1]
            else:
                _logger.debug("Discarding %d command(s): no target bound", len(commands))

        if self._config.input_policy is InputPolicy.HOLD_LAST and self._held is not None:
            if self._registry.count() == 0:
                self._held = NEUTRAL_COMMAND
            if not applied:
                applied = self._translator.apply_all((self._held,), self._binding)

        if not applied:
            self._translator.release()

        for _ in range(self._queue.drain_state_requests()):
            self.broadcast_state()

        if self._config.broadcast_mode is BroadcastMode.TICK:
            self.broadcast_state()

    def broadcast_state(self) -> bool:
        """Sample, encode and broadcast the tracked vehicle's state.

        Skipped silently when no vehicle is bound or no client is
        connected.  Returns whether a frame was broadcast.
        """
        if self._registry.count() == 0:
            return False
        snapshot = self._sampler.sample(self._binding)
        if snapshot is None:
            return False
        payload = self._codec.encode_state(snapshot)
        delivered = self._registry.broadcast(payload)
        _logger.debug("State broadcast to %d client(s) t=%.3f", delivered, snapshot.timestamp)
        return True

    async def _interval_loop(self) -> None:
        interval = self._config.broadcast_interval
        while True:
            await asyncio.sleep(interval)
            try:
                self.broadcast_state()
            except (ZeepError, ValueError):
                _logger.warning("Interval broadcast failed", exc_info=True)
