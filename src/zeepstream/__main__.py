"""Standalone relay with a simulated vehicle.

Runs the relay outside the game: a :class:`SimulatedVehicle` is bound
through the spawn hook and a fixed-timestep loop steps it and ticks the
relay, the same way the game's fixed update would.

Example::

    python -m zeepstream --port 8080 --broadcast tick --profile json
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys
from typing import Any

from zeepstream.config import BroadcastMode, InputPolicy, QueuePolicy, StreamerConfig, WireProfile
from zeepstream.exceptions import ZeepBindError, ZeepConfigError
from zeepstream.host import SpawnHook
from zeepstream.server import RelayServer
from zeepstream.simulated import SimulatedVehicle
from zeepstream.vehicle import TargetBinding

_LOG = logging.getLogger("zeepstream")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the zeepstream relay with a simulated vehicle.")
    parser.add_argument("--host", help="Bind address (default from ZEEP_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, help="Bind port (default from ZEEP_PORT or 8080)")
    parser.add_argument("--profile", choices=[p.value for p in WireProfile], help="Wire profile")
    parser.add_argument(
        "--broadcast",
        dest="broadcast_mode",
        choices=[m.value for m in BroadcastMode],
        help="Unsolicited broadcast trigger",
    )
    parser.add_argument(
        "--interval",
        dest="broadcast_interval",
        type=float,
        help="Seconds between broadcasts in interval mode",
    )
    parser.add_argument("--queue-policy", choices=[p.value for p in QueuePolicy])
    parser.add_argument("--input-policy", choices=[p.value for p in InputPolicy])
    parser.add_argument("--tick-rate", type=float, help="Fixed update rate in Hz")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    return parser.parse_args(argv)


async def _run(config: StreamerConfig) -> int:
    binding = TargetBinding()
    vehicle = SimulatedVehicle()
    SpawnHook(binding).on_vehicle_spawned(vehicle, single_player=True)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    dt = 1.0 / config.tick_rate
    try:
        async with RelayServer(config, binding) as server:
            _LOG.info("Fixed update at %.1f Hz; press Ctrl+C to stop", config.tick_rate)
            next_tick = loop.time()
            while not stop.is_set():
                server.tick()
                vehicle.step(dt)
                next_tick += dt
                delay = next_tick - loop.time()
                if delay < 0:
                    next_tick = loop.time()
                    delay = 0.0
                with contextlib.suppress(TimeoutError):
                    await asyncio.wait_for(stop.wait(), timeout=delay)
    except ZeepBindError as exc:
        _LOG.error("%s", exc)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides: dict[str, Any] = {
        key: value
        for key, value in {
            "host": args.host,
            "port": args.port,
            "profile": args.profile,
            "broadcast_mode": args.broadcast_mode,
            "broadcast_interval": args.broadcast_interval,
            "queue_policy": args.queue_policy,
            "input_policy": args.input_policy,
            "tick_rate": args.tick_rate,
        }.items()
        if value is not None
    }
    try:
        config = StreamerConfig.from_env(**overrides)
    except ZeepConfigError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    return asyncio.run(_run(config))


if __name__ == "__main__":
    raise SystemExit(main())
