#!/usr/bin/env python3
"""Client-side probe for a running zeepstream relay.

Connects to the relay, optionally sends a ``STATE_REQUEST`` at a fixed
cadence and prints every decoded state frame with the gap since the
previous one.  Use this to check the relay's broadcast mode and profile
without the game client.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import time
from dataclasses import dataclass
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from zeepstream import RelayClient, StateSnapshot, WireProfile, ZeepDecodeError, ZeepTransportError  # noqa: E402

_LOG = logging.getLogger("stream_probe")


@dataclass
class ProbeStats:
    started_at: float
    total_frames: int = 0
    decode_failed: int = 0
    requests_sent: int = 0
    first_frame_at: float | None = None
    last_frame_at: float | None = None

    def on_frame(self, now: float) -> float | None:
        previous = self.last_frame_at
        self.total_frames += 1
        if self.first_frame_at is None:
            self.first_frame_at = now
        self.last_frame_at = now
        return None if previous is None else now - previous


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Print state frames streamed by a zeepstream relay.",
    )
    parser.add_argument(
        "--url",
        default="ws://127.0.0.1:8080/",
        help="Relay WebSocket URL.",
    )
    parser.add_argument(
        "--profile",
        choices=[p.value for p in WireProfile],
        default=WireProfile.MSGPACK.value,
        help="Wire profile; must match the relay.",
    )
    parser.add_argument(
        "--request-every",
        type=float,
        default=0.5,
        help="Send STATE_REQUEST every N seconds (0 = never, just listen).",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=0,
        help="Maximum runtime in seconds (0 = run until Ctrl+C).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print each frame as JSON.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs.",
    )
    return parser.parse_args()


def _print_state(state: StateSnapshot, gap: float | None, as_json: bool) -> None:
    if as_json:
        print(json.dumps(state.model_dump(mode="json", by_alias=True), sort_keys=True))
        return
    gap_text = "first" if gap is None else f"{gap * 1000:.0f}ms"
    x, y, z = state.position
    print(
        f"[probe] t={state.timestamp:.3f} gap={gap_text} pos=({x:.2f}, {y:.2f}, {z:.2f}) "
        f"yaw={state.rotation[1]:.1f} v={state.local_velocity[2]:.2f}",
    )


def _print_summary(stats: ProbeStats) -> None:
    runtime = time.time() - stats.started_at
    print("[probe] Summary")
    print(f"[probe]   runtime_s     : {runtime:.1f}")
    print(f"[probe]   requests_sent : {stats.requests_sent}")
    print(f"[probe]   total_frames  : {stats.total_frames}")
    print(f"[probe]   decode_failed : {stats.decode_failed}")
    if stats.total_frames > 1 and stats.first_frame_at is not None and stats.last_frame_at is not None:
        span = stats.last_frame_at - stats.first_frame_at
        print(f"[probe]   mean_rate_hz  : {(stats.total_frames - 1) / span if span > 0 else 0.0:.1f}")


async def _requester(client: RelayClient, every: float, stats: ProbeStats) -> None:
    while True:
        await client.request_state()
        stats.requests_sent += 1
        await asyncio.sleep(every)


async def _probe(args: argparse.Namespace, stats: ProbeStats) -> None:
    async with RelayClient(args.url, profile=args.profile) as client:
        print(f"[probe] Connected to {args.url} profile={args.profile}")
        requester: asyncio.Task[None] | None = None
        if args.request_every > 0:
            requester = asyncio.create_task(_requester(client, args.request_every, stats))
        try:
            while True:
                try:
                    state = await client.receive_state()
                except ZeepDecodeError as exc:
                    stats.decode_failed += 1
                    print(f"[probe] decode_failed: {exc}")
                    continue
                gap = stats.on_frame(time.time())
                _print_state(state, gap, args.json)
        finally:
            if requester is not None:
                requester.cancel()


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    stats = ProbeStats(started_at=time.time())
    timeout = args.duration if args.duration > 0 else None

    async def runner() -> None:
        await asyncio.wait_for(_probe(args, stats), timeout=timeout)

    try:
        asyncio.run(runner())
    except KeyboardInterrupt:
        pass
    except TimeoutError:
        print(f"[probe] Reached --duration={args.duration}s, stopping.")
    except ZeepTransportError as exc:
        print(f"[probe] {exc}", file=sys.stderr)
        _print_summary(stats)
        return 2

    _print_summary(stats)
    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
