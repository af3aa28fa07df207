"""Sample the tracked vehicle's physical state."""

from __future__ import annotations

import time
from collections.abc import Callable

from zeepstream.exceptions import ZeepAbsentTargetError
from zeepstream.models.state import StateSnapshot
from zeepstream.vehicle import TargetBinding


class StateSampler:
    """Builds :class:`StateSnapshot` values from the bound vehicle.

    Parameters
    ----------
    clock : callable, optional
        Returns the snapshot timestamp in seconds.  Defaults to seconds
        elapsed since the sampler was created, which keeps the value small
        enough to survive float32 encoding.
    """

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        if clock is None:
            started = time.monotonic()

            def clock() -> float:
                return time.monotonic() - started

        self._clock = clock

    def sample(self, binding: TargetBinding) -> StateSnapshot | None:
        """Return the current state, or ``None`` when nothing is bound."""
        try:
            vehicle = binding.require()
        except ZeepAbsentTargetError:
            return None
        return StateSnapshot(
            position=vehicle.position,
            rotation=vehicle.rotation_euler,
            local_velocity=vehicle.local_velocity,
            local_angular_velocity=vehicle.local_angular_velocity,
            timestamp=self._clock(),
        )
