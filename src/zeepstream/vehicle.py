"""Vehicle capability surface and the single-slot target binding."""

from __future__ import annotations

import logging
import threading
from typing import Any, Protocol, runtime_checkable

from zeepstream.exceptions import ZeepAbsentTargetError

_logger = logging.getLogger(__name__)


@runtime_checkable
class VehicleRef(Protocol):
    """What the relay needs from a host vehicle object.

    Host adapters implement this once per game-version object layout.
    Vector attributes may be any 3-sequence or object exposing ``x``,
    ``y`` and ``z``.  The input attributes are written by the relay on the
    tick context only.
    """

    position: Any
    rotation_euler: Any
    local_velocity: Any
    local_angular_velocity: Any

    steer_axis: float
    brake_held: bool
    brake_axis: float
    arms_up_held: bool
    arms_up_axis: float
    reset_triggered: bool


class TargetBinding:
    """Process-wide reference to the currently tracked vehicle.

    The binding never owns the vehicle; the host may replace or clear it at
    any time.  Every :meth:`set` and :meth:`clear` bumps :attr:`generation`
    so consumers that keep per-target state can notice the change.
    """

    def __init__(self, vehicle: VehicleRef | None = None) -> None:
        self._lock = threading.Lock()
        self._vehicle = vehicle
        self._generation = 0 if vehicle is None else 1

    @property
    def generation(self) -> int:
        """Counter incremented on every set/clear."""
        with self._lock:
            return self._generation

    @property
    def is_bound(self) -> bool:
        with self._lock:
            return self._vehicle is not None

    def get(self) -> VehicleRef | None:
        with self._lock:
            return self._vehicle

    def snapshot(self) -> tuple[VehicleRef | None, int]:
        """Return ``(vehicle, generation)`` read atomically."""
        with self._lock:
            return self._vehicle, self._generation

    def require(self) -> VehicleRef:
        """Return the tracked vehicle.

        Raises
        ------
        ZeepAbsentTargetError
            If no vehicle is bound.
        """
        vehicle = self.get()
        if vehicle is None:
            raise ZeepAbsentTargetError("no vehicle is currently tracked")
        return vehicle

    def set(self, vehicle: VehicleRef) -> None:
        """Track *vehicle*, replacing any previous target."""
        with self._lock:
            self._vehicle = vehicle
            self._generation += 1
            generation = self._generation
        _logger.debug("Target bound generation=%d", generation)

    def clear(self) -> None:
        """Stop tracking the current vehicle, if any."""
        with self._lock:
            if self._vehicle is None:
                return
            self._vehicle = None
            self._generation += 1
            generation = self._generation
        _logger.debug("Target cleared generation=%d", generation)
