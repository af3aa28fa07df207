"""Host-side spawn hook adapter.

The game's patched spawn routine calls into :class:`SpawnHook`; this is
the only place the relay learns about new vehicles.
"""

from __future__ import annotations

import logging

from zeepstream.vehicle import TargetBinding, VehicleRef

_logger = logging.getLogger(__name__)


class SpawnHook:
    """Binds freshly spawned vehicles to a :class:`TargetBinding`.

    Only single-occupant sessions are tracked; spawns in any other session
    kind are ignored.
    """

    def __init__(self, binding: TargetBinding) -> None:
        self._binding = binding

    def on_vehicle_spawned(self, vehicle: VehicleRef, *, single_player: bool) -> bool:
        """Track *vehicle* if the session is single-player.

        Returns whether the binding changed.
        """
        if not single_player:
            _logger.debug("Ignoring spawn outside a single-player session")
            return False

        self._binding.set(vehicle)
        _logger.info("Target vehicle set to %s", getattr(vehicle, "name", type(vehicle).__name__))
        _logger.info("Target position: %s", vehicle.position)
        _logger.info("Target rotation: %s", vehicle.rotation_euler)
        _logger.info("Target local velocity: %s", vehicle.local_velocity)
        _logger.info("Target local angular velocity: %s", vehicle.local_angular_velocity)
        return True

    def on_session_ended(self) -> None:
        """Forget the tracked vehicle when the host tears the session down."""
        if self._binding.is_bound:
            _logger.info("Target vehicle released")
        self._binding.clear()
