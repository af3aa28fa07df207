"""In-memory vehicle used by the standalone runner and tests."""

from __future__ import annotations

import dataclasses
import math

_MAX_SPEED = 30.0
_ACCELERATION = 6.0
_BRAKE_DECELERATION = 18.0
_TURN_RATE = 90.0


@dataclasses.dataclass
class SimulatedVehicle:
    """A :class:`~zeepstream.vehicle.VehicleRef` with a toy kinematic model.

    :meth:`step` rolls forward along the heading, accelerating unless the
    brake is held and yawing with the steering axis.  A reset trigger puts
    the vehicle back on its spawn point.
    """

    name: str = "SimulatedVehicle"
    position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    rotation_euler: tuple[float, float, float] = (0.0, 0.0, 0.0)
    local_velocity: tuple[float, float, float] = (0.0, 0.0, 0.0)
    local_angular_velocity: tuple[float, float, float] = (0.0, 0.0, 0.0)

    steer_axis: float = 0.0
    brake_held: bool = False
    brake_axis: float = 0.0
    arms_up_held: bool = False
    arms_up_axis: float = 0.0
    reset_triggered: bool = False

    resets: int = 0
    spawn_position: tuple[float, float, float] = dataclasses.field(init=False)

    def __post_init__(self) -> None:
        self.spawn_position = self.position

    def step(self, dt: float) -> None:
        if self.reset_triggered:
            self.resets += 1
            self.position = self.spawn_position
            self.rotation_euler = (0.0, 0.0, 0.0)
            self.local_velocity = (0.0, 0.0, 0.0)
            self.local_angular_velocity = (0.0, 0.0, 0.0)
            self.reset_triggered = False
            return

        speed = self.local_velocity[2]
        if self.brake_held:
            speed = max(0.0, speed - _BRAKE_DECELERATION * self.brake_axis * dt)
        else:
            speed = min(_MAX_SPEED, speed + _ACCELERATION * dt)

        yaw_rate = _TURN_RATE * self.steer_axis
        pitch, yaw, roll = self.rotation_euler
        yaw = (yaw + yaw_rate * dt) % 360.0

        heading = math.radians(yaw)
        x, y, z = self.position
        self.position = (x + math.sin(heading) * speed * dt, y, z + math.cos(heading) * speed * dt)
        self.rotation_euler = (pitch, yaw, roll)
        self.local_velocity = (0.0, 0.0, speed)
        self.local_angular_velocity = (0.0, math.radians(yaw_rate), 0.0)
