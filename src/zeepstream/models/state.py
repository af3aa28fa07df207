"""Vehicle state snapshot model."""

from __future__ import annotations

from typing import Any

from pydantic import field_validator

from zeepstream.models._base import Vec3, ZeepBaseModel, coerce_float, to_f32

_ORIGIN = (0.0, 0.0, 0.0)


class StateSnapshot(ZeepBaseModel):
    """Point-in-time copy of the tracked vehicle's physical state.

    Parameters
    ----------
    position : Vec3
        World position.
    rotation : Vec3
        Euler angles in degrees.
    local_velocity : Vec3
        Velocity in the vehicle's local frame.
    local_angular_velocity : Vec3
        Angular velocity in the vehicle's local frame.
    timestamp : float
        Sample time in seconds on the sampler's clock.
    """

    position: Vec3 = _ORIGIN
    rotation: Vec3 = _ORIGIN
    local_velocity: Vec3 = _ORIGIN
    local_angular_velocity: Vec3 = _ORIGIN
    timestamp: float = 0.0

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> float:
        return to_f32(coerce_float(value))
