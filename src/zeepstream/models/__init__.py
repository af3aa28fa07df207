"""Wire-facing data models."""

from zeepstream.models._base import Vec3, ZeepBaseModel, to_f32
from zeepstream.models.command import NEUTRAL_COMMAND, CommandKind, ControlCommand
from zeepstream.models.state import StateSnapshot

__all__ = [
    "CommandKind",
    "ControlCommand",
    "NEUTRAL_COMMAND",
    "StateSnapshot",
    "Vec3",
    "ZeepBaseModel",
    "to_f32",
]
