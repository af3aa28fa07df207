"""Inbound control command model."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import Field, field_validator

from zeepstream._constants import CMD_ACTION, CMD_STATE_REQUEST
from zeepstream.models._base import ZeepBaseModel, coerce_float, to_f32


class CommandKind(StrEnum):
    """Value of the ``cmd`` discriminator.

    Discriminators without a mapped member resolve to ``UNKNOWN`` instead
    of raising, so an unrecognised command decodes fine and is ignored
    downstream.
    """

    ACTION = CMD_ACTION
    STATE_REQUEST = CMD_STATE_REQUEST
    UNKNOWN = "UNKNOWN"

    @classmethod
    def _missing_(cls, value: object) -> CommandKind:
        return cls.UNKNOWN


def _clamp(value: float, low: float, high: float) -> float:
    return low if value < low else high if value > high else value


class ControlCommand(ZeepBaseModel):
    """A decoded control command.

    Numeric fields are always present: absent, null or NaN values decode
    to ``0.0`` and out-of-range values are clamped.  Every value is held at
    float32 precision.

    Parameters
    ----------
    kind : CommandKind
        ``ACTION`` or ``STATE_REQUEST`` (wire key ``cmd``).  An absent
        discriminator means ``ACTION``.
    steer : float
        Steering axis in ``[-1, 1]``.
    brake : float
        Brake axis in ``[0, 1]``.
    arms_up : float
        Arms-up axis in ``[0, 1]``.
    reset : float
        Reset button in ``[0, 1]``; any positive value is "pressed".
    """

    kind: CommandKind = Field(default=CommandKind.ACTION, alias="cmd")
    steer: float = 0.0
    brake: float = 0.0
    arms_up: float = 0.0
    reset: float = 0.0

    @field_validator("kind", mode="before")
    @classmethod
    def _coerce_kind(cls, value: Any) -> CommandKind:
        if value is None:
            return CommandKind.ACTION
        if isinstance(value, CommandKind):
            return value
        if not isinstance(value, str):
            return CommandKind.UNKNOWN
        return CommandKind(value.strip().upper())

    @field_validator("steer", mode="before")
    @classmethod
    def _coerce_steer(cls, value: Any) -> float:
        return to_f32(_clamp(coerce_float(value), -1.0, 1.0))

    @field_validator("brake", "arms_up", "reset", mode="before")
    @classmethod
    def _coerce_unit(cls, value: Any) -> float:
        return to_f32(_clamp(coerce_float(value), 0.0, 1.0))

    @property
    def is_action(self) -> bool:
        return self.kind is CommandKind.ACTION

    @property
    def is_state_request(self) -> bool:
        return self.kind is CommandKind.STATE_REQUEST

    @classmethod
    def action(
        cls,
        *,
        steer: float = 0.0,
        brake: float = 0.0,
        arms_up: float = 0.0,
        reset: float = 0.0,
    ) -> ControlCommand:
        """Build an ``ACTION`` command."""
        return cls(kind=CommandKind.ACTION, steer=steer, brake=brake, arms_up=arms_up, reset=reset)

    @classmethod
    def state_request(cls) -> ControlCommand:
        """Build a ``STATE_REQUEST`` command."""
        return cls(kind=CommandKind.STATE_REQUEST)


NEUTRAL_COMMAND = ControlCommand.action()
"""All-zero ``ACTION``: no steering, nothing pressed."""
