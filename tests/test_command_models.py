"""Tests for the wire models: ControlCommand, CommandKind, StateSnapshot."""

from __future__ import annotations

from dataclasses import dataclass

import pytest
from pydantic import ValidationError

from zeepstream.models import NEUTRAL_COMMAND, CommandKind, ControlCommand, StateSnapshot, to_f32


class TestCommandKind:
    def test_known_values(self) -> None:
        assert CommandKind("ACTION") is CommandKind.ACTION
        assert CommandKind("STATE_REQUEST") is CommandKind.STATE_REQUEST

    def test_unknown_value_falls_back(self) -> None:
        assert CommandKind("HONK") is CommandKind.UNKNOWN


class TestControlCommand:
    def test_absent_fields_default_to_zero(self) -> None:
        cmd = ControlCommand.model_validate({"cmd": "ACTION"})
        assert (cmd.steer, cmd.brake, cmd.arms_up, cmd.reset) == (0.0, 0.0, 0.0, 0.0)

    def test_absent_discriminator_means_action(self) -> None:
        cmd = ControlCommand.model_validate({"steer": 0.25})
        assert cmd.kind is CommandKind.ACTION
        assert cmd.steer == 0.25

    def test_null_and_nan_decode_to_zero(self) -> None:
        cmd = ControlCommand.model_validate({"steer": None, "brake": float("nan")})
        assert cmd.steer == 0.0
        assert cmd.brake == 0.0

    def test_camel_case_wire_key(self) -> None:
        cmd = ControlCommand.model_validate({"armsUp": 1.0})
        assert cmd.arms_up == 1.0

    def test_out_of_range_values_are_clamped(self) -> None:
        cmd = ControlCommand.model_validate({"steer": -3.0, "brake": 2.0, "armsUp": -1.0, "reset": 9})
        assert cmd.steer == -1.0
        assert cmd.brake == 1.0
        assert cmd.arms_up == 0.0
        assert cmd.reset == 1.0

    def test_values_are_held_at_float32_precision(self) -> None:
        cmd = ControlCommand.action(reset=0.3)
        assert cmd.reset == to_f32(0.3)
        assert cmd.reset != 0.3

    def test_unknown_and_non_string_discriminators(self) -> None:
        assert ControlCommand.model_validate({"cmd": "HONK"}).kind is CommandKind.UNKNOWN
        assert ControlCommand.model_validate({"cmd": 7}).kind is CommandKind.UNKNOWN

    def test_discriminator_is_case_insensitive(self) -> None:
        assert ControlCommand.model_validate({"cmd": "state_request"}).is_state_request

    def test_non_numeric_field_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ControlCommand.model_validate({"steer": "left"})
        with pytest.raises(ValidationError):
            ControlCommand.model_validate({"brake": [1]})

    def test_dump_uses_wire_keys(self) -> None:
        dumped = ControlCommand.action(arms_up=1.0).model_dump(mode="json", by_alias=True)
        assert dumped == {"cmd": "ACTION", "steer": 0.0, "brake": 0.0, "armsUp": 1.0, "reset": 0.0}

    def test_neutral_command(self) -> None:
        assert NEUTRAL_COMMAND.is_action
        assert NEUTRAL_COMMAND == ControlCommand()


@dataclass
class _UnityLikeVector:
    x: float
    y: float
    z: float


class TestStateSnapshot:
    def test_accepts_objects_with_xyz(self) -> None:
        snap = StateSnapshot(position=_UnityLikeVector(1.0, 2.0, 3.0))
        assert snap.position == (1.0, 2.0, 3.0)

    def test_vector_length_is_checked(self) -> None:
        with pytest.raises(ValidationError):
            StateSnapshot(position=(1.0, 2.0))

    def test_is_frozen(self) -> None:
        snap = StateSnapshot()
        with pytest.raises(ValidationError):
            snap.timestamp = 5.0  # type: ignore[misc]
