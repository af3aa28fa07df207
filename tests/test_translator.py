from __future__ import annotations

import pytest

from zeepstream.models import ControlCommand
from zeepstream.simulated import SimulatedVehicle
from zeepstream.translator import InputTranslator
from zeepstream.vehicle import TargetBinding


@pytest.fixture
def vehicle() -> SimulatedVehicle:
    return SimulatedVehicle()


@pytest.fixture
def binding(vehicle: SimulatedVehicle) -> TargetBinding:
    return TargetBinding(vehicle)


def test_axes_and_held_flags(vehicle: SimulatedVehicle, binding: TargetBinding) -> None:
    translator = InputTranslator()
    assert translator.apply(ControlCommand.action(steer=-0.75, brake=0.9, arms_up=0.2), binding)

    assert vehicle.steer_axis == -0.75
    assert vehicle.brake_axis == ControlCommand.action(brake=0.9).brake
    assert vehicle.brake_held is True
    assert vehicle.arms_up_axis == ControlCommand.action(arms_up=0.2).arms_up
    assert vehicle.arms_up_held is False


def test_threshold_is_strict(vehicle: SimulatedVehicle, binding: TargetBinding) -> None:
    translator = InputTranslator(threshold=0.5)
    translator.apply(ControlCommand.action(brake=0.5, arms_up=0.5), binding)
    assert vehicle.brake_held is False
    assert vehicle.arms_up_held is False
    assert vehicle.brake_axis == 0.5


def test_reset_is_edge_triggered(vehicle: SimulatedVehicle, binding: TargetBinding) -> None:
    translator = InputTranslator()
    triggered = []
    for value in (0.0, 1.0, 1.0, 0.0, 1.0):
        translator.apply(ControlCommand.action(reset=value), binding)
        triggered.append(vehicle.reset_triggered)
    assert triggered == [False, True, False, False, True]


def test_new_target_forgets_reset_edge(vehicle: SimulatedVehicle, binding: TargetBinding) -> None:
    translator = InputTranslator()
    translator.apply(ControlCommand.action(reset=1.0), binding)
    assert translator.reset_pressed

    other = SimulatedVehicle(name="other")
    binding.set(other)
    translator.apply(ControlCommand.action(reset=1.0), binding)
    assert other.reset_triggered is True


def test_absent_binding_is_a_no_op() -> None:
    translator = InputTranslator()
    assert translator.apply(ControlCommand.action(steer=1.0), TargetBinding()) is False


def test_non_action_commands_are_ignored(vehicle: SimulatedVehicle, binding: TargetBinding) -> None:
    translator = InputTranslator()
    assert translator.apply(ControlCommand.state_request(), binding) is False
    assert translator.apply(ControlCommand.model_validate({"cmd": "HONK", "steer": 1.0}), binding) is False
    assert vehicle.steer_axis == 0.0


def test_simulated_vehicle_follows_reset() -> None:
    vehicle = SimulatedVehicle(position=(5.0, 0.0, 5.0))
    binding = TargetBinding(vehicle)
    vehicle.step(1.0)
    assert vehicle.position != (5.0, 0.0, 5.0)

    InputTranslator().apply(ControlCommand.action(reset=1.0), binding)
    vehicle.step(0.1)
    assert vehicle.position == (5.0, 0.0, 5.0)
    assert vehicle.resets == 1
    assert vehicle.reset_triggered is False


def test_batch_latches_rising_edge(vehicle: SimulatedVehicle, binding: TargetBinding) -> None:
    translator = InputTranslator()
    applied = translator.apply_all(
        [ControlCommand.action(reset=1.0), ControlCommand.action(reset=0.0, brake=1.0)],
        binding,
    )
    assert applied == 2
    assert vehicle.reset_triggered is True
    assert vehicle.brake_held is True
    assert translator.reset_pressed is False


def test_release_lowers_trigger_once(vehicle: SimulatedVehicle, binding: TargetBinding) -> None:
    translator = InputTranslator()
    translator.apply(ControlCommand.action(reset=1.0), binding)
    translator.release()
    assert vehicle.reset_triggered is False

    # Nothing fired since; the host's own value is left alone.
    vehicle.reset_triggered = True
    translator.release()
    assert vehicle.reset_triggered is True
