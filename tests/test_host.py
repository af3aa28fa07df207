from __future__ import annotations

import logging

import pytest

from zeepstream.host import SpawnHook
from zeepstream.simulated import SimulatedVehicle
from zeepstream.vehicle import TargetBinding


def test_single_player_spawn_binds_and_logs(caplog: pytest.LogCaptureFixture) -> None:
    binding = TargetBinding()
    vehicle = SimulatedVehicle(name="Soapbox")

    with caplog.at_level(logging.INFO, logger="zeepstream.host"):
        assert SpawnHook(binding).on_vehicle_spawned(vehicle, single_player=True)

    assert binding.get() is vehicle
    assert "Soapbox" in caplog.text


def test_multiplayer_spawn_is_ignored() -> None:
    binding = TargetBinding()
    assert SpawnHook(binding).on_vehicle_spawned(SimulatedVehicle(), single_player=False) is False
    assert not binding.is_bound


def test_respawn_replaces_target() -> None:
    binding = TargetBinding()
    hook = SpawnHook(binding)
    first, second = SimulatedVehicle(), SimulatedVehicle()
    hook.on_vehicle_spawned(first, single_player=True)
    hook.on_vehicle_spawned(second, single_player=True)
    assert binding.get() is second


def test_session_end_clears_binding() -> None:
    binding = TargetBinding()
    hook = SpawnHook(binding)
    hook.on_vehicle_spawned(SimulatedVehicle(), single_player=True)
    hook.on_session_ended()
    assert not binding.is_bound
