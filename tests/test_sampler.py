from __future__ import annotations

from zeepstream.sampler import StateSampler
from zeepstream.simulated import SimulatedVehicle
from zeepstream.vehicle import TargetBinding


def test_sample_reads_bound_vehicle() -> None:
    vehicle = SimulatedVehicle(
        position=(1.0, 2.0, 3.0),
        rotation_euler=(0.0, 90.0, 0.0),
        local_velocity=(0.0, 0.0, 5.0),
        local_angular_velocity=(0.0, 0.5, 0.0),
    )
    sampler = StateSampler(clock=lambda: 42.0)

    snapshot = sampler.sample(TargetBinding(vehicle))

    assert snapshot is not None
    assert snapshot.position == (1.0, 2.0, 3.0)
    assert snapshot.rotation == (0.0, 90.0, 0.0)
    assert snapshot.local_velocity == (0.0, 0.0, 5.0)
    assert snapshot.local_angular_velocity == (0.0, 0.5, 0.0)
    assert snapshot.timestamp == 42.0


def test_sample_without_target_returns_none() -> None:
    assert StateSampler().sample(TargetBinding()) is None


def test_default_clock_starts_near_zero() -> None:
    snapshot = StateSampler().sample(TargetBinding(SimulatedVehicle()))
    assert snapshot is not None
    assert 0.0 <= snapshot.timestamp < 5.0


def test_binding_generation() -> None:
    binding = TargetBinding()
    assert binding.generation == 0
    binding.clear()
    assert binding.generation == 0

    binding.set(SimulatedVehicle())
    binding.set(SimulatedVehicle())
    binding.clear()
    assert binding.generation == 3
    assert binding.get() is None
