"""Translate decoded commands into vehicle input mutations."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from zeepstream._constants import PRESS_THRESHOLD
from zeepstream.models.command import CommandKind, ControlCommand
from zeepstream.vehicle import TargetBinding, VehicleRef

_logger = logging.getLogger(__name__)


class InputTranslator:
    """Writes :class:`ControlCommand` values into the bound vehicle's input.

    * ``steer`` goes straight to the steering axis.
    * ``brake`` and ``arms_up`` set both the raw axis and a held flag that
      is true when the value is strictly above the threshold.
    * ``reset`` is edge-triggered: the trigger is asserted only on the
      call where the value goes from ``<= 0`` to ``> 0``.  The previous
      value lives here, not on the vehicle, and is forgotten whenever the
      binding moves to a new target.  An asserted trigger lasts one tick;
      :meth:`release` lowers it again.

    Must only be used from the tick context.
    """

    def __init__(self, *, threshold: float = PRESS_THRESHOLD) -> None:
        self._threshold = threshold
        self._reset_pressed = False
        self._generation: int | None = None
        self._fired: VehicleRef | None = None

    @property
    def reset_pressed(self) -> bool:
        """Whether the last applied command held reset down."""
        return self._reset_pressed

    def forget_edge(self) -> None:
        """Treat the reset button as released."""
        self._reset_pressed = False

    def apply(self, command: ControlCommand, binding: TargetBinding) -> bool:
        """Apply *command* to the bound vehicle.

        Returns ``False`` without touching anything when no vehicle is
        bound or the command is not an ``ACTION``.
        """
        return self.apply_all((command,), binding) > 0

    def apply_all(self, commands: Iterable[ControlCommand], binding: TargetBinding) -> int:
        """Apply *commands* in order as one tick's worth of input.

        Axes and held flags end up reflecting the last command.  The reset
        trigger is asserted if a rising edge occurred anywhere in the
        batch, so a press and release queued within one tick still fire.

        Returns
        -------
        int
            Number of commands written to the vehicle.
        """
        vehicle, generation = binding.snapshot()
        if vehicle is None:
            return 0
        if generation != self._generation:
            self._generation = generation
            self._fired = None
            self.forget_edge()

        applied = 0
        rising = False
        for command in commands:
            if command.kind is not CommandKind.ACTION:
                continue
            rising = self._write(vehicle, command) or rising
            applied += 1

        if applied:
            vehicle.reset_triggered = rising
            self._fired = vehicle if rising else None
            if rising:
                _logger.debug("Reset triggered")
        return applied

    def release(self) -> None:
        """Lower a reset trigger asserted on a previous tick.

        Called on ticks where no command was applied.
        """
        vehicle = self._fired
        if vehicle is None:
            return
        self._fired = None
        vehicle.reset_triggered = False

    def _write(self, vehicle: VehicleRef, command: ControlCommand) -> bool:
        vehicle.steer_axis = command.steer

        vehicle.brake_held = command.brake > self._threshold
        vehicle.brake_axis = command.brake

        vehicle.arms_up_held = command.arms_up > self._threshold
        vehicle.arms_up_axis = command.arms_up

        pressed = command.reset > 0.0
        rising = pressed and not self._reset_pressed
        self._reset_pressed = pressed
        return rising
