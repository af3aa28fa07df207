"""Relay configuration for zeepstream."""

from __future__ import annotations

import dataclasses
import os
from enum import StrEnum
from typing import Any

from zeepstream._constants import (
    DEFAULT_BROADCAST_INTERVAL,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_QUEUE_MAXLEN,
    DEFAULT_TICK_RATE,
    PRESS_THRESHOLD,
)
from zeepstream.exceptions import ZeepConfigError


class WireProfile(StrEnum):
    """Frame encoding spoken on the socket."""

    MSGPACK = "msgpack"
    JSON = "json"


class BroadcastMode(StrEnum):
    """What triggers unsolicited state broadcasts."""

    INTERVAL = "interval"
    REQUEST = "request"
    TICK = "tick"


class QueuePolicy(StrEnum):
    """How pending ACTION commands are retained between ticks."""

    COALESCE = "coalesce"
    QUEUE = "queue"


class InputPolicy(StrEnum):
    """When translated input is written to the vehicle."""

    ON_COMMAND = "on_command"
    HOLD_LAST = "hold_last"


def _env_float(value: str | None) -> float | None:
    if value is None or not value.strip():
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise ZeepConfigError(f"expected a number, got {value!r}") from exc


def _env_int(value: str | None) -> int | None:
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise ZeepConfigError(f"expected an integer, got {value!r}") from exc


def _coerce_enum(enum_cls: type[StrEnum], value: Any, field_name: str) -> StrEnum:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError as exc:
        choices = ", ".join(member.value for member in enum_cls)
        raise ZeepConfigError(f"{field_name} must be one of {choices}, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class StreamerConfig:
    """Relay configuration.

    Parameters
    ----------
    host : str
        Address the WebSocket listener binds to.
    port : int
        TCP port for the listener. ``0`` picks a free port.
    profile : WireProfile
        ``msgpack`` (binary frames) or ``json`` (text frames).
    broadcast_mode : BroadcastMode
        ``interval`` broadcasts on a timer, ``request`` only answers
        ``STATE_REQUEST`` commands, ``tick`` broadcasts on every tick.
    broadcast_interval : float
        Seconds between broadcasts in ``interval`` mode.
    queue_policy : QueuePolicy
        ``coalesce`` keeps only the latest ACTION, ``queue`` keeps all of
        them in arrival order.
    queue_maxlen : int
        Upper bound on retained ACTIONs in ``queue`` mode; the oldest is
        dropped on overflow.
    input_policy : InputPolicy
        ``on_command`` writes input only when a new ACTION arrives,
        ``hold_last`` re-applies the last ACTION every tick.
    press_threshold : float
        Analog value above which brake/arms-up count as held.
    tick_rate : float
        Fixed-timestep rate used by the standalone runner, in Hz.
    heartbeat : float or None
        WebSocket ping interval in seconds, ``None`` to disable.
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    profile: WireProfile = WireProfile.MSGPACK
    broadcast_mode: BroadcastMode = BroadcastMode.REQUEST
    broadcast_interval: float = DEFAULT_BROADCAST_INTERVAL
    queue_policy: QueuePolicy = QueuePolicy.COALESCE
    queue_maxlen: int = DEFAULT_QUEUE_MAXLEN
    input_policy: InputPolicy = InputPolicy.ON_COMMAND
    press_threshold: float = PRESS_THRESHOLD
    tick_rate: float = DEFAULT_TICK_RATE
    heartbeat: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "profile", _coerce_enum(WireProfile, self.profile, "profile"))
        object.__setattr__(
            self,
            "broadcast_mode",
            _coerce_enum(BroadcastMode, self.broadcast_mode, "broadcast_mode"),
        )
        object.__setattr__(self, "queue_policy", _coerce_enum(QueuePolicy, self.queue_policy, "queue_policy"))
        object.__setattr__(self, "input_policy", _coerce_enum(InputPolicy, self.input_policy, "input_policy"))

        if not 0 <= int(self.port) <= 65535:
            raise ZeepConfigError(f"port must be between 0 and 65535, got {self.port}")
        if self.broadcast_interval <= 0:
            raise ZeepConfigError(f"broadcast_interval must be positive, got {self.broadcast_interval}")
        if self.queue_maxlen < 1:
            raise ZeepConfigError(f"queue_maxlen must be at least 1, got {self.queue_maxlen}")
        if not 0.0 <= self.press_threshold < 1.0:
            raise ZeepConfigError(f"press_threshold must be in [0, 1), got {self.press_threshold}")
        if self.tick_rate <= 0:
            raise ZeepConfigError(f"tick_rate must be positive, got {self.tick_rate}")
        if self.heartbeat is not None and self.heartbeat <= 0:
            raise ZeepConfigError(f"heartbeat must be positive or None, got {self.heartbeat}")

    @property
    def url(self) -> str:
        """``ws://`` URL clients on this machine would connect to."""
        host = "127.0.0.1" if self.host in ("0.0.0.0", "") else self.host
        return f"ws://{host}:{self.port}/"

    @classmethod
    def from_env(cls, **overrides: Any) -> StreamerConfig:
        """Create configuration from environment variables.

        Reads the optional ``ZEEP_*`` variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        StreamerConfig
            Populated configuration.

        Raises
        ------
        ZeepConfigError
            If a variable cannot be parsed or a value is out of range.
        """
        env = os.environ

        _ENV_TEXT_MAP = {
            "ZEEP_HOST": "host",
            "ZEEP_PROFILE": "profile",
            "ZEEP_BROADCAST_MODE": "broadcast_mode",
            "ZEEP_QUEUE_POLICY": "queue_policy",
            "ZEEP_INPUT_POLICY": "input_policy",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_TEXT_MAP.items():
            val = env.get(env_key)
            if val is not None and val.strip():
                config_kwargs[field_name] = val.strip()

        _ENV_INT_MAP = {
            "ZEEP_PORT": "port",
            "ZEEP_QUEUE_MAXLEN": "queue_maxlen",
        }
        for env_key, field_name in _ENV_INT_MAP.items():
            parsed_int = _env_int(env.get(env_key))
            if parsed_int is not None:
                config_kwargs[field_name] = parsed_int

        _ENV_FLOAT_MAP = {
            "ZEEP_BROADCAST_INTERVAL": "broadcast_interval",
            "ZEEP_PRESS_THRESHOLD": "press_threshold",
            "ZEEP_TICK_RATE": "tick_rate",
            "ZEEP_HEARTBEAT": "heartbeat",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            parsed_float = _env_float(env.get(env_key))
            if parsed_float is not None:
                config_kwargs[field_name] = parsed_float

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
