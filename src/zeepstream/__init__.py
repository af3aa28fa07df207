"""zeepstream - WebSocket telemetry and control relay for a tracked vehicle."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("zeepstream")
except PackageNotFoundError:
    __version__ = "0+local"
from zeepstream.client import RelayClient
from zeepstream.codec import WireCodec
from zeepstream.command_queue import CommandQueue
from zeepstream.config import BroadcastMode, InputPolicy, QueuePolicy, StreamerConfig, WireProfile
from zeepstream.exceptions import (
    ZeepAbsentTargetError,
    ZeepBindError,
    ZeepConfigError,
    ZeepDecodeError,
    ZeepError,
    ZeepTransportError,
)
from zeepstream.host import SpawnHook
from zeepstream.models import CommandKind, ControlCommand, StateSnapshot
from zeepstream.registry import Connection, ConnectionRegistry
from zeepstream.sampler import StateSampler
from zeepstream.server import RelayServer, ServerState
from zeepstream.simulated import SimulatedVehicle
from zeepstream.translator import InputTranslator
from zeepstream.vehicle import TargetBinding, VehicleRef

__all__ = [
    "__version__",
    "BroadcastMode",
    "CommandKind",
    "CommandQueue",
    "Connection",
    "ConnectionRegistry",
    "ControlCommand",
    "InputPolicy",
    "InputTranslator",
    "QueuePolicy",
    "RelayClient",
    "RelayServer",
    "ServerState",
    "SimulatedVehicle",
    "SpawnHook",
    "StateSampler",
    "StateSnapshot",
    "StreamerConfig",
    "TargetBinding",
    "VehicleRef",
    "WireCodec",
    "WireProfile",
    "ZeepAbsentTargetError",
    "ZeepBindError",
    "ZeepConfigError",
    "ZeepDecodeError",
    "ZeepError",
    "ZeepTransportError",
]
