"""Wire codec for state snapshots and control commands.

Two profiles share one payload layout:

* ``msgpack``: binary frames, MessagePack maps keyed by property name,
  floats packed as float32 and vectors as 3-element arrays.
* ``json``: text frames, compact JSON with the same keys.

Outbound state is always enveloped::

    {"state": {"position": [x, y, z], "rotation": [...],
               "localVelocity": [...], "localAngularVelocity": [...]},
     "timestamp": t}

Inbound commands are flat::

    {"cmd": "ACTION", "steer": s, "brake": b, "armsUp": a, "reset": r}

The codec is pure: no I/O and no logging.  Any malformed input surfaces
as :class:`~zeepstream.exceptions.ZeepDecodeError`.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import msgpack
from pydantic import ValidationError

from zeepstream.config import WireProfile
from zeepstream.exceptions import ZeepDecodeError
from zeepstream.models.command import ControlCommand
from zeepstream.models.state import StateSnapshot

Frame = bytes | str
"""A WebSocket payload: ``bytes`` for binary frames, ``str`` for text frames."""

_STATE_KEY = "state"
_TIMESTAMP_KEY = "timestamp"


class WireCodec:
    """Encode/decode payloads for one :class:`WireProfile`."""

    def __init__(self, profile: WireProfile | str = WireProfile.MSGPACK) -> None:
        self._profile = WireProfile(profile)

    @property
    def profile(self) -> WireProfile:
        return self._profile

    @property
    def is_binary(self) -> bool:
        """Whether this profile uses binary frames."""
        return self._profile is WireProfile.MSGPACK

    # ------------------------------------------------------------------
    # Framing
    # ------------------------------------------------------------------

    def _dump(self, obj: Mapping[str, Any]) -> Frame:
        if self._profile is WireProfile.MSGPACK:
            return msgpack.packb(obj, use_single_float=True)
        return json.dumps(obj, separators=(",", ":"), ensure_ascii=True)

    def _load(self, data: Frame) -> dict[str, Any]:
        if self._profile is WireProfile.MSGPACK:
            if isinstance(data, str):
                raise ZeepDecodeError(
                    "text frame received but the msgpack profile expects binary frames",
                    payload_size=len(data),
                )
            try:
                obj = msgpack.unpackb(bytes(data), raw=False)
            except (ValueError, TypeError, RecursionError, msgpack.UnpackException) as exc:
                raise ZeepDecodeError(
                    f"malformed msgpack payload: {exc}",
                    payload_size=len(data),
                ) from exc
        else:
            try:
                text = data.decode("utf-8") if isinstance(data, (bytes, bytearray)) else data
                obj = json.loads(text)
            except (ValueError, RecursionError) as exc:
                raise ZeepDecodeError(
                    f"malformed JSON payload: {exc}",
                    payload_size=len(data),
                ) from exc

        if not isinstance(obj, dict):
            raise ZeepDecodeError(
                f"payload must be a map, got {type(obj).__name__}",
                payload_size=len(data),
            )
        return obj

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def encode_command(self, command: ControlCommand) -> Frame:
        """Encode a command the way a client sends it."""
        return self._dump(command.model_dump(mode="json", by_alias=True))

    def decode_command(self, data: Frame) -> ControlCommand:
        """Decode an inbound frame into a :class:`ControlCommand`.

        Unknown ``cmd`` values decode to ``CommandKind.UNKNOWN``.

        Raises
        ------
        ZeepDecodeError
            If the frame is not a well-formed command map.
        """
        obj = self._load(data)
        try:
            return ControlCommand.model_validate(obj)
        except ValidationError as exc:
            raise ZeepDecodeError(
                f"invalid command payload: {exc.error_count()} error(s): {exc.errors()[0]['msg']}",
                payload_size=len(data),
            ) from exc

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def encode_state(self, snapshot: StateSnapshot) -> Frame:
        """Encode a snapshot into the enveloped outbound shape."""
        state = snapshot.model_dump(mode="json", by_alias=True, exclude={"timestamp"})
        return self._dump({_STATE_KEY: state, _TIMESTAMP_KEY: snapshot.timestamp})

    def decode_state(self, data: Frame) -> StateSnapshot:
        """Decode an enveloped state frame (client side).

        Raises
        ------
        ZeepDecodeError
            If the frame is not an enveloped state map.
        """
        obj = self._load(data)
        state = obj.get(_STATE_KEY)
        if not isinstance(state, dict):
            raise ZeepDecodeError(
                "state frame is missing the 'state' map",
                payload_size=len(data),
            )
        try:
            return StateSnapshot.model_validate({**state, _TIMESTAMP_KEY: obj.get(_TIMESTAMP_KEY)})
        except ValidationError as exc:
            raise ZeepDecodeError(
                f"invalid state payload: {exc.error_count()} error(s): {exc.errors()[0]['msg']}",
                payload_size=len(data),
            ) from exc
