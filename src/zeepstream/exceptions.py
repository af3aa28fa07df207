"""Custom exception hierarchy for zeepstream."""

from __future__ import annotations


class ZeepError(Exception):
    """Base exception for all zeepstream errors."""


class ZeepConfigError(ZeepError):
    """Invalid or missing configuration."""


class ZeepDecodeError(ZeepError):
    """Inbound payload could not be decoded into a command.

    The frame is dropped; the connection that sent it stays open.
    """

    def __init__(self, message: str, *, payload_size: int | None = None) -> None:
        self.payload_size = payload_size
        super().__init__(message)


class ZeepTransportError(ZeepError):
    """Send, accept or connect failure on a single connection."""

    def __init__(self, message: str, *, connection_id: str = "") -> None:
        self.connection_id = connection_id
        super().__init__(message)


class ZeepAbsentTargetError(ZeepError):
    """No vehicle is currently tracked.

    Raised by :meth:`zeepstream.vehicle.TargetBinding.require`.  Callers in
    the relay treat it as "skip silently", never as a failure.
    """


class ZeepBindError(ZeepError):
    """The listener could not bind its configured address.

    Fatal to :meth:`zeepstream.server.RelayServer.start`; there is no retry.
    """

    def __init__(self, message: str, *, host: str = "", port: int | None = None) -> None:
        self.host = host
        self.port = port
        super().__init__(message)
