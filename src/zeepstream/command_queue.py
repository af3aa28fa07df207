"""Hand-off of decoded commands from network callbacks to the tick."""

from __future__ import annotations

import logging
import threading
from collections import deque

from zeepstream._constants import DEFAULT_QUEUE_MAXLEN
from zeepstream.config import QueuePolicy
from zeepstream.models.command import CommandKind, ControlCommand

_logger = logging.getLogger(__name__)


class CommandQueue:
    """Many-producer, single-consumer command buffer.

    ``ACTION`` commands are retained per :class:`QueuePolicy`.
    ``STATE_REQUEST`` commands are never stored as data; each one bumps an
    out-of-band counter the tick reads with :meth:`drain_state_requests`.
    """

    def __init__(
        self,
        policy: QueuePolicy | str = QueuePolicy.COALESCE,
        *,
        maxlen: int = DEFAULT_QUEUE_MAXLEN,
    ) -> None:
        self._policy = QueuePolicy(policy)
        self._lock = threading.Lock()
        self._actions: deque[ControlCommand] = deque(maxlen=1 if self._policy is QueuePolicy.COALESCE else maxlen)
        self._state_requests = 0
        self._dropped = 0

    @property
    def policy(self) -> QueuePolicy:
        return self._policy

    @property
    def pending(self) -> int:
        """ACTION commands waiting for the next drain."""
        with self._lock:
            return len(self._actions)

    @property
    def dropped(self) -> int:
        """ACTION commands superseded or evicted before being drained."""
        with self._lock:
            return self._dropped

    @property
    def pending_state_requests(self) -> int:
        with self._lock:
            return self._state_requests

    def push(self, command: ControlCommand) -> None:
        if command.kind is CommandKind.STATE_REQUEST:
            with self._lock:
                self._state_requests += 1
            return
        if command.kind is not CommandKind.ACTION:
            _logger.debug("Ignoring command with unknown kind")
            return
        with self._lock:
            if len(self._actions) == self._actions.maxlen:
                self._dropped += 1
            self._actions.append(command)

    def drain_all(self) -> list[ControlCommand]:
        """Remove and return every retained ACTION, oldest first."""
        with self._lock:
            commands = list(self._actions)
            self._actions.clear()
        return commands

    def drain_state_requests(self) -> int:
        """Return and reset the number of STATE_REQUESTs since the last call."""
        with self._lock:
            count = self._state_requests
            self._state_requests = 0
        return count
