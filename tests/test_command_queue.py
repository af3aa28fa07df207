from __future__ import annotations

import threading

from zeepstream.command_queue import CommandQueue
from zeepstream.config import QueuePolicy
from zeepstream.models import CommandKind, ControlCommand


def _burst(queue: CommandQueue) -> None:
    queue.push(ControlCommand.action(steer=0.1))
    queue.push(ControlCommand.action(steer=0.2))
    queue.push(ControlCommand.state_request())
    queue.push(ControlCommand.action(steer=0.3))


def test_coalesce_keeps_latest_action() -> None:
    queue = CommandQueue(QueuePolicy.COALESCE)
    _burst(queue)

    drained = queue.drain_all()
    assert [c.steer for c in drained] == [ControlCommand.action(steer=0.3).steer]
    assert queue.dropped == 2
    assert queue.drain_state_requests() == 1


def test_queue_keeps_every_action_in_order() -> None:
    queue = CommandQueue(QueuePolicy.QUEUE)
    _burst(queue)

    drained = queue.drain_all()
    expected = [ControlCommand.action(steer=v).steer for v in (0.1, 0.2, 0.3)]
    assert [c.steer for c in drained] == expected
    assert all(c.kind is CommandKind.ACTION for c in drained)
    assert queue.dropped == 0
    assert queue.drain_state_requests() == 1


def test_drain_empties_the_queue() -> None:
    queue = CommandQueue("queue")
    queue.push(ControlCommand.action())
    assert queue.pending == 1
    queue.drain_all()
    assert queue.pending == 0
    assert queue.drain_all() == []


def test_state_requests_are_counted_not_stored() -> None:
    queue = CommandQueue()
    for _ in range(3):
        queue.push(ControlCommand.state_request())
    assert queue.pending == 0
    assert queue.pending_state_requests == 3
    assert queue.drain_state_requests() == 3
    assert queue.drain_state_requests() == 0


def test_unknown_commands_are_dropped() -> None:
    queue = CommandQueue(QueuePolicy.QUEUE)
    queue.push(ControlCommand.model_validate({"cmd": "HONK"}))
    assert queue.drain_all() == []
    assert queue.drain_state_requests() == 0


def test_bounded_queue_evicts_oldest() -> None:
    queue = CommandQueue(QueuePolicy.QUEUE, maxlen=2)
    for value in (0.25, 0.5, 0.75):
        queue.push(ControlCommand.action(brake=value))
    assert [c.brake for c in queue.drain_all()] == [0.5, 0.75]
    assert queue.dropped == 1


def test_concurrent_producers() -> None:
    queue = CommandQueue(QueuePolicy.QUEUE, maxlen=10_000)

    def produce() -> None:
        for _ in range(500):
            queue.push(ControlCommand.action(steer=0.5))
            queue.push(ControlCommand.state_request())

    threads = [threading.Thread(target=produce) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(queue.drain_all()) == 2000
    assert queue.drain_state_requests() == 2000
