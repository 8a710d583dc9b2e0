"""Splits mining requests into chunks and hands them out to joined miners."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

from distkit.message import Message, MsgType, new_request, new_result

CHUNK_SIZE = 10000

Outgoing = tuple[int, Message]


@dataclass(eq=False)
class _Pending:
    client_id: int
    data: str
    lower: int
    upper: int


@dataclass(eq=False)
class _Task:
    data: str
    ranges: dict[int, tuple[int, int]] = field(default_factory=dict)
    best_hash: int = 0
    best_nonce: int = 0


class Scheduler:
    """Schedules client requests over miners, round robin in chunks.

    Requests wait in a queue while no miner is free. A free miner takes the
    request at the front of the queue, at most ``CHUNK_SIZE`` nonces of it;
    what remains goes to the back of the queue. Once every miner working on a
    client's request has answered, the client is sent the smallest hash.

    The scheduler does no I/O: each call returns the messages to send, as
    ``(connection id, message)`` pairs in order.
    """

    def __init__(self) -> None:
        self._free: deque[int] = deque()
        self._working: dict[int, int] = {}
        self._tasks: dict[int, _Task] = {}
        self._queue: deque[_Pending] = deque()

    def handle_message(self, conn_id: int, message: Message) -> list[Outgoing]:
        """Process a message received from connection ``conn_id``."""
        out: list[Outgoing] = []
        if message.type is MsgType.JOIN:
            if self._queue:
                self._assign_from_queue(out, conn_id)
            else:
                self._free.append(conn_id)
        elif message.type is MsgType.REQUEST:
            self._on_request(out, conn_id, message)
        elif message.type is MsgType.RESULT:
            self._on_result(out, conn_id, message)
        return out

    def handle_disconnect(self, conn_id: int) -> list[Outgoing]:
        """Forget a lost client or miner, handing a lost miner's work to another."""
        out: list[Outgoing] = []
        pending = next((p for p in self._queue if p.client_id == conn_id), None)
        if pending is not None:
            self._queue.remove(pending)
        had_task = self._tasks.pop(conn_id, None) is not None
        if pending is not None or had_task:
            return out

        if conn_id in self._free:
            self._free.remove(conn_id)
            return out
        cid = self._working.pop(conn_id, None)
        if cid is None:
            return out
        task = self._tasks.get(cid)
        if task is None:
            return out
        span = task.ranges.pop(conn_id, None)
        if span is None:
            return out
        low, high = span
        if self._free:
            miner = self._free.popleft()
            self._assign(out, miner, cid, task.data, low, high)
        else:
            self._queue.appendleft(_Pending(cid, task.data, low, high))
        return out

    def _on_request(self, out: list[Outgoing], client_id: int, message: Message) -> None:
        data, lower, upper = message.data, message.lower, message.upper
        if not self._free:
            self._queue.append(_Pending(client_id, data, lower, upper))
            return
        if upper - lower + 1 <= CHUNK_SIZE:
            miner = self._free.popleft()
            self._tasks[client_id] = _Task(data)
            self._assign(out, miner, client_id, data, lower, upper)
            return
        bound = lower
        while self._free and bound < upper:
            miner = self._free.popleft()
            chunk_upper = min(bound + CHUNK_SIZE, upper)
            self._assign(out, miner, client_id, data, bound, chunk_upper)
            bound = chunk_upper
        if not self._free and bound < upper:
            self._queue.append(_Pending(client_id, data, bound, upper))

    def _on_result(self, out: list[Outgoing], miner: int, message: Message) -> None:
        cid = self._working.get(miner)
        task = self._tasks.get(cid) if cid is not None else None
        if task is not None:
            task.ranges.pop(miner, None)

        if self._queue:
            self._assign_from_queue(out, miner)
        else:
            self._free.append(miner)
            self._working.pop(miner, None)

        if task is None:
            return
        if task.best_hash == 0 or message.hash_value < task.best_hash:
            task.best_hash = message.hash_value
            task.best_nonce = message.nonce
        if not task.ranges:
            out.append((cid, new_result(task.best_hash, task.best_nonce)))
            if self._tasks.get(cid) is task:
                del self._tasks[cid]

    def _assign_from_queue(self, out: list[Outgoing], miner: int) -> None:
        pending = self._queue.popleft()
        cid, data, low, high = pending.client_id, pending.data, pending.lower, pending.upper
        if high - low + 1 <= CHUNK_SIZE:
            self._assign(out, miner, cid, data, low, high)
        else:
            self._assign(out, miner, cid, data, low, low + CHUNK_SIZE)
            self._queue.append(_Pending(cid, data, low + CHUNK_SIZE, high))

    def _assign(
        self, out: list[Outgoing], miner: int, cid: int, data: str, low: int, high: int
    ) -> None:
        out.append((miner, new_request(data, low, high)))
        self._working[miner] = cid
        task = self._tasks.get(cid)
        if task is None:
            task = _Task(data)
            self._tasks[cid] = task
        task.ranges[miner] = (low, high)