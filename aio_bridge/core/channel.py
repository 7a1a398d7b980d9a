"""Bounded FIFO channels connecting the blocking thread and the event loop.

- ``RequestChannel``: スレッド側が ``send_nowait`` し、イベントループ側が
  ``await recv()`` する。ループの起床は ``call_soon_threadsafe`` で行う。
- ``ResponseChannel``: ループ側が ``send_nowait`` し、スレッド側が
  ``recv()`` でブロックする。``queue.Queue`` を利用する。
"""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass
import queue
from threading import Lock

from .errors import ExecutorClosedError, RequestQueueFullError
from .protocol import Request, Response

DEFAULT_CAPACITY = 10


def _validate_capacity(capacity: int) -> int:
    if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
        raise ValueError(f"channel capacity must be a positive integer, got {capacity!r}")
    return capacity


class RequestChannel:
    """Thread → loop queue. Single producer, single consumer."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self._capacity = _validate_capacity(capacity)
        self._items: deque[Request] = deque()
        self._lock = Lock()
        self._closed = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._waiter: asyncio.Future[None] | None = None

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        with self._lock:
            self._loop = loop

    def send_nowait(self, request: Request) -> None:
        """Enqueue without blocking; a full queue is a protocol violation."""

        with self._lock:
            if self._closed:
                raise ExecutorClosedError("request channel is closed", op=request.op)
            if len(self._items) >= self._capacity:
                raise RequestQueueFullError(
                    f"request queue is full ({self._capacity} pending)", op=request.op
                )
            self._items.append(request)
            loop, waiter = self._loop, self._waiter
        if waiter is not None and loop is not None:
            self._wake(loop, waiter)

    def close(self) -> None:
        """Mark end of input; the consumer drains what is queued, then stops."""

        with self._lock:
            if self._closed:
                return
            self._closed = True
            loop, waiter = self._loop, self._waiter
        if waiter is not None and loop is not None:
            try:
                loop.call_soon_threadsafe(_resolve, waiter)
            except RuntimeError:
                # ループ終了済み: 待機者はもう存在しない
                pass

    def _wake(self, loop: asyncio.AbstractEventLoop, waiter: asyncio.Future[None]) -> None:
        try:
            loop.call_soon_threadsafe(_resolve, waiter)
        except RuntimeError as exc:
            raise ExecutorClosedError("executor event loop is closed") from exc

    async def recv(self) -> Request | None:
        """Return the next request, or ``None`` once closed and drained."""

        while True:
            with self._lock:
                if self._items:
                    return self._items.popleft()
                if self._closed:
                    return None
                if self._loop is None:
                    self._loop = asyncio.get_running_loop()
                waiter = self._loop.create_future()
                self._waiter = waiter
            try:
                await waiter
            finally:
                with self._lock:
                    if self._waiter is waiter:
                        self._waiter = None


def _resolve(waiter: asyncio.Future[None]) -> None:
    if not waiter.done():
        waiter.set_result(None)


class _Closed:
    __slots__ = ()


_CLOSED = _Closed()


class ResponseChannel:
    """Loop → thread queue. ``recv`` blocks the calling thread."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self._capacity = _validate_capacity(capacity)
        # 終端マーカー用に 1 枠余分に確保する
        self._queue: queue.Queue[Response | _Closed] = queue.Queue(maxsize=self._capacity + 1)
        self._lock = Lock()
        self._closed = False

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def closed(self) -> bool:
        return self._closed

    def send_nowait(self, response: Response) -> None:
        with self._lock:
            if self._closed:
                raise ExecutorClosedError("response channel is closed", op=response.op)
            if self._queue.qsize() >= self._capacity:
                raise RequestQueueFullError(
                    f"response queue is full ({self._capacity} pending)", op=response.op
                )
            self._queue.put_nowait(response)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put_nowait(_CLOSED)

    def recv(self) -> Response:
        """Block until a response arrives; raise if the executor side went away."""

        item = self._queue.get()
        if isinstance(item, _Closed):
            # 後続の recv も同様に失敗させる
            self._queue.put_nowait(item)
            raise ExecutorClosedError("executor terminated before responding")
        return item


@dataclass(frozen=True, slots=True)
class ChannelPair:
    requests: RequestChannel
    responses: ResponseChannel

    @classmethod
    def create(cls, capacity: int = DEFAULT_CAPACITY) -> ChannelPair:
        return cls(RequestChannel(capacity), ResponseChannel(capacity))


__all__ = [
    "DEFAULT_CAPACITY",
    "RequestChannel",
    "ResponseChannel",
    "ChannelPair",
]
