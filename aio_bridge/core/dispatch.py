"""Chain of handler links routing requests to resource primitives.

有効化された capability ごとに 1 つのリンクがチェーンに追加され、
自身の担当でないリクエストは後続のリンクへ委譲する。チェーンの末尾は
何もしない ``NoopHandler``。
"""

from __future__ import annotations

from collections.abc import Sequence
import errno
import inspect
import logging
from typing import Any

from .capabilities import Capability
from .protocol import Op, Request, Response

LOGGER = logging.getLogger(__name__)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _not_ready(primitive: str) -> BlockingIOError:
    # None は非ブロッキングストリームの「まだデータがない」であり EOF ではない
    return BlockingIOError(errno.EAGAIN, f"{primitive}() returned None: resource has no data ready")


def _checked_count(count: Any, size: int, primitive: str) -> int:
    if count is None:
        raise _not_ready(primitive)
    count = int(count)
    if not 0 <= count <= size:
        raise ValueError(f"{primitive}() returned {count} bytes for a {size} byte buffer")
    return count


class Handler:
    """One link of the dispatch chain."""

    ops: frozenset[Op] = frozenset()

    def __init__(self, successor: Handler | None = None) -> None:
        self._successor = successor

    @property
    def successor(self) -> Handler | None:
        return self._successor

    async def invoke(self, request: Request, resource: Any) -> Response | None:
        if request.op in self.ops:
            return await self.handle(request, resource)
        if self._successor is None:
            return None
        return await self._successor.invoke(request, resource)

    async def handle(self, request: Request, resource: Any) -> Response:
        raise NotImplementedError


class NoopHandler(Handler):
    """Terminal link for request kinds that no capability claimed."""

    def __init__(self) -> None:
        super().__init__(None)

    async def invoke(self, request: Request, resource: Any) -> Response | None:
        LOGGER.warning("no handler enabled for %r; request dropped", request)
        return None


class ReadHandler(Handler):
    ops = frozenset({Op.READ})

    async def handle(self, request: Request, resource: Any) -> Response:
        assert request.carrier is not None
        view = request.carrier.take()
        size = len(view)
        try:
            readinto = getattr(resource, "readinto", None)
            if callable(readinto):
                count = _checked_count(await _maybe_await(readinto(view)), size, "readinto")
            else:
                data = await _maybe_await(resource.read(size))
                if data is None:
                    raise _not_ready("read")
                count = _checked_count(len(data), size, "read")
                view[:count] = data
        except Exception as exc:  # noqa: BLE001 - 呼び出し元へそのまま返す
            return Response(Op.READ, error=exc)
        return Response(Op.READ, value=count)


class WriteHandler(Handler):
    ops = frozenset({Op.WRITE, Op.FLUSH})

    async def handle(self, request: Request, resource: Any) -> Response:
        if request.op is Op.FLUSH:
            try:
                await _maybe_await(resource.flush())
            except Exception as exc:  # noqa: BLE001
                return Response(Op.FLUSH, error=exc)
            return Response(Op.FLUSH)

        assert request.carrier is not None
        view = request.carrier.take()
        try:
            written = await _maybe_await(resource.write(view))
        except Exception as exc:  # noqa: BLE001
            return Response(Op.WRITE, error=exc)
        # asyncio の StreamWriter 等は None を返すので全量書き込み扱い
        return Response(Op.WRITE, value=len(view) if written is None else int(written))


class SeekHandler(Handler):
    ops = frozenset({Op.SEEK})

    async def handle(self, request: Request, resource: Any) -> Response:
        assert request.position is not None
        position = request.position
        try:
            offset = await _maybe_await(resource.seek(position.offset, position.whence))
        except Exception as exc:  # noqa: BLE001
            return Response(Op.SEEK, error=exc)
        return Response(Op.SEEK, value=int(offset))


_LINKS: dict[Capability, type[Handler]] = {
    Capability.READ: ReadHandler,
    Capability.WRITE: WriteHandler,
    Capability.SEEK: SeekHandler,
}


class Dispatcher:
    """Entry point of the chain; invoked once per dequeued request."""

    def __init__(self, enabled: Sequence[Capability]) -> None:
        head: Handler = NoopHandler()
        # 後から有効化したものほど先頭に来る (ネストした合成と同じ順序)
        for capability in enabled:
            head = _LINKS[capability](head)
        self._head = head
        self._enabled = tuple(enabled)

    @property
    def links(self) -> tuple[Handler, ...]:
        chain: list[Handler] = []
        node: Handler | None = self._head
        while node is not None:
            chain.append(node)
            node = node.successor
        return tuple(chain)

    @property
    def enabled(self) -> tuple[Capability, ...]:
        return self._enabled

    async def dispatch(self, request: Request, resource: Any) -> Response | None:
        return await self._head.invoke(request, resource)


__all__ = [
    "Handler",
    "NoopHandler",
    "ReadHandler",
    "WriteHandler",
    "SeekHandler",
    "Dispatcher",
]
