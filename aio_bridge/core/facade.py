"""Blocking facade handed to the consumer thread.

ファサードのクラスは capability の組み合わせごとに生成される。無効な
capability のメソッドはクラスに存在しないため、例えば seek を有効化して
いないファサードで ``seek`` を呼ぶと ``AttributeError`` になる。
"""

from __future__ import annotations

from functools import lru_cache
import io
import logging
import os
from threading import Lock
from typing import Any

from .capabilities import Capability
from .carrier import BufferCarrier, CarrierMode
from .channel import ChannelPair
from .errors import (
    BridgeBrokenError,
    ConcurrentRequestError,
    IncompleteReadError,
    ProtocolViolation,
    ResponseMismatchError,
    WriteZeroError,
)
from .observability import EventLogger, emit_safely
from .protocol import Op, Request, Response, SeekFrom

LOGGER = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = io.DEFAULT_BUFFER_SIZE


class SyncBridge:
    """Common plumbing of every facade: one request in flight at a time."""

    capabilities: Capability = Capability.NONE

    def __init__(
        self,
        channels: ChannelPair,
        *,
        carrier_mode: CarrierMode = CarrierMode.COPY,
        event_logger: EventLogger | None = None,
    ) -> None:
        self._channels = channels
        self._carrier_mode = carrier_mode
        self._logger = event_logger
        self._permit = Lock()
        self._broken: ProtocolViolation | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def broken(self) -> bool:
        return self._broken is not None

    def readable(self) -> bool:
        return Capability.READ in self.capabilities

    def writable(self) -> bool:
        return Capability.WRITE in self.capabilities

    def seekable(self) -> bool:
        return Capability.SEEK in self.capabilities

    def close(self) -> None:
        """Close the request side; the executor loop then terminates."""

        if self._closed:
            return
        self._closed = True
        self._channels.requests.close()

    def __enter__(self) -> SyncBridge:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<{type(self).__name__} {'|'.join(self.capabilities.names)} {state}>"

    def _call(self, request: Request) -> Any:
        try:
            self._ensure_usable(request)
            if not self._permit.acquire(blocking=False):
                self._violation(
                    ConcurrentRequestError(
                        f"{request.op.value} issued while another request is in flight",
                        op=request.op,
                    ),
                    poison=False,
                )
        except BaseException:
            if request.carrier is not None:
                request.carrier.complete()
            raise
        try:
            response = self._exchange(request)
        finally:
            self._permit.release()
        return response.unwrap()

    def _ensure_usable(self, request: Request) -> None:
        if self._closed:
            raise ValueError("I/O operation on closed bridge")
        if self._broken is not None:
            raise BridgeBrokenError(
                f"bridge is unusable after protocol violation: {self._broken}", op=request.op
            ) from self._broken

    def _exchange(self, request: Request) -> Response:
        carrier = request.carrier
        count: int | None = None
        try:
            try:
                self._channels.requests.send_nowait(request)
                response = self._channels.responses.recv()
            except ProtocolViolation as exc:
                self._violation(exc)
            if response.op is not request.op:
                self._violation(
                    ResponseMismatchError(
                        f"expected {request.op.value} response, received {response.op.value}",
                        op=request.op,
                        received=response.op,
                    )
                )
            if response.ok and request.op is Op.READ:
                count = response.value
            return response
        finally:
            if carrier is not None:
                carrier.complete(count)

    def _violation(self, exc: ProtocolViolation, *, poison: bool = True) -> None:
        # 同時呼び出しは先行リクエストの対応関係を壊さないので poison しない
        if poison and self._broken is None:
            self._broken = exc
        LOGGER.error("bridge protocol violation: %s", exc)
        emit_safely(
            self._logger,
            "bridge_protocol_violation",
            {
                "error_type": type(exc).__name__,
                "op": exc.op.value if isinstance(exc.op, Op) else None,
                "message": str(exc),
            },
        )
        raise exc


class _ReadMixin:
    """Blocking read operations."""

    _carrier_mode: CarrierMode

    def readinto(self, buffer: Any) -> int:
        """Perform one resource read into ``buffer`` and return the byte count."""

        carrier = BufferCarrier.for_read(buffer, mode=self._carrier_mode)
        if carrier.nbytes == 0:
            carrier.complete()
            return 0
        return self._call(Request.read(carrier))  # type: ignore[attr-defined]

    def read(self, size: int | None = -1) -> bytes:
        if size is None or size < 0:
            return self.read_to_end()
        buffer = bytearray(size)
        count = self.readinto(buffer)
        del buffer[count:]
        return bytes(buffer)

    def readinto_exact(self, buffer: Any) -> None:
        view = memoryview(buffer).cast("B")
        try:
            filled = 0
            total = len(view)
            while filled < total:
                count = self.readinto(view[filled:])
                if count == 0:
                    raise IncompleteReadError(total, view[:filled].tobytes())
                filled += count
        finally:
            view.release()

    def read_exact(self, size: int) -> bytes:
        buffer = bytearray(size)
        self.readinto_exact(buffer)
        return bytes(buffer)

    def read_to_end(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> bytes:
        chunks = bytearray()
        buffer = bytearray(chunk_size)
        while True:
            count = self.readinto(buffer)
            if count == 0:
                return bytes(chunks)
            chunks += buffer[:count]

    readall = read_to_end


class _WriteMixin:
    """Blocking write operations."""

    _carrier_mode: CarrierMode

    def write(self, data: Any) -> int:
        carrier = BufferCarrier.for_write(data, mode=self._carrier_mode)
        return self._call(Request.write(carrier))  # type: ignore[attr-defined]

    def write_all(self, data: Any) -> None:
        view = memoryview(data).cast("B")
        try:
            while view:
                count = self.write(view)
                if count == 0:
                    raise WriteZeroError("failed to write whole buffer")
                view = view[count:]
        finally:
            view.release()

    def flush(self) -> None:
        self._call(Request.flush())  # type: ignore[attr-defined]


class _SeekMixin:
    """Blocking seek operations."""

    def seek(self, position: SeekFrom | int, whence: int = os.SEEK_SET) -> int:
        target = SeekFrom.coerce(position, whence)
        return self._call(Request.seek(target))  # type: ignore[attr-defined]

    def tell(self) -> int:
        return self.seek(SeekFrom.current(0))

    def rewind(self) -> None:
        self.seek(SeekFrom.start(0))


_MIXINS: tuple[tuple[Capability, type], ...] = (
    (Capability.READ, _ReadMixin),
    (Capability.WRITE, _WriteMixin),
    (Capability.SEEK, _SeekMixin),
)


@lru_cache(maxsize=None)
def facade_class(capabilities: Capability) -> type[SyncBridge]:
    """Return the facade class exposing exactly ``capabilities``."""

    bases = tuple(mixin for cap, mixin in _MIXINS if cap in capabilities)
    suffix = "".join(name.title() for name in capabilities.names) or "Closed"
    name = f"Sync{suffix}Bridge"
    return type(
        name,
        (*bases, SyncBridge),
        {"capabilities": capabilities, "__module__": __name__, "__qualname__": name},
    )


__all__ = ["DEFAULT_CHUNK_SIZE", "SyncBridge", "facade_class"]
