"""Request/response messages exchanged between the facade and the executor."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import os
from typing import Any

from .carrier import BufferCarrier


class Op(str, Enum):
    READ = "read"
    WRITE = "write"
    FLUSH = "flush"
    SEEK = "seek"


_WHENCE_NAMES = {os.SEEK_SET: "start", os.SEEK_END: "end", os.SEEK_CUR: "current"}


@dataclass(frozen=True, slots=True)
class SeekFrom:
    """Seek target: absolute, relative to the end, or relative to the cursor."""

    offset: int
    whence: int = os.SEEK_SET

    def __post_init__(self) -> None:
        if self.whence not in _WHENCE_NAMES:
            raise ValueError(f"invalid whence ({self.whence!r})")
        if self.whence == os.SEEK_SET and self.offset < 0:
            raise ValueError(f"negative seek position {self.offset}")

    @classmethod
    def start(cls, offset: int) -> SeekFrom:
        return cls(int(offset), os.SEEK_SET)

    @classmethod
    def end(cls, offset: int = 0) -> SeekFrom:
        return cls(int(offset), os.SEEK_END)

    @classmethod
    def current(cls, offset: int = 0) -> SeekFrom:
        return cls(int(offset), os.SEEK_CUR)

    @classmethod
    def coerce(cls, position: SeekFrom | int, whence: int = os.SEEK_SET) -> SeekFrom:
        if isinstance(position, SeekFrom):
            return position
        if isinstance(position, bool) or not isinstance(position, int):
            raise TypeError(f"seek position must be an int or SeekFrom, not {type(position).__name__}")
        return cls(position, whence)

    def __repr__(self) -> str:
        return f"SeekFrom.{_WHENCE_NAMES[self.whence]}({self.offset})"


@dataclass(frozen=True, slots=True)
class Request:
    op: Op
    carrier: BufferCarrier | None = None
    position: SeekFrom | None = None

    def __post_init__(self) -> None:
        if self.op in (Op.READ, Op.WRITE) and self.carrier is None:
            raise ValueError(f"{self.op.value} request requires a buffer carrier")
        if self.op is Op.READ and self.carrier is not None and not self.carrier.writable:
            raise ValueError("read request requires a writable carrier")
        if self.op is Op.SEEK and self.position is None:
            raise ValueError("seek request requires a position")

    @classmethod
    def read(cls, carrier: BufferCarrier) -> Request:
        return cls(Op.READ, carrier=carrier)

    @classmethod
    def write(cls, carrier: BufferCarrier) -> Request:
        return cls(Op.WRITE, carrier=carrier)

    @classmethod
    def flush(cls) -> Request:
        return cls(Op.FLUSH)

    @classmethod
    def seek(cls, position: SeekFrom) -> Request:
        return cls(Op.SEEK, position=position)

    def __repr__(self) -> str:
        # バッファの中身は表示しない
        if self.op is Op.SEEK:
            return f"Request(seek, {self.position!r})"
        return f"Request({self.op.value})"


@dataclass(frozen=True, slots=True)
class Response:
    """Outcome of one request: ``value`` on success, ``error`` otherwise."""

    op: Op
    value: Any = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.value


__all__ = ["Op", "SeekFrom", "Request", "Response"]
