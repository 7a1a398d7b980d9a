"""Capability flags and the resource/facade surfaces they imply."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Flag
from typing import Any, Protocol, runtime_checkable

from .protocol import Op, SeekFrom


class Capability(Flag):
    NONE = 0
    READ = 1
    WRITE = 2
    SEEK = 4

    @classmethod
    def of(cls, items: Iterable[Capability | str]) -> Capability:
        result = cls.NONE
        for item in items:
            if isinstance(item, str):
                item = cls[item.strip().upper()]
            result |= item
        return result

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(cap.name.lower() for cap in _ORDER if cap in self and cap.name)

    @property
    def ops(self) -> frozenset[Op]:
        ops: set[Op] = set()
        for cap in _ORDER:
            if cap in self:
                ops.update(_CAPABILITY_OPS[cap])
        return frozenset(ops)


_ORDER = (Capability.READ, Capability.WRITE, Capability.SEEK)

_CAPABILITY_OPS: dict[Capability, tuple[Op, ...]] = {
    Capability.READ: (Op.READ,),
    Capability.WRITE: (Op.WRITE, Op.FLUSH),
    Capability.SEEK: (Op.SEEK,),
}

# いずれか 1 つを満たせばよい属性の組
_REQUIRED_METHODS: dict[Capability, tuple[tuple[str, ...], ...]] = {
    Capability.READ: (("readinto", "read"),),
    Capability.WRITE: (("write",), ("flush",)),
    Capability.SEEK: (("seek",),),
}


def missing_primitives(resource: Any, capability: Capability) -> list[str]:
    """Return the primitive names ``resource`` lacks for ``capability``."""

    missing: list[str] = []
    for alternatives in _REQUIRED_METHODS[capability]:
        if not any(callable(getattr(resource, name, None)) for name in alternatives):
            missing.append(" or ".join(alternatives))
    return missing


@runtime_checkable
class AsyncReadable(Protocol):
    async def read(self, size: int = -1, /) -> bytes: ...


@runtime_checkable
class AsyncWritable(Protocol):
    async def write(self, data: Any, /) -> int | None: ...

    async def flush(self) -> None: ...


@runtime_checkable
class AsyncSeekable(Protocol):
    async def seek(self, offset: int, whence: int = 0, /) -> int: ...


@runtime_checkable
class SyncReader(Protocol):
    """Blocking read surface of a facade built with ``enable_read``."""

    def readinto(self, buffer: Any, /) -> int: ...

    def read(self, size: int = -1, /) -> bytes: ...

    def read_exact(self, size: int, /) -> bytes: ...

    def read_to_end(self) -> bytes: ...


@runtime_checkable
class SyncWriter(Protocol):
    """Blocking write surface of a facade built with ``enable_write``."""

    def write(self, data: Any, /) -> int: ...

    def write_all(self, data: Any, /) -> None: ...

    def flush(self) -> None: ...


@runtime_checkable
class SyncSeeker(Protocol):
    """Blocking seek surface of a facade built with ``enable_seek``."""

    def seek(self, position: SeekFrom | int, whence: int = 0, /) -> int: ...

    def tell(self) -> int: ...


__all__ = [
    "Capability",
    "missing_primitives",
    "AsyncReadable",
    "AsyncWritable",
    "AsyncSeekable",
    "SyncReader",
    "SyncWriter",
    "SyncSeeker",
]
