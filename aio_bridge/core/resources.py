"""In-memory asynchronous resource.

``io.BytesIO`` を async メソッドで包んだもの。ブリッジの参照実装としての
リソースであり、テストやサンプルで利用する。
"""

from __future__ import annotations

import asyncio
import io
import os
from typing import Any


class AsyncBytesIO:
    """Async read/write/flush/seek over an in-memory byte buffer."""

    def __init__(self, initial: bytes | bytearray | memoryview = b"", *, yield_to_loop: bool = True) -> None:
        self._buffer = io.BytesIO(bytes(initial))
        self._yield = yield_to_loop
        self.flushes = 0

    async def _checkpoint(self) -> None:
        if self._yield:
            await asyncio.sleep(0)

    async def readinto(self, buffer: Any) -> int:
        await self._checkpoint()
        return self._buffer.readinto(buffer)

    async def read(self, size: int = -1) -> bytes:
        await self._checkpoint()
        return self._buffer.read(size)

    async def write(self, data: Any) -> int:
        await self._checkpoint()
        return self._buffer.write(data)

    async def flush(self) -> None:
        await self._checkpoint()
        self.flushes += 1

    async def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        await self._checkpoint()
        return self._buffer.seek(offset, whence)

    def tell(self) -> int:
        return self._buffer.tell()

    def getvalue(self) -> bytes:
        return self._buffer.getvalue()

    def __repr__(self) -> str:
        return f"AsyncBytesIO(size={len(self._buffer.getvalue())}, pos={self._buffer.tell()})"


__all__ = ["AsyncBytesIO"]
