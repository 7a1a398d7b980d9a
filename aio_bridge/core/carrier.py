"""Cross-thread buffer handoff used by read/write requests.

ブロッキング側スレッドが所有するバッファを、コピーせずに executor タスクへ
渡すためのトークン。安全性は次の契約に依存する:

1. 1 つの未完了リクエストにつき有効な carrier はちょうど 1 つ。
2. 応答を受け取るまで発行側スレッドはブロックしており、メモリに触れない。
3. その間バッファの長さは固定される (``memoryview`` のエクスポート中は
   ``bytearray`` のリサイズが ``BufferError`` になる)。

既定の ``CarrierMode.COPY`` では 1 リクエストにつき 1 回余分にコピーする代わりに、
executor 側が呼び出し元のメモリを一切参照しない。リソースが渡されたバッファを
保持して後で使う場合 (flush まで溜める writer 等) も安全。
``CarrierMode.SHARED`` はコピーしないが、呼び出しの後にバッファを保持しない
リソースにだけ使うこと。
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from .errors import CarrierError


class CarrierMode(str, Enum):
    SHARED = "shared"
    COPY = "copy"

    @classmethod
    def parse(cls, value: CarrierMode | str) -> CarrierMode:
        if isinstance(value, CarrierMode):
            return value
        normalized = str(value).strip().lower().replace("-", "_")
        if normalized in {"zero_copy", "zerocopy"}:
            return cls.SHARED
        return cls(normalized)


def _byte_view(buffer: Any) -> memoryview:
    view = memoryview(buffer)
    if view.format != "B" or view.ndim != 1:
        view = view.cast("B")
    return view


class BufferCarrier:
    """Single-use handle on caller memory for exactly one request.

    ``take()`` で executor に渡したオブジェクトは ``complete()`` 後も解放しない。
    リソースが保持し続けても安全に参照できる (共有モードでは呼び出し元の
    メモリそのものなので、保持するリソースにはコピーモードを使うこと)。
    """

    __slots__ = ("_target", "_payload", "_nbytes", "_writable", "_mode", "_taken", "_completed")

    def __init__(
        self,
        target: memoryview | None,
        payload: Any,
        *,
        nbytes: int,
        writable: bool,
        mode: CarrierMode,
    ) -> None:
        self._target = target
        self._payload = payload
        self._nbytes = nbytes
        self._writable = writable
        self._mode = mode
        self._taken = False
        self._completed = False

    @classmethod
    def for_read(cls, buffer: Any, *, mode: CarrierMode = CarrierMode.COPY) -> BufferCarrier:
        """Wrap a writable read target."""

        target = _byte_view(buffer)
        if target.readonly:
            target.release()
            raise TypeError("read target must be a writable buffer")
        # 共有モードでも executor には別ビューを渡し、target だけを自前で解放する
        payload: Any = bytearray(target.nbytes) if mode is CarrierMode.COPY else target[:]
        return cls(target, payload, nbytes=target.nbytes, writable=True, mode=mode)

    @classmethod
    def for_write(cls, data: Any, *, mode: CarrierMode = CarrierMode.COPY) -> BufferCarrier:
        """Wrap a write source; copy mode hands the executor an owned ``bytes``."""

        target = _byte_view(data)
        nbytes = target.nbytes
        if mode is CarrierMode.COPY:
            payload = target.tobytes()
            target.release()
            return cls(None, payload, nbytes=nbytes, writable=False, mode=mode)
        return cls(target, target.toreadonly(), nbytes=nbytes, writable=False, mode=mode)

    @property
    def nbytes(self) -> int:
        return self._nbytes

    @property
    def writable(self) -> bool:
        return self._writable

    @property
    def mode(self) -> CarrierMode:
        return self._mode

    def take(self) -> Any:
        """Hand the payload buffer to the executor; allowed once per carrier."""

        if self._completed:
            raise CarrierError("carrier already completed")
        if self._taken:
            raise CarrierError("carrier view already taken")
        self._taken = True
        return self._payload

    def complete(self, count: int | None = None) -> None:
        """Finish the handoff and drop the carrier's own references.

        コピーモードの読み込みでは ``count`` バイトを呼び出し元へ書き戻す。
        """

        if self._completed:
            return
        self._completed = True
        payload, self._payload = self._payload, None
        target, self._target = self._target, None
        if target is None:
            return
        try:
            if self._mode is CarrierMode.COPY and self._writable and count:
                filled = max(0, min(int(count), self._nbytes))
                target[:filled] = payload[:filled]
        finally:
            target.release()

    def __repr__(self) -> str:
        kind = "read" if self._writable else "write"
        return f"BufferCarrier({kind}, nbytes={self.nbytes}, mode={self._mode.value})"


__all__ = ["BufferCarrier", "CarrierMode"]
