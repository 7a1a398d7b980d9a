"""Scheduling helpers: run the executor as a task and the facade on a thread."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import logging
from typing import Any, TypeVar

from .builder import BridgeBuilder
from .capabilities import Capability
from .config import BridgeConfig
from .executor import BridgeExecutor
from .facade import SyncBridge
from .observability import EventLogger

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def spawn_executor(executor: BridgeExecutor, *, name: str | None = None) -> asyncio.Task[int]:
    """Schedule ``executor`` on the running loop."""

    return asyncio.get_running_loop().create_task(executor.run(), name=name or "aio-bridge-executor")


async def run_blocking(
    executor: BridgeExecutor,
    facade: SyncBridge,
    func: Callable[..., T],
    *args: Any,
) -> T:
    """Run ``func(facade, *args)`` on a worker thread while ``executor`` serves it.

    ファサードは ``func`` の終了後に必ず閉じられ、executor の終了を待って
    から結果を返す。``func`` が成功して executor が失敗した場合は executor
    側の例外を送出する。
    """

    task = spawn_executor(executor)

    def _invoke() -> T:
        try:
            return func(facade, *args)
        finally:
            facade.close()

    try:
        result = await asyncio.to_thread(_invoke)
    except BaseException:
        facade.close()
        # executor は残りのリクエストを処理して自然に終了する
        await asyncio.wait({task})
        if not task.cancelled() and task.exception() is not None:
            LOGGER.warning("bridge executor failed: %r", task.exception())
        raise
    await task
    return result


async def bridge(
    resource: Any,
    func: Callable[..., T],
    *args: Any,
    read: bool = False,
    write: bool = False,
    seek: bool = False,
    config: BridgeConfig | None = None,
    event_logger: EventLogger | None = None,
) -> T:
    """Build a bridge around ``resource`` and run ``func`` against its facade."""

    builder: BridgeBuilder[Any] = BridgeBuilder(resource, config=config, event_logger=event_logger)
    flags = (
        (read, Capability.READ),
        (write, Capability.WRITE),
        (seek, Capability.SEEK),
    )
    builder.enable(*(capability for enabled, capability in flags if enabled))
    executor, facade = builder.finalize()
    return await run_blocking(executor, facade, func, *args)


__all__ = ["spawn_executor", "run_blocking", "bridge"]
