"""Executor loop: the single owner of the async resource."""

from __future__ import annotations

import asyncio
from collections.abc import Generator
import logging
from time import perf_counter
from typing import Any

from .channel import ChannelPair
from .dispatch import Dispatcher
from .errors import BridgeStateError
from .observability import EventLogger, emit_safely
from .protocol import Request, Response

LOGGER = logging.getLogger(__name__)


class BridgeExecutor:
    """Serve requests from the facade until its request channel closes.

    Must run as its own task on the loop that owns ``resource``
    (``asyncio.create_task(executor.run())``). Whatever way the loop exits,
    the response channel is closed so a blocked facade call fails instead of
    hanging.
    """

    def __init__(
        self,
        resource: Any,
        dispatcher: Dispatcher,
        channels: ChannelPair,
        *,
        event_logger: EventLogger | None = None,
        yield_every: int | None = None,
    ) -> None:
        self._resource = resource
        self._dispatcher = dispatcher
        self._channels = channels
        self._logger = event_logger
        self._yield_every = yield_every if yield_every and yield_every > 0 else None
        self._started = False
        self._served = 0

    @property
    def served(self) -> int:
        return self._served

    @property
    def started(self) -> bool:
        return self._started

    def __await__(self) -> Generator[Any, None, int]:
        return self.run().__await__()

    async def run(self) -> int:
        if self._started:
            raise BridgeStateError("bridge executor can only run once")
        self._started = True
        requests = self._channels.requests
        requests.bind(asyncio.get_running_loop())
        reason = "error"
        LOGGER.debug("bridge executor started (capabilities=%s)", self._dispatcher.enabled)
        try:
            while True:
                request = await requests.recv()
                if request is None:
                    reason = "closed"
                    break
                await self._serve(request)
                if self._yield_every is not None and self._served % self._yield_every == 0:
                    await asyncio.sleep(0)
        except asyncio.CancelledError:
            reason = "cancelled"
            raise
        finally:
            self._channels.responses.close()
            LOGGER.debug("bridge executor stopped: %s after %d requests", reason, self._served)
            emit_safely(
                self._logger,
                "bridge_executor_stopped",
                {"requests": self._served, "reason": reason},
            )
        return self._served

    async def _serve(self, request: Request) -> None:
        index = self._served
        start = perf_counter()
        response = await self._dispatcher.dispatch(request, self._resource)
        self._served += 1
        if response is None:
            return
        self._emit_request(index, response, start)
        self._channels.responses.send_nowait(response)

    def _emit_request(self, index: int, response: Response, start: float) -> None:
        if self._logger is None:
            return
        error = response.error
        record = {
            "index": index,
            "op": response.op.value,
            "status": "ok" if error is None else "error",
            "error_type": type(error).__name__ if error is not None else None,
            "latency_ms": int((perf_counter() - start) * 1000),
        }
        emit_safely(self._logger, "bridge_request", record)


__all__ = ["BridgeExecutor"]
