"""Builder composing the executor loop and the blocking facade."""

from __future__ import annotations

import logging
from typing import Any, Generic, TypeVar

from .capabilities import Capability, missing_primitives
from .channel import ChannelPair
from .config import BridgeConfig
from .dispatch import Dispatcher
from .errors import CapabilityError
from .executor import BridgeExecutor
from .facade import facade_class, SyncBridge
from .observability import CompositeLogger, EventLogger, JsonlLogger, StdLogger

LOGGER = logging.getLogger(__name__)

R = TypeVar("R")


class BridgeBuilder(Generic[R]):
    """Select capabilities for ``resource`` and build the bridge.

    ``finalize()`` returns ``(executor, facade)``. Spawn the executor on the
    loop that owns the resource before using the facade, and use the facade
    only from a separate blocking thread::

        executor, io = BridgeBuilder(resource).enable_read().enable_seek().finalize()
        task = asyncio.create_task(executor.run())
        data = await asyncio.to_thread(io.read_to_end)
    """

    def __init__(
        self,
        resource: R,
        *,
        config: BridgeConfig | None = None,
        event_logger: EventLogger | None = None,
    ) -> None:
        self._resource: R | None = resource
        self._config = config or BridgeConfig()
        self._logger = event_logger
        self._enabled: list[Capability] = []
        self._finalized = False

    @property
    def capabilities(self) -> Capability:
        result = Capability.NONE
        for capability in self._enabled:
            result |= capability
        return result

    def enable_read(self) -> BridgeBuilder[R]:
        return self._enable(Capability.READ)

    def enable_write(self) -> BridgeBuilder[R]:
        return self._enable(Capability.WRITE)

    def enable_seek(self) -> BridgeBuilder[R]:
        return self._enable(Capability.SEEK)

    def enable(self, *capabilities: Capability | str) -> BridgeBuilder[R]:
        for capability in capabilities:
            try:
                selected = Capability.of([capability])
            except KeyError as exc:
                raise CapabilityError(f"unknown capability: {capability!r}") from exc
            flags = [
                flag
                for flag in (Capability.READ, Capability.WRITE, Capability.SEEK)
                if flag in selected
            ]
            if not flags:
                raise CapabilityError(f"{capability!r} selects no capability")
            for flag in flags:
                self._enable(flag)
        return self

    def _enable(self, capability: Capability) -> BridgeBuilder[R]:
        self._ensure_open()
        name = capability.names[0]
        if capability in self._enabled:
            raise CapabilityError(f"{name} capability is already enabled")
        missing = missing_primitives(self._resource, capability)
        if missing:
            raise CapabilityError(
                f"resource {type(self._resource).__name__} cannot provide {name}: "
                f"missing {', '.join(missing)}"
            )
        self._enabled.append(capability)
        return self

    def _ensure_open(self) -> None:
        if self._finalized:
            raise CapabilityError("builder has already been finalized")

    def finalize(self) -> tuple[BridgeExecutor, SyncBridge]:
        """Consume the builder and create the channel pair, executor and facade."""

        self._ensure_open()
        if not self._enabled:
            raise CapabilityError("at least one capability must be enabled")
        self._finalized = True
        resource, self._resource = self._resource, None

        config = self._config
        logger = self._event_logger()

        channels = ChannelPair.create(config.capacity)
        executor = BridgeExecutor(
            resource,
            Dispatcher(self._enabled),
            channels,
            event_logger=logger,
            yield_every=config.yield_every,
        )
        facade = facade_class(self.capabilities)(
            channels,
            carrier_mode=config.carrier_mode,
            event_logger=logger,
        )
        LOGGER.debug(
            "bridge built for %s (capabilities=%s, capacity=%d, carrier=%s)",
            type(resource).__name__,
            ",".join(self.capabilities.names),
            config.capacity,
            config.carrier_mode.value,
        )
        return executor, facade

    def _event_logger(self) -> EventLogger | None:
        # 明示的なロガーに加え、設定で指定されたシンクへも送る
        sinks: list[EventLogger] = []
        if self._logger is not None:
            sinks.append(self._logger)
        if self._config.event_log_path is not None:
            sinks.append(JsonlLogger(self._config.event_log_path))
        if self._config.event_stdout:
            sinks.append(StdLogger())
        if not sinks:
            return None
        if len(sinks) == 1:
            return sinks[0]
        return CompositeLogger(sinks)

    build = finalize


def build_bridge(
    resource: Any,
    *capabilities: Capability | str,
    config: BridgeConfig | None = None,
    event_logger: EventLogger | None = None,
) -> tuple[BridgeExecutor, SyncBridge]:
    """Shorthand for ``BridgeBuilder(resource).enable(*capabilities).finalize()``."""

    builder: BridgeBuilder[Any] = BridgeBuilder(resource, config=config, event_logger=event_logger)
    return builder.enable(*capabilities).finalize()


__all__ = ["BridgeBuilder", "build_bridge"]
