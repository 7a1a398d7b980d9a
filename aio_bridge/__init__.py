"""Blocking read/write/seek facade over asyncio I/O resources.

Never use the facade on the thread that runs the event loop driving its
executor, or both sides wait on each other forever.
"""

from .core import (
    AsyncBytesIO as AsyncBytesIO,
    bridge as bridge,
    BridgeBuilder as BridgeBuilder,
    BridgeConfig as BridgeConfig,
    BridgeError as BridgeError,
    BridgeExecutor as BridgeExecutor,
    Capability as Capability,
    CarrierMode as CarrierMode,
    ExecutorClosedError as ExecutorClosedError,
    FatalError as FatalError,
    load_bridge_config as load_bridge_config,
    ProtocolViolation as ProtocolViolation,
    run_blocking as run_blocking,
    SeekFrom as SeekFrom,
    spawn_executor as spawn_executor,
    SyncBridge as SyncBridge,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "AsyncBytesIO",
    "BridgeBuilder",
    "BridgeConfig",
    "BridgeError",
    "BridgeExecutor",
    "Capability",
    "CarrierMode",
    "ExecutorClosedError",
    "FatalError",
    "ProtocolViolation",
    "SeekFrom",
    "SyncBridge",
    "bridge",
    "load_bridge_config",
    "run_blocking",
    "spawn_executor",
]
