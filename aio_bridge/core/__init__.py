"""aio_bridge.core パッケージの公開 API。"""

from .builder import BridgeBuilder, build_bridge  # noqa: F401
from .capabilities import (  # noqa: F401
    AsyncReadable,
    AsyncSeekable,
    AsyncWritable,
    Capability,
    SyncReader,
    SyncSeeker,
    SyncWriter,
)
from .carrier import BufferCarrier, CarrierMode  # noqa: F401
from .channel import ChannelPair, DEFAULT_CAPACITY, RequestChannel, ResponseChannel  # noqa: F401
from .config import BridgeConfig  # noqa: F401
from .dispatch import Dispatcher  # noqa: F401
from .errors import (  # noqa: F401
    BridgeBrokenError,
    BridgeError,
    BridgeStateError,
    CapabilityError,
    CarrierError,
    ConcurrentRequestError,
    ConfigError,
    ExecutorClosedError,
    FatalError,
    IncompleteReadError,
    ProtocolViolation,
    RequestQueueFullError,
    ResponseMismatchError,
    WriteZeroError,
)
from .executor import BridgeExecutor  # noqa: F401
from .facade import facade_class, SyncBridge  # noqa: F401
from .loader import load_bridge_config, parse_bridge_config  # noqa: F401
from .observability import CompositeLogger, EventLogger, JsonlLogger, StdLogger  # noqa: F401
from .protocol import Op, Request, Response, SeekFrom  # noqa: F401
from .resources import AsyncBytesIO  # noqa: F401
from .runtime import bridge, run_blocking, spawn_executor  # noqa: F401

__all__ = [
    "BridgeBuilder",
    "build_bridge",
    "Capability",
    "AsyncReadable",
    "AsyncWritable",
    "AsyncSeekable",
    "SyncReader",
    "SyncWriter",
    "SyncSeeker",
    "BufferCarrier",
    "CarrierMode",
    "ChannelPair",
    "DEFAULT_CAPACITY",
    "RequestChannel",
    "ResponseChannel",
    "BridgeConfig",
    "Dispatcher",
    "BridgeError",
    "FatalError",
    "ProtocolViolation",
    "RequestQueueFullError",
    "ConcurrentRequestError",
    "ExecutorClosedError",
    "ResponseMismatchError",
    "BridgeBrokenError",
    "ConfigError",
    "CapabilityError",
    "BridgeStateError",
    "CarrierError",
    "IncompleteReadError",
    "WriteZeroError",
    "BridgeExecutor",
    "SyncBridge",
    "facade_class",
    "load_bridge_config",
    "parse_bridge_config",
    "EventLogger",
    "JsonlLogger",
    "StdLogger",
    "CompositeLogger",
    "Op",
    "Request",
    "Response",
    "SeekFrom",
    "AsyncBytesIO",
    "bridge",
    "run_blocking",
    "spawn_executor",
]
