"""Normalized exception hierarchy for the bridge core."""

from __future__ import annotations

from typing import Any


class BridgeError(Exception):
    """Base class for bridge-originated errors."""


class FatalError(BridgeError):
    """Base class for unrecoverable errors."""


class ProtocolViolation(FatalError):
    """Raised when the request/response contract between both sides is broken."""

    def __init__(self, message: str, *, op: Any | None = None) -> None:
        super().__init__(message)
        self.op = op


class RequestQueueFullError(ProtocolViolation):
    """Raised when the request queue has no free slot."""


class ConcurrentRequestError(ProtocolViolation):
    """Raised when a request is issued while another one is still in flight."""


class ExecutorClosedError(ProtocolViolation):
    """Raised when the executor side stopped before answering."""


class ResponseMismatchError(ProtocolViolation):
    """Raised when the received response does not belong to the issued request."""

    def __init__(self, message: str, *, op: Any | None = None, received: Any | None = None) -> None:
        super().__init__(message, op=op)
        self.received = received


class BridgeBrokenError(ProtocolViolation):
    """Raised for every call after a protocol violation poisoned the facade."""


class ConfigError(FatalError):
    """Raised when bridge configuration is invalid."""


class CapabilityError(ConfigError):
    """Raised when a capability composition is invalid."""


class BridgeStateError(FatalError):
    """Raised when the bridge lifecycle is misused."""


class CarrierError(BridgeError):
    """Raised when a buffer carrier is used outside its single-use contract."""


class IncompleteReadError(OSError):
    """Raised when end of stream is reached before the buffer was filled."""

    def __init__(self, expected: int, partial: bytes) -> None:
        super().__init__(f"failed to fill whole buffer: {len(partial)} of {expected} bytes")
        self.expected = expected
        self.partial = partial


class WriteZeroError(OSError):
    """Raised when the resource accepted zero bytes during ``write_all``."""


__all__ = [
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
]
