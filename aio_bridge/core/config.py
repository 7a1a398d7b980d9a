from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from .carrier import CarrierMode
from .channel import DEFAULT_CAPACITY
from .errors import ConfigError

if TYPE_CHECKING:  # pragma: no cover - 型補完用
    from .schema import BridgeConfigModel


@dataclass(frozen=True)
class BridgeConfig:
    """ブリッジの制御パラメータ."""

    capacity: int = DEFAULT_CAPACITY
    carrier_mode: CarrierMode | str = CarrierMode.COPY
    yield_every: int | None = None
    event_log_path: Path | None = None
    event_stdout: bool = False

    def __post_init__(self) -> None:
        capacity = self.capacity
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise ConfigError(f"capacity must be a positive integer, got {capacity!r}")
        try:
            mode = CarrierMode.parse(self.carrier_mode)
        except ValueError as exc:
            raise ConfigError(f"unknown carrier_mode: {self.carrier_mode!r}") from exc
        object.__setattr__(self, "carrier_mode", mode)
        if self.yield_every is not None and self.yield_every <= 0:
            raise ConfigError(f"yield_every must be positive when set, got {self.yield_every!r}")
        if self.event_log_path is not None:
            object.__setattr__(self, "event_log_path", Path(self.event_log_path).expanduser())

    @classmethod
    def from_model(cls, model: BridgeConfigModel) -> BridgeConfig:
        return cls(
            capacity=model.capacity,
            carrier_mode=model.carrier_mode,
            yield_every=model.yield_every,
            event_log_path=model.event_log_path,
            event_stdout=model.event_stdout,
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> BridgeConfig:
        """Validate ``data`` against the schema; see :func:`parse_bridge_config`."""

        from .loader import parse_bridge_config

        return parse_bridge_config(data)


__all__ = ["BridgeConfig"]
