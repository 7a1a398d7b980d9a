from __future__ import annotations

from pathlib import Path

import pytest

from aio_bridge.core import (
    BridgeConfig,
    CarrierMode,
    ConfigError,
    FatalError,
    load_bridge_config,
    parse_bridge_config,
)


def test_defaults() -> None:
    config = BridgeConfig()

    assert config.capacity == 10
    assert config.carrier_mode is CarrierMode.COPY
    assert config.yield_every is None
    assert config.event_log_path is None
    assert config.event_stdout is False


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"capacity": 0}, "capacity"),
        ({"capacity": True}, "capacity"),
        ({"carrier_mode": "mmap"}, "carrier_mode"),
        ({"yield_every": 0}, "yield_every"),
    ],
)
def test_invalid_values_raise_config_error(kwargs: dict[str, object], message: str) -> None:
    with pytest.raises(ConfigError, match=message) as excinfo:
        BridgeConfig(**kwargs)  # type: ignore[arg-type]

    assert isinstance(excinfo.value, FatalError)


def test_carrier_mode_string_is_normalized() -> None:
    assert BridgeConfig(carrier_mode="zero-copy").carrier_mode is CarrierMode.SHARED
    assert BridgeConfig(carrier_mode="copy").carrier_mode is CarrierMode.COPY


def test_load_yaml_file(tmp_path: Path) -> None:
    path = tmp_path / "bridge.yaml"
    path.write_text(
        "schema_version: 1\ncapacity: 4\ncarrier_mode: copy\nyield_every: 16\n",
        encoding="utf-8",
    )

    config = load_bridge_config(path)

    assert config == BridgeConfig(capacity=4, carrier_mode=CarrierMode.COPY, yield_every=16)


def test_nested_bridge_section_and_relative_log_path(tmp_path: Path) -> None:
    path = tmp_path / "conf" / "bridge.yml"
    path.parent.mkdir()
    path.write_text("bridge:\n  event_log_path: logs/events.jsonl\n", encoding="utf-8")

    config = load_bridge_config(path)

    assert config.event_log_path == path.parent.resolve() / "logs" / "events.jsonl"


def test_empty_file_uses_defaults(tmp_path: Path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    assert load_bridge_config(path) == BridgeConfig()


def test_unknown_key_is_reported_with_location() -> None:
    with pytest.raises(ConfigError) as excinfo:
        parse_bridge_config({"capacity": 2, "buffer_size": 8}, source="inline")

    message = str(excinfo.value)
    assert "inline" in message
    assert "buffer_size" in message


def test_non_positive_capacity_is_rejected_by_schema() -> None:
    with pytest.raises(ConfigError, match="capacity"):
        parse_bridge_config({"capacity": 0})


@pytest.mark.parametrize("content", ["- a\n- b\n", "capacity: [\n"])
def test_malformed_yaml_raises_config_error(tmp_path: Path, content: str) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError, match=str(path.name)):
        load_bridge_config(path)


def test_missing_file_raises_config_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="missing.yaml") as excinfo:
        load_bridge_config(tmp_path / "missing.yaml")

    assert isinstance(excinfo.value.__cause__, OSError)


def test_from_mapping_validates_through_schema() -> None:
    assert BridgeConfig.from_mapping({"bridge": {"capacity": 3}}).capacity == 3
    with pytest.raises(ConfigError, match="carrier_mode"):
        BridgeConfig.from_mapping({"carrier_mode": "mmap"})


def test_event_stdout_flag_from_yaml(tmp_path: Path) -> None:
    path = tmp_path / "bridge.yaml"
    path.write_text("event_stdout: true\ncarrier_mode: shared\n", encoding="utf-8")

    config = load_bridge_config(path)

    assert config.event_stdout is True
    assert config.carrier_mode is CarrierMode.SHARED
