"""設定ファイルの読み込みユーティリティ。"""
from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from dataclasses import replace
from pathlib import Path
from typing import cast

from pydantic import ValidationError
import yaml

from .config import BridgeConfig
from .errors import ConfigError
from .schema import BridgeConfigModel

__all__ = ["load_bridge_config", "parse_bridge_config"]


def _format_validation_error(source: str, exc: ValidationError) -> str:
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part is not None)
        message = error.get("msg", "未知のエラー")
        if location:
            details.append(f"{location}: {message}")
        else:
            details.append(message)
    summary = "; ".join(details)
    return f"設定の検証に失敗しました ({source}): {summary}"


def _load_yaml(path: Path) -> MutableMapping[str, object]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"設定ファイルを読み込めません: {path}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"YAML の解析に失敗しました: {path}") from exc
    if data is None:
        return {}
    if not isinstance(data, MutableMapping):
        raise ConfigError(f"YAML の内容が辞書ではありません: {path}")
    return cast(MutableMapping[str, object], data)


def parse_bridge_config(data: Mapping[str, object], *, source: str = "<mapping>") -> BridgeConfig:
    """Validate ``data`` against the schema and build a :class:`BridgeConfig`."""

    payload = dict(data)
    # ネストした ``bridge:`` セクションも受け付ける
    section = payload.get("bridge")
    if isinstance(section, Mapping) and len(payload) == 1:
        payload = dict(section)
    try:
        model = BridgeConfigModel.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(_format_validation_error(source, exc)) from exc
    config = BridgeConfig.from_model(model)
    if config.event_log_path is not None and source != "<mapping>":
        if not config.event_log_path.is_absolute():
            base = Path(source).resolve().parent
            config = replace(config, event_log_path=base / config.event_log_path)
    return config


def load_bridge_config(path: str | Path) -> BridgeConfig:
    """Load a YAML bridge configuration file."""

    path = Path(path)
    return parse_bridge_config(_load_yaml(path), source=str(path))
