"""設定ファイル検証用の Pydantic モデル。"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

__all__ = ["BridgeConfigModel"]


class BridgeConfigModel(BaseModel):
    """ブリッジ設定のスキーマ。"""

    model_config = ConfigDict(extra="forbid")

    schema_version: int | None = None
    capacity: int = Field(default=10, gt=0)
    carrier_mode: Literal["shared", "copy", "zero-copy", "zero_copy"] = "copy"
    yield_every: int | None = Field(default=None, gt=0)
    event_log_path: Path | None = None
    event_stdout: bool = False
