"""pytest グローバル設定: ルートパスの解決とブリッジ用フィクスチャ。"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from pathlib import Path
import sys

import pytest
import pytest_asyncio

_REPO_ROOT = Path(__file__).resolve().parent
if _REPO_ROOT.name == "tests":
    _REPO_ROOT = _REPO_ROOT.parent

_ROOT_STR = str(_REPO_ROOT)
if _ROOT_STR not in sys.path:
    sys.path.insert(0, _ROOT_STR)

from aio_bridge.core import (  # noqa: E402
    AsyncBytesIO,
    BridgeBuilder,
    BridgeConfig,
    BridgeExecutor,
    spawn_executor,
    SyncBridge,
)


def pytest_configure(config):  # pragma: no cover - pytest hook
    if config.pluginmanager.hasplugin("asyncio"):
        config.option.asyncio_default_fixture_loop_scope = "function"


BridgeFactory = Callable[..., tuple[BridgeExecutor, SyncBridge]]


@pytest.fixture()
def make_bridge() -> BridgeFactory:
    def _make(
        resource: object | None = None,
        *capabilities: str,
        config: BridgeConfig | None = None,
        event_logger: object | None = None,
    ) -> tuple[BridgeExecutor, SyncBridge]:
        target = AsyncBytesIO() if resource is None else resource
        builder = BridgeBuilder(target, config=config, event_logger=event_logger)  # type: ignore[arg-type]
        builder.enable(*(capabilities or ("read", "write", "seek")))
        return builder.finalize()

    return _make


@pytest_asyncio.fixture()
async def running_bridge(make_bridge: BridgeFactory) -> AsyncIterator[tuple[AsyncBytesIO, SyncBridge]]:
    resource = AsyncBytesIO()
    executor, facade = make_bridge(resource)
    task = spawn_executor(executor)
    try:
        yield resource, facade
    finally:
        facade.close()
        await task
