from collections.abc import Iterator
from pathlib import Path

import pytest

from steadfast.core.config import ConfigManager
from steadfast.errors.handler import ErrorHandler
from steadfast.util.log import Log, LogFormat, LogLevel
from tests.helpers import CapturingLogger


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def error_logger() -> CapturingLogger:
    return CapturingLogger()


@pytest.fixture(autouse=True)
def error_handler(error_logger: CapturingLogger) -> Iterator[ErrorHandler]:
    handler = ErrorHandler(error_logger)
    token = ErrorHandler.provide(handler)
    try:
        yield handler
    finally:
        ErrorHandler.restore(token)


@pytest.fixture(autouse=True)
def config_context(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    monkeypatch.setenv("STEADFAST_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setenv("STEADFAST_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("STEADFAST_CONFIG_CONTENT", raising=False)
    token = ConfigManager.provide(ConfigManager())
    try:
        yield
    finally:
        ConfigManager.restore(token)


@pytest.fixture(autouse=True)
def _log_teardown() -> Iterator[None]:
    yield
    Log.configure(level=LogLevel.INFO, format=LogFormat.KV, console=False, file=False)
