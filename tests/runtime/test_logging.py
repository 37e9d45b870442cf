from __future__ import annotations

from steadfast.core.config import Config, LoggingConfig
from steadfast.runtime.logging import bootstrap_logging
from steadfast.util.log import LogFormat, LogLevel


def _capture(monkeypatch, config: Config) -> dict[str, object]:  # type: ignore[no-untyped-def]
    async def fake_get(cls):
        return config

    seen: dict[str, object] = {}

    def fake_configure(cls, *, level, format, console, file, dev) -> None:
        seen.update(level=level, format=format, console=console, file=file, dev=dev)

    monkeypatch.setattr("steadfast.runtime.logging.ConfigManager.get", classmethod(fake_get))
    monkeypatch.setattr("steadfast.runtime.logging.Log.configure", classmethod(fake_configure))
    return seen


def test_bootstrap_logging_uses_mode_defaults(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    seen = _capture(monkeypatch, Config())

    cli = bootstrap_logging(mode="cli")
    assert cli.console is False
    assert cli.file is True
    assert cli.level is LogLevel.INFO
    assert cli.format is LogFormat.KV
    assert seen["console"] is False

    app = bootstrap_logging(mode="app")
    assert app.console is True
    assert seen["console"] is True
    assert seen["dev"] is False


def test_bootstrap_logging_prefers_logging_config(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    seen = _capture(
        monkeypatch,
        Config(
            log_level="warn",
            logging=LoggingConfig(level="debug", format="json", console=True, file=False, dev_file=True),
        ),
    )

    settings = bootstrap_logging(mode="cli")

    assert settings.level is LogLevel.DEBUG
    assert settings.format is LogFormat.JSON
    assert settings.console is True
    assert settings.file is False
    assert settings.dev_file is True
    assert seen["dev"] is True


def test_bootstrap_logging_arguments_win(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    seen = _capture(monkeypatch, Config(log_level="error", logging=LoggingConfig(format="json")))

    settings = bootstrap_logging(mode="app", level="critical", format="pretty", console=False)

    assert settings.level is LogLevel.CRITICAL
    assert settings.format is LogFormat.PRETTY
    assert settings.console is False
    assert seen["level"] is LogLevel.CRITICAL


def test_bootstrap_logging_falls_back_to_top_level_level(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    _capture(monkeypatch, Config(log_level="error"))

    assert bootstrap_logging(mode="cli").level is LogLevel.ERROR
