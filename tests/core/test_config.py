from __future__ import annotations

from pathlib import Path

import pytest

from steadfast.core.config import ConfigError, ConfigManager
from steadfast.core.config_loader import deep_merge, substitute_env_vars
from steadfast.errors import ErrorCategory


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.mark.anyio
async def test_defaults_without_sources(tmp_path: Path) -> None:
    config = await ConfigManager.load(str(tmp_path))

    assert config.logging is None
    assert config.retry.policies == {}
    assert config.messages == {}
    assert ConfigManager.sources() == []


@pytest.mark.anyio
async def test_global_jsonc_with_env_substitution(monkeypatch, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setenv("CRM_LOG_LEVEL", "debug")
    _write(
        tmp_path / "config" / "steadfast.jsonc",
        """
        {
          // comments are allowed
          "logging": {"level": "{env:CRM_LOG_LEVEL}", "devFile": true},
          "retry": {"policies": {"network": {"maxAttempts": 5}}}
        }
        """,
    )

    config = await ConfigManager.load(str(tmp_path / "work"))

    assert config.logging is not None
    assert config.logging.level == "debug"
    assert config.logging.dev_file is True
    assert config.retry.policies[ErrorCategory.NETWORK].max_attempts == 5
    assert config.retry.policies[ErrorCategory.NETWORK].eligible is None


@pytest.mark.anyio
async def test_project_files_override_global_and_nearest_wins(tmp_path: Path) -> None:
    _write(tmp_path / "config" / "steadfast.json", '{"messages": {"A": "global", "B": "global"}, "logLevel": "warn"}')
    _write(tmp_path / "repo" / "steadfast.json", '{"messages": {"B": "repo", "C": "repo"}}')
    _write(tmp_path / "repo" / "app" / "steadfast.json", '{"messages": {"C": "app"}}')

    config = await ConfigManager.load(str(tmp_path / "repo" / "app"))

    assert config.messages == {"A": "global", "B": "repo", "C": "app"}
    assert config.log_level == "warn"
    assert ConfigManager.sources()[-1] == str(tmp_path / "repo" / "app" / "steadfast.json")


@pytest.mark.anyio
async def test_env_content_has_highest_precedence(monkeypatch, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
    _write(tmp_path / "steadfast.json", '{"messages": {"A": "file"}}')
    monkeypatch.setenv("STEADFAST_CONFIG_CONTENT", '{"messages": {"A": "env"}}')

    config = await ConfigManager.load(str(tmp_path))

    assert config.messages == {"A": "env"}
    assert ConfigManager.sources()[-1] == "STEADFAST_CONFIG_CONTENT"


@pytest.mark.anyio
async def test_get_caches_until_reset(monkeypatch, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("STEADFAST_CONFIG_CONTENT", '{"messages": {"A": "one"}}')
    first = await ConfigManager.get()

    monkeypatch.setenv("STEADFAST_CONFIG_CONTENT", '{"messages": {"A": "two"}}')
    assert await ConfigManager.get() is first

    ConfigManager.reset()
    assert (await ConfigManager.get()).messages == {"A": "two"}


@pytest.mark.anyio
async def test_unknown_keys_raise_config_error(tmp_path: Path) -> None:
    _write(tmp_path / "steadfast.json", '{"retry": {"policies": {"network": {"retries": 3}}}}')

    with pytest.raises(ConfigError) as excinfo:
        await ConfigManager.load(str(tmp_path))

    assert excinfo.value.path == str(tmp_path / "steadfast.json")


@pytest.mark.anyio
async def test_unknown_category_and_negative_values_raise(monkeypatch, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setenv("STEADFAST_CONFIG_CONTENT", '{"retry": {"policies": {"payments": {}}}}')
    with pytest.raises(ConfigError):
        await ConfigManager.load(str(tmp_path))

    monkeypatch.setenv("STEADFAST_CONFIG_CONTENT", '{"retry": {"policies": {"server": {"maxAttempts": -1}}}}')
    with pytest.raises(ConfigError):
        await ConfigManager.load(str(tmp_path))


@pytest.mark.anyio
async def test_invalid_env_json_raises(monkeypatch, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setenv("STEADFAST_CONFIG_CONTENT", "{not json")

    with pytest.raises(ConfigError) as excinfo:
        await ConfigManager.load(str(tmp_path))

    assert excinfo.value.path == "STEADFAST_CONFIG_CONTENT"


@pytest.mark.anyio
async def test_blank_message_is_rejected(monkeypatch, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setenv("STEADFAST_CONFIG_CONTENT", '{"messages": {"OFFLINE": "  "}}')

    with pytest.raises(ConfigError):
        await ConfigManager.load(str(tmp_path))


@pytest.mark.anyio
async def test_malformed_file_is_skipped(tmp_path: Path) -> None:
    _write(tmp_path / "steadfast.json", "{broken")

    config = await ConfigManager.load(str(tmp_path))

    assert config.messages == {}


def test_deep_merge_and_env_substitution(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setenv("TENANT", "acme")
    monkeypatch.delenv("MISSING_VAR", raising=False)

    merged = deep_merge({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}, "c": 4})

    assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}
    assert substitute_env_vars("{env:TENANT}-{env:MISSING_VAR}") == "acme-"
