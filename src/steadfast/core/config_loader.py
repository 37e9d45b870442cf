"""Config file loading: JSONC parsing, env substitution and deep merge."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict

import commentjson

from ..util.log import Log

log = Log.create({"service": "config.loader"})

_ENV_PATTERN = re.compile(r"\{env:([^}]+)\}")


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``override`` into a copy of ``base``; nested dicts merge recursively."""
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def substitute_env_vars(text: str) -> str:
    """Replace ``{env:VAR}`` patterns with environment variable values."""
    return _ENV_PATTERN.sub(lambda match: os.environ.get(match.group(1), ""), text)


def load_json_file(filepath: str) -> Dict[str, Any]:
    """Load a JSON or JSONC file, returning ``{}`` on any I/O or parse error."""
    path = Path(filepath)
    if not path.exists():
        return {}

    try:
        data = commentjson.loads(substitute_env_vars(path.read_text(encoding="utf-8")))
    except (OSError, ValueError, commentjson.JSONLibraryException) as e:
        log.error("failed to load config file", {"path": filepath, "error": str(e)})
        return {}
    if not isinstance(data, dict):
        log.error("config file is not an object", {"path": filepath})
        return {}
    return data
