"""Project configuration file (`openapitools.json`).

Responsibility:
- Read/write dotted keys such as `generator-cli.version`.
- Merge the file with built-in defaults.
- Replace `${NAME}` / `${env.NAME}` placeholders with environment variables on read.

The file is read on every access: generator specs and the selected version are
never cached across calls.
"""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any, Mapping

from rich.console import Console


DEFAULT_CONFIG_FILENAME = "openapitools.json"
DEFAULT_DOCKER_IMAGE = "openapitools/openapi-generator-cli"

_PLACEHOLDER_RE = re.compile(r"\$\{(.*?)\}")

_MISSING = object()

# Expanded later by the version catalog, not by the environment.
_REPOSITORY_TOKENS = frozenset({"groupId", "artifactId", "group.id", "artifact.id", "versionName"})


def resolve_config_path(cwd: Path, configured: str | None) -> Path:
    if not configured:
        return cwd / DEFAULT_CONFIG_FILENAME
    path = Path(configured)
    return path if path.is_absolute() else (cwd / path).resolve()


def _default_config() -> dict[str, Any]:
    return {
        "$schema": "./node_modules/@openapitools/openapi-generator-cli/config.schema.json",
        "spaces": 2,
        "generator-cli": {"version": None},
    }


def _deep_merge(target: dict[str, Any], source: Mapping[str, Any]) -> dict[str, Any]:
    result = dict(target)
    for key, value in source.items():
        if isinstance(value, Mapping):
            base = result.get(key)
            result[key] = _deep_merge(base if isinstance(base, dict) else {}, value)
        else:
            result[key] = value
    return result


class ConfigStore:
    """Dotted-path access to the JSON settings file."""

    def __init__(self, path: Path, *, console: Console | None = None, environ: Mapping[str, str] | None = None) -> None:
        self.path = path
        self._console = console or Console(stderr=True)
        self._environ = environ if environ is not None else os.environ

    def get(self, key: str, default: Any = None) -> Any:
        value = self._lookup(self.read(), key)
        if value is _MISSING or value is None:
            return default
        return value

    def has(self, key: str) -> bool:
        return self._lookup(self.read(), key) is not _MISSING

    def set(self, key: str, value: Any) -> "ConfigStore":
        data = self._read_raw()
        node = data
        *parents, leaf = key.split(".")
        for part in parents:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[leaf] = value
        self._write(data)
        return self

    def read(self) -> dict[str, Any]:
        return self._substitute(self._read_raw())

    @property
    def use_docker(self) -> bool:
        return bool(self.get("generator-cli.useDocker", False))

    @property
    def docker_image_name(self) -> str:
        return str(self.get("generator-cli.dockerImageName", DEFAULT_DOCKER_IMAGE))

    @property
    def storage_dir(self) -> str | None:
        value = self.get("generator-cli.storageDir")
        return str(value) if value else None

    def _read_raw(self) -> dict[str, Any]:
        if not self.path.exists():
            self._write(_default_config())
        try:
            loaded = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError):
            loaded = {}
        if not isinstance(loaded, dict):
            loaded = {}
        return _deep_merge(_default_config(), loaded)

    def _write(self, data: dict[str, Any]) -> None:
        spaces = data.get("spaces")
        indent = spaces if isinstance(spaces, int) and spaces > 0 else 2
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=indent) + "\n", encoding="utf-8")

    @staticmethod
    def _lookup(data: Any, key: str) -> Any:
        node = data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return _MISSING
            node = node[part]
        return node

    def _substitute(self, value: Any) -> Any:
        if isinstance(value, str):
            return _PLACEHOLDER_RE.sub(self._replace_placeholder, value)
        if isinstance(value, list):
            return [self._substitute(item) for item in value]
        if isinstance(value, dict):
            return {key: self._substitute(item) for key, item in value.items()}
        return value

    def _replace_placeholder(self, match: re.Match[str]) -> str:
        key = match.group(1)
        if key in _REPOSITORY_TOKENS:
            return match.group(0)
        env_key = key[len("env."):] if key.startswith("env.") else key
        env_value = self._environ.get(env_key)
        if env_value is None:
            self._console.print(f"[red]Environment variable for placeholder '{env_key}' not found.[/red]")
            return match.group(0)
        return env_value
