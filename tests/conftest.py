from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from rich.console import Console

from adapters.npmrc import NpmrcReader
from core.config import AppSettings
from core.config_store import ConfigStore
from core.context import AppContext


class FakeBackend:
    """In-memory engine backend: records downloads, never touches disk or network."""

    def __init__(self, installed: set[str] | None = None, fail: bool = False) -> None:
        self.installed = set(installed or ())
        self.fail = fail
        self.downloads: list[str] = []

    def is_installed(self, version: str) -> bool:
        return version in self.installed

    async def download(self, version: str) -> None:
        self.downloads.append(version)
        if self.fail:
            raise RuntimeError("connection reset")
        self.installed.add(version)

    def remove(self, version: str) -> None:
        self.installed.discard(version)

    def invocation_prefix(self, version: str, custom_jar: str | None = None) -> list[str]:
        return ["java", "-jar", f"/store/{version}.jar"]


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(_env_file=None, java_home=None, java_opts=None, search_url=None)


@pytest.fixture
def console() -> Console:
    return Console(record=True, width=400, color_system=None, force_terminal=False)


@pytest.fixture
def environ() -> dict[str, str]:
    return {}


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    return tmp_path / "openapitools.json"


@pytest.fixture
def write_config(config_file: Path):
    def write(data: dict[str, Any]) -> Path:
        config_file.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return config_file

    return write


@pytest.fixture
def context(tmp_path: Path, settings: AppSettings, console: Console, environ: dict[str, str], config_file: Path) -> AppContext:
    return AppContext(
        cwd=tmp_path,
        settings=settings,
        config=ConfigStore(config_file, console=console, environ=environ),
        console=console,
        npmrc=NpmrcReader(cwd=tmp_path, home=tmp_path / "home"),
    )


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def make_backend():
    return FakeBackend
