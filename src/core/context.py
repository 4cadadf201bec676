"""Application context.

Everything the services share (working directory, settings, configuration file,
console) is built once by the CLI and passed in explicitly. No service reads
ambient global state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console

from adapters.npmrc import NpmrcReader
from core.config import AppSettings
from core.config_store import ConfigStore, resolve_config_path


@dataclass
class AppContext:
    cwd: Path
    settings: AppSettings
    config: ConfigStore
    console: Console
    custom_generator: str | None = None
    npmrc: NpmrcReader = field(default_factory=NpmrcReader)


def build_context(
    *,
    cwd: Path | None = None,
    config_path: str | None = None,
    custom_generator: str | None = None,
    settings: AppSettings | None = None,
    console: Console | None = None,
) -> AppContext:
    cwd = (cwd or Path.cwd()).resolve()
    console = console or Console()
    return AppContext(
        cwd=cwd,
        settings=settings or AppSettings(),
        config=ConfigStore(resolve_config_path(cwd, config_path), console=console),
        console=console,
        custom_generator=custom_generator,
        npmrc=NpmrcReader(cwd=cwd),
    )
