"""Local store of engine versions.

Responsibilities:
- install status, download, removal (delegated to the engine backend),
- the selected version pointer (`generator-cli.version` in the config file).

Failures never escape `download`: they are printed and reported as `False`,
and the selection is only moved to a version that is actually available.
"""

from __future__ import annotations

import os
from pathlib import Path

from rich.markup import escape

from adapters.engine import DockerBackend, JarBackend
from adapters.http_client import describe_http_error
from core.config import get_default_storage_dir
from core.context import AppContext
from core.errors import GeneratorCliError
from core.interfaces.engine import EngineBackend
from core.services.version_catalog import build_download_link


SELECTED_VERSION_KEY = "generator-cli.version"


def resolve_storage_dir(cwd: Path, custom_dir: str | None) -> Path:
    """Custom dir relative to cwd (leading `~` expanded), else the per-user default."""

    if not custom_dir:
        return get_default_storage_dir()
    if custom_dir.startswith("~"):
        custom_dir = str(Path.home()) + custom_dir[1:]
    return Path(os.path.normpath(cwd / custom_dir))


def build_backend(context: AppContext) -> EngineBackend:
    """Pick the backend once, from `generator-cli.useDocker`."""

    config = context.config
    if config.use_docker:
        return DockerBackend(cwd=context.cwd, image_name=config.docker_image_name)
    return JarBackend(
        settings=context.settings,
        storage_dir=resolve_storage_dir(context.cwd, config.storage_dir),
        download_link=lambda version: build_download_link(config, version),
        npmrc=context.npmrc,
    )


class VersionStore:
    def __init__(self, context: AppContext, backend: EngineBackend | None = None) -> None:
        self._context = context
        self._console = context.console
        self.backend = backend or build_backend(context)
        self.storage_dir = resolve_storage_dir(context.cwd, context.config.storage_dir)

    @property
    def selected_version(self) -> str | None:
        value = self._context.config.get(SELECTED_VERSION_KEY)
        return str(value) if value else None

    def is_selected(self, version: str) -> bool:
        return version == self.selected_version

    def is_installed(self, version: str) -> bool:
        return self.backend.is_installed(version)

    async def download(self, version: str) -> bool:
        self._console.print(f"[yellow]Download {escape(version)} ...[/yellow]")
        try:
            await self.backend.download(version)
        except Exception as exc:
            self._console.print(f'[red]Download failed, because of: "{escape(describe_http_error(exc))}"[/red]')
            return False

        if self._context.config.storage_dir and not self._context.config.use_docker:
            self._console.print(
                f"[green]Downloaded {escape(version)} to custom storage location {escape(str(self.storage_dir))}[/green]"
            )
        else:
            self._console.print(f"[green]Downloaded {escape(version)}[/green]")
        return True

    async def download_if_needed(self, version: str) -> bool:
        if self.is_installed(version):
            return True
        return await self.download(version)

    async def select(self, version: str) -> bool:
        if not await self.download_if_needed(version):
            return False
        self._context.config.set(SELECTED_VERSION_KEY, version)
        self._console.print(f"[green]Did set selected version to {escape(version)}[/green]")
        return True

    def remove(self, version: str) -> None:
        self.backend.remove(version)
        self._console.print(f"[green]Removed {escape(version)}[/green]")

    def resolve_path(self, version: str | None = None) -> Path:
        """Where the jar for `version` (default: the selection) lives. No I/O."""

        return self.storage_dir / f"{self._version_or_selected(version)}.jar"

    def invocation_prefix(self, version: str | None = None, custom_jar: str | None = None) -> list[str]:
        return self.backend.invocation_prefix(self._version_or_selected(version), custom_jar)

    def _version_or_selected(self, version: str | None) -> str:
        resolved = version or self.selected_version
        if not resolved:
            raise GeneratorCliError(
                f"No generator version selected; run `version-manager set` or set '{SELECTED_VERSION_KEY}'"
            )
        return resolved
