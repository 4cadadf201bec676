"""Engine as a jar file in the local store.

Downloads are staged: the artifact is streamed into a temporary directory
inside the store and renamed to `<storage>/<version>.jar` with `os.replace`
once complete. Staging and target share a filesystem, so the rename is atomic
and an interrupted transfer never leaves a truncated jar at the final path.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import Callable

from adapters.http_client import ClientFactory, build_async_client
from adapters.java import java_launch_args
from adapters.npmrc import NpmrcReader
from core.config import AppSettings


STAGING_PREFIX = ".download-"


class JarBackend:
    def __init__(
        self,
        *,
        settings: AppSettings,
        storage_dir: Path,
        download_link: Callable[[str], str],
        npmrc: NpmrcReader | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._settings = settings
        self.storage_dir = storage_dir
        self._download_link = download_link
        self._npmrc = npmrc
        self._client_factory = client_factory

    def path_for(self, version: str) -> Path:
        return self.storage_dir / f"{version}.jar"

    def is_installed(self, version: str) -> bool:
        return self.path_for(version).is_file()

    async def download(self, version: str) -> None:
        url = self._download_link(version)
        target = self.path_for(version)
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=self.storage_dir))
        try:
            partial_file = staging / f"{version}.jar"
            async with self._client(url) as client:
                async with client.stream("GET", url) as response:
                    response.raise_for_status()
                    with partial_file.open("wb") as fh:
                        async for chunk in response.aiter_bytes(chunk_size=1024 * 64):
                            fh.write(chunk)

            os.replace(partial_file, target)
        finally:
            shutil.rmtree(staging, ignore_errors=True)

    def remove(self, version: str) -> None:
        self.path_for(version).unlink(missing_ok=True)

    def invocation_prefix(self, version: str, custom_jar: str | None = None) -> list[str]:
        return java_launch_args(self._settings, self.path_for(version), custom_jar)

    def _client(self, url: str):
        if self._client_factory is not None:
            return self._client_factory()
        return build_async_client(self._settings, auth_url=url, npmrc=self._npmrc)
