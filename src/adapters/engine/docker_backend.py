"""Engine as a Docker image (`<image>:v<version>`).

The working directory is mounted at `/local`, so specs and outputs must be
referenced relative to it (`/local/...`) when running through Docker.
"""

from __future__ import annotations

import asyncio
import os
import subprocess
from pathlib import Path

from core.errors import GeneratorCliError


class DockerBackend:
    def __init__(self, *, cwd: Path, image_name: str, docker: str = "docker") -> None:
        self._cwd = cwd
        self._image_name = image_name
        self._docker = docker

    def image_ref(self, version: str) -> str:
        return f"{self._image_name}:v{version}"

    def is_installed(self, version: str) -> bool:
        try:
            completed = subprocess.run(
                [self._docker, "image", "inspect", self.image_ref(version)],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError:
            return False
        return completed.returncode == 0

    async def download(self, version: str) -> None:
        process = await asyncio.create_subprocess_exec(self._docker, "pull", self.image_ref(version))
        exit_code = await process.wait()
        if exit_code != 0:
            raise GeneratorCliError(f"docker pull exited with code {exit_code}")

    def remove(self, version: str) -> None:
        try:
            subprocess.run([self._docker, "rmi", self.image_ref(version)], check=False)
        except OSError:
            # No docker binary means there is no image to remove either.
            return

    def invocation_prefix(self, version: str, custom_jar: str | None = None) -> list[str]:
        args = [self._docker, "run", "--rm"]
        if hasattr(os, "getuid"):
            args.extend(["--user", f"{os.getuid()}:{os.getgid()}"])
        args.extend(["-v", f"{self._cwd}:/local", self.image_ref(version)])
        return args
