"""Engine backend contract.

Why Protocol:
- Structural contract (duck typing) without rigid inheritance.
- The jar and Docker backends are interchangeable and testable with plain
  fakes; one is picked at startup from `generator-cli.useDocker`.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class EngineBackend(Protocol):
    """Minimal contract for a place the engine can live in.

    Design rules:
    - `download` is asynchronous because it does network I/O; it raises on
      failure and the version store turns that into `False`.
    - `is_installed` is a local check (filesystem or `docker image inspect`).
    """

    def is_installed(self, version: str) -> bool:
        ...

    async def download(self, version: str) -> None:
        ...

    def remove(self, version: str) -> None:
        ...

    def invocation_prefix(self, version: str, custom_jar: str | None = None) -> list[str]:
        """Argument vector that runs the engine; the engine command is appended to it."""

        ...
