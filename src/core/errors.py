"""Domain errors.

Recoverable failures (catalog query, download) never raise past the service
that owns them; these exceptions cover the cases the CLI has to stop on.
"""

from __future__ import annotations


class GeneratorCliError(Exception):
    """Base class for user-facing errors."""


class EngineIntrospectionError(GeneratorCliError):
    """The engine's `help` command failed, so no command surface can be built."""


class VersionNotFoundError(GeneratorCliError):
    """No published version matches the requested tags."""

    def __init__(self, tags: list[str]) -> None:
        self.tags = list(tags)
        super().__init__(f'Unable to find version matching criteria "{" ".join(self.tags)}"')
