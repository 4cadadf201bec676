"""Domain models (Pydantic v2).

Why Pydantic in the domain:
- Strict validation and self-describing fields (Field) without coupling the
  core to I/O libraries.
- `model_dump(mode="json", by_alias=True)` gives the `version-manager list --json` output for free.

These models describe *what* the wrapper manipulates, not *how* it is fetched.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class Version(BaseModel):
    """One published version of the wrapped engine."""

    # JSON output uses the camelCase names; code uses the field names.
    model_config = ConfigDict(populate_by_name=True)

    version: str = Field(
        ...,
        min_length=1,
        description="Version identifier as published in the repository (e.g. '7.15.0', '7.0.0-beta').",
    )
    tags: list[str] = Field(
        default_factory=list,
        alias="versionTags",
        description="Derived tags: the version itself, 'stable', qualifiers, 'latest'.",
    )
    release_date: datetime = Field(
        ...,
        alias="releaseDate",
        description="Publication timestamp reported by the repository.",
    )
    installed: bool = Field(
        default=False,
        description="Whether the artifact is available locally.",
    )
    download_link: str = Field(
        ...,
        alias="downloadLink",
        description="Artifact URL built from the download template.",
    )

    @property
    def is_stable(self) -> bool:
        return "stable" in self.tags


class DiscoveredCommand(BaseModel):
    """A command of the wrapped engine, discovered from its `help`/`completion` output."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    description: str = Field(default="")

    @property
    def hidden(self) -> bool:
        return not self.description


class Invocation(BaseModel):
    """A fully expanded engine command line for one spec file."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., description="'[<generator>] <spec path or url>'.")
    command_line: str = Field(..., description="Shell command line executed for this invocation.")


class InvocationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    invocation: Invocation
    exit_code: int

    @property
    def failed(self) -> bool:
        return self.exit_code != 0
