"""Process-level settings.

Why here:
- Centralises environment variables (pydantic-settings) away from the CLI.
- Lets adapters (HTTP, java launcher) read the same contract.

The project configuration file (`openapitools.json`) is a different concern
and lives in `core.config_store`.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


SEARCH_URL_BYPASS = "DEFAULT"


def get_user_config_dir() -> Path:
    """Per-user data directory (cross-platform, no extra dependency)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "generator-cli"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "generator-cli"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "generator-cli"
    return Path.home() / ".config" / "generator-cli"


def get_default_storage_dir() -> Path:
    return get_user_config_dir() / "versions"


class AppSettings(BaseSettings):
    """Environment contract of the wrapper.

    Why pydantic-settings:
    - Typed validation at the edge (env vars) instead of scattered `os.environ`.
    - The java/network knobs the engine relies on keep their conventional
      names (`JAVA_HOME`, `JAVA_OPTS`) through aliases.
    """

    model_config = SettingsConfigDict(
        env_prefix="GENERATOR_CLI_",
        extra="ignore",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
    )

    http_timeout_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Timeout per request (seconds). Artifacts are large jars.",
    )
    user_agent: str = Field(
        default="generator-cli/0.1",
        min_length=1,
        description="User-Agent for repository requests.",
    )

    java_home: str | None = Field(
        default=None,
        validation_alias=AliasChoices("JAVA_HOME", "java_home"),
        description="Java installation used to launch the engine.",
    )
    java_opts: str | None = Field(
        default=None,
        validation_alias=AliasChoices("JAVA_OPTS", "java_opts"),
        description="Extra JVM arguments inserted into every engine invocation.",
    )
    search_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OPENAPI_GENERATOR_CLI_SEARCH_URL", "search_url"),
        description="Set to DEFAULT to skip the repository query and use the bundled versions.",
    )

    @property
    def skip_repository_query(self) -> bool:
        return (self.search_url or "").strip() == SEARCH_URL_BYPASS
