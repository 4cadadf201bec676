"""Java launcher for the engine jar.

Two launch forms:
- default: `java [JAVA_OPTS] -jar <engine.jar>`
- classpath override (custom generator plugin):
  `java [JAVA_OPTS] -cp <engine.jar><sep><custom.jar> org.openapitools.codegen.OpenAPIGenerator`
"""

from __future__ import annotations

import shlex
import sys
from pathlib import Path

from core.config import AppSettings


ENTRY_CLASS = "org.openapitools.codegen.OpenAPIGenerator"


def is_windows() -> bool:
    return sys.platform.startswith("win")


def classpath_separator() -> str:
    return ";" if is_windows() else ":"


def java_binary(settings: AppSettings) -> str:
    """`$JAVA_HOME/bin/java` when JAVA_HOME is set, otherwise `java` from PATH."""

    if settings.java_home:
        return f"{settings.java_home}/bin/java"
    return "java"


def java_launch_args(settings: AppSettings, jar_path: Path, custom_jar: str | None = None) -> list[str]:
    """Argument vector (no shell) for passthrough and introspection."""

    args = [java_binary(settings)]
    if settings.java_opts:
        args.extend(shlex.split(settings.java_opts, posix=not is_windows()))
    if custom_jar:
        args.extend(["-cp", f"{jar_path}{classpath_separator()}{custom_jar}", ENTRY_CLASS])
    else:
        args.extend(["-jar", str(jar_path)])
    return args


def java_launch_line(settings: AppSettings, jar_path: Path, custom_jar: str | None = None) -> str:
    """Shell form used for batch invocations; JAVA_OPTS is inserted verbatim."""

    binary = java_binary(settings)
    if settings.java_home and is_windows():
        binary = f'"{binary}"'

    if custom_jar:
        target = f'-cp "{jar_path}{classpath_separator()}{custom_jar}" {ENTRY_CLASS}'
    else:
        target = f'-jar "{jar_path}"'

    parts = [binary, settings.java_opts, target]
    return " ".join(part for part in parts if part)
