"""`.npmrc` credentials.

Some teams mirror Maven Central behind the same server as their npm registry;
the token configured for npm is then valid for artifact downloads too.

Lookup order:
1) ./.npmrc (cwd)
2) ~/.npmrc
"""

from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import urlsplit


def _base_url(url: str) -> tuple[str, str, int] | None:
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return None
    if not parts.scheme or not parts.hostname:
        return None
    if port is None:
        port = 443 if parts.scheme == "https" else 80
    return parts.scheme, parts.hostname, port


class NpmrcReader:
    def __init__(self, cwd: Path | None = None, home: Path | None = None) -> None:
        self._cwd = cwd
        self._home = home
        self._lines: list[str] | None = None

    def auth_token(self, url: str) -> str | None:
        target = _base_url(url)
        if target is None:
            return None

        for key, value in self._entries():
            # Only `//host[:port]/:_authToken=...` lines carry tokens.
            if not key.endswith("/:_authToken"):
                continue
            registry = key.removesuffix("/:_authToken")
            if not registry.startswith(("http://", "https://")):
                registry = f"https:{registry}"
            if _base_url(registry) == target:
                return value
        return None

    def strict_ssl(self) -> bool:
        for key, value in self._entries():
            if key == "strict-ssl":
                return value != "false"
        return True

    def _entries(self) -> list[tuple[str, str]]:
        entries: list[tuple[str, str]] = []
        for line in self._read_lines():
            if "=" not in line:
                continue
            key, value = line.split("=", 1)
            entries.append((key.strip(), value.strip()))
        return entries

    def _read_lines(self) -> list[str]:
        if self._lines is None:
            text = self._read() or ""
            self._lines = [
                line for line in text.splitlines() if line.strip() and not line.strip().startswith(("#", ";"))
            ]
        return self._lines

    def _read(self) -> str | None:
        cwd = self._cwd or Path.cwd()
        home = self._home or Path(os.environ.get("HOME") or os.environ.get("USERPROFILE") or Path.home())
        for candidate in (cwd / ".npmrc", home / ".npmrc"):
            try:
                if candidate.is_file():
                    return candidate.read_text(encoding="utf-8")
            except OSError:
                return None
        return None
