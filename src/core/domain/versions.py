"""Version tag derivation.

Tags are a pure function of the version string, so the catalog can rebuild
them at any time (network result or bundled list) and always get the same set.
"""

from __future__ import annotations

import re
from typing import Iterable, Sequence

from core.domain.models import Version


STABLE_TAG = "stable"
LATEST_TAG = "latest"

_STABLE_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")
_QUALIFIED_RE = re.compile(r"^(\d+\.\d+\.\d+)-(([a-z]+)\d?)$")


def derive_tags(version: str) -> list[str]:
    """Tags for a version string, in a stable order without duplicates.

    - `7.15.0` -> `['7.15.0', 'stable']`
    - `7.0.0-beta2` -> `['7.0.0-beta2', '7.0.0', 'beta2', 'beta']`
    """

    tags = [version]
    if _STABLE_RE.match(version):
        tags.append(STABLE_TAG)
        return tags

    match = _QUALIFIED_RE.match(version)
    if match:
        for tag in (match.group(1), match.group(2), match.group(3)):
            if tag not in tags:
                tags.append(tag)
    return tags


def version_key(value: str) -> tuple[int, int, int]:
    match = _STABLE_RE.match(value)
    if not match:
        return (-1, -1, -1)
    return (int(match.group(1)), int(match.group(2)), int(match.group(3)))


def mark_latest(versions: Sequence[Version]) -> None:
    """Give the highest stable version the `latest` tag (and nobody else)."""

    for version in versions:
        if LATEST_TAG in version.tags:
            version.tags = [tag for tag in version.tags if tag != LATEST_TAG]

    stable = [version for version in versions if STABLE_TAG in version.tags]
    if not stable:
        return
    newest = max(stable, key=lambda version: version_key(version.version))
    newest.tags.append(LATEST_TAG)


def matches_tags(version: Version, tags: Iterable[str]) -> bool:
    """Every requested tag must prefix-match at least one derived tag (`4.2` matches `4.2.0`)."""

    return all(any(own.startswith(tag) for own in version.tags) for tag in tags)


def filter_by_tags(versions: Sequence[Version], tags: Sequence[str]) -> list[Version]:
    if not tags:
        return list(versions)
    return [version for version in versions if matches_tags(version, tags)]
