"""UI components for the CLI (Rich).

Why separate components:
- Keeps command logic apart from visual details.
- The version table is shared by `version-manager list` and any future picker.
"""

from __future__ import annotations

from typing import Sequence

from rich.markup import escape
from rich.table import Table

from core.domain.models import Version
from core.domain.versions import LATEST_TAG


def build_versions_table(versions: Sequence[Version], selected_version: str | None) -> Table:
    """Versions as a table: selection marker, release date, installed flag, tags."""

    table = Table(title="The following releases are available:")
    table.add_column("☐", no_wrap=True)
    table.add_column("releasedAt", style="dim", no_wrap=True)
    table.add_column("version", no_wrap=True)
    table.add_column("installed", no_wrap=True)
    table.add_column("versionTags")

    for version in versions:
        selected = version.version == selected_version
        name_style = "yellow" if version.is_stable else "bright_black"
        tags = " ".join(f"[green]{escape(tag)}[/green]" if tag == LATEST_TAG else escape(tag) for tag in version.tags)
        table.add_row(
            "☒" if selected else "☐",
            version.release_date.date().isoformat(),
            f"[{name_style}]{escape(version.version)}[/{name_style}]",
            "[green]yes[/green]" if version.installed else "[red]no[/red]",
            tags,
        )
    return table
