"""`version-manager` commands: list, select, download and remove engine versions."""

from __future__ import annotations

import asyncio
import json
from typing import List, Optional

import typer
from rich.markup import escape

from cli.state import get_state
from cli.ui_components import build_versions_table

app = typer.Typer(no_args_is_help=True, help="Manage used / installed generator version")


@app.command(name="list")
def list_versions(
    ctx: typer.Context,
    version_tags: Optional[List[str]] = typer.Argument(None, help="Filter by tags, e.g. 'stable', '7.1', 'beta'."),
    as_json: bool = typer.Option(False, "--json", "-j", help="print as json"),
) -> None:
    """Lists all published versions."""

    state = get_state(ctx)
    tags = version_tags or []
    versions = asyncio.run(state.catalog.search(tags))

    if as_json:
        payload = [version.model_dump(mode="json", by_alias=True) for version in versions]
        typer.echo(json.dumps(payload, indent=2))
        return

    console = state.context.console
    if not versions:
        console.print(f"[red]No results for: {escape(' '.join(tags))}[/red]")
        return

    console.print(build_versions_table(versions, state.store.selected_version))


@app.command(name="set")
def set_version(
    ctx: typer.Context,
    version_tags: Optional[List[str]] = typer.Argument(None, help="Tags of the version to use; the first match wins."),
) -> None:
    """Set version to use."""

    state = get_state(ctx)
    tags = version_tags or []
    versions = asyncio.run(state.catalog.search(tags))

    if not versions:
        state.context.console.print(
            f'[red]Unable to find version matching criteria "{escape(" ".join(tags))}"[/red]'
        )
        raise typer.Exit(code=1)

    if not asyncio.run(state.store.select(versions[0].version)):
        raise typer.Exit(code=1)


@app.command(name="download")
def download_version(ctx: typer.Context, version: str = typer.Argument(..., help="Exact version, e.g. 7.15.0.")) -> None:
    """Download a version without selecting it."""

    state = get_state(ctx)
    if not asyncio.run(state.store.download(version)):
        raise typer.Exit(code=1)


@app.command(name="remove")
def remove_version(ctx: typer.Context, version: str = typer.Argument(..., help="Exact version, e.g. 7.15.0.")) -> None:
    """Remove a downloaded version."""

    state = get_state(ctx)
    if state.store.is_selected(version):
        state.context.console.print(f"[yellow]{escape(version)} is the selected version; it will be downloaded again on next use.[/yellow]")
    state.store.remove(version)
