"""CLI entry point.

Startup sequence:
1) build the application context (cwd, settings, config file, console),
2) make sure the selected engine version is available (first run selects `latest`),
3) introspect the engine and register its commands,
4) dispatch the user's invocation.

`version-manager` invocations skip steps 2-3 so a broken selection can always
be repaired.
"""

from __future__ import annotations

import asyncio
import sys
from typing import Optional, Sequence

import typer
from rich.markup import escape

from cli import version_manager
from cli.passthrough import CommandSurfaceSynthesizer
from cli.state import CliState, build_state
from core.context import build_context
from core.errors import GeneratorCliError, VersionNotFoundError

PROG_NAME = "generator-cli"

# Options taking a value, consumed before the command table exists.
_GLOBAL_VALUE_OPTIONS = ("--custom-generator", "--openapitools")


def peek_option(argv: Sequence[str], name: str) -> str | None:
    """Value of `--name value` / `--name=value` anywhere in argv."""

    for index, token in enumerate(argv):
        if token == name and index + 1 < len(argv):
            return argv[index + 1]
        if token.startswith(f"{name}="):
            return token.split("=", 1)[1]
    return None


def strip_global_options(argv: Sequence[str]) -> list[str]:
    """argv without the global options and their values, wherever they appear.

    They are read with `peek_option` up front; left in place after a command
    name they would reach the engine as unknown flags.
    """

    args: list[str] = []
    skip_next = False
    for token in argv:
        if skip_next:
            skip_next = False
            continue
        if token in _GLOBAL_VALUE_OPTIONS:
            skip_next = True
            continue
        if token.startswith(tuple(f"{name}=" for name in _GLOBAL_VALUE_OPTIONS)):
            continue
        args.append(token)
    return args


def first_command(argv: Sequence[str]) -> str | None:
    skip_next = False
    for token in argv:
        if skip_next:
            skip_next = False
            continue
        if token in _GLOBAL_VALUE_OPTIONS:
            skip_next = True
            continue
        if token.startswith("-"):
            continue
        return token
    return None


def build_app() -> typer.Typer:
    app = typer.Typer(
        name=PROG_NAME,
        no_args_is_help=True,
        add_completion=False,
        help="Version manager and batch runner for the OpenAPI Generator CLI.",
    )
    app.add_typer(version_manager.app, name="version-manager")

    @app.callback()
    def main(
        custom_generator: Optional[str] = typer.Option(
            None, "--custom-generator", help="Custom generator jar, added to the engine classpath."
        ),
        openapitools: Optional[str] = typer.Option(
            None, "--openapitools", help="Configuration file (default: ./openapitools.json)."
        ),
    ) -> None:
        # Read and stripped from argv before the app runs; declared for --help.
        _ = (custom_generator, openapitools)

    return app


async def ensure_selected_version(state: CliState) -> str:
    """Selected version, available locally. First run selects the latest stable release."""

    store = state.store
    selected = store.selected_version
    if not selected:
        candidates = await state.catalog.search(["latest"])
        if not candidates:
            raise VersionNotFoundError(["latest"])
        selected = candidates[0].version
        if not await store.select(selected):
            raise GeneratorCliError(f"Unable to download version {selected}")
        return selected

    if not await store.download_if_needed(selected):
        raise GeneratorCliError(f"Unable to download version {selected}")
    return selected


async def bootstrap(state: CliState, app: typer.Typer) -> CommandSurfaceSynthesizer:
    await ensure_selected_version(state)
    synthesizer = CommandSurfaceSynthesizer(state.context, state.store, state.orchestrator, app)
    await synthesizer.init()
    return synthesizer


def run(argv: Sequence[str] | None = None) -> None:
    args = list(sys.argv[1:] if argv is None else argv)
    context = build_context(
        config_path=peek_option(args, "--openapitools"),
        custom_generator=peek_option(args, "--custom-generator"),
    )
    state = build_state(context)
    app = build_app()

    if first_command(args) != "version-manager":
        try:
            asyncio.run(bootstrap(state, app))
        except GeneratorCliError as exc:
            context.console.print(f"[red]{escape(str(exc))}[/red]")
            raise SystemExit(1) from exc

    app(args=strip_global_options(args), prog_name=PROG_NAME, obj=state)


if __name__ == "__main__":
    run()
