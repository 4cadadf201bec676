"""Services shared by the CLI commands, built once per process."""

from __future__ import annotations

from dataclasses import dataclass

import typer

from core.context import AppContext
from core.services.generator_orchestrator import GeneratorOrchestrator
from core.services.version_catalog import VersionCatalog
from core.services.version_store import VersionStore


@dataclass
class CliState:
    context: AppContext
    store: VersionStore
    catalog: VersionCatalog
    orchestrator: GeneratorOrchestrator


def build_state(context: AppContext) -> CliState:
    store = VersionStore(context)
    return CliState(
        context=context,
        store=store,
        catalog=VersionCatalog(context, store),
        orchestrator=GeneratorOrchestrator(context, store),
    )


def get_state(ctx: typer.Context) -> CliState:
    state = ctx.find_object(CliState)
    if state is None:
        raise RuntimeError("CLI state is not initialised")
    return state
