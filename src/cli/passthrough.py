"""Command surface synthesized from the wrapped engine.

The engine's command set is not fixed: at startup we run its `help` and
`completion` commands, build one typer command per entry and forward any
invocation to the engine as a child process. Two commands are special:

- `generate`: runs the configured generator batch when generators exist and no
  engine arguments were given (or `--generator-key` was used);
- `help`: prints local help for known commands before delegating.

Lifecycle: uninitialized -> discovering -> ready, or failed (terminal) when the
engine's `help` cannot be run.
"""

from __future__ import annotations

import asyncio
import re
import subprocess
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping, NoReturn, Sequence

import typer
from rich.markup import escape

from core.context import AppContext
from core.domain.models import DiscoveredCommand
from core.errors import EngineIntrospectionError, GeneratorCliError
from core.services.generator_orchestrator import GeneratorOrchestrator
from core.services.version_store import VersionStore


ProcessRunner = Callable[[Sequence[str]], int]

PASSTHROUGH_CONTEXT = {
    "ignore_unknown_options": True,
    "allow_extra_args": True,
}

_HELP_LINE_RE = re.compile(r"^([a-z-]+)\s+(.+)", re.IGNORECASE)

GENERATOR_KEY_OPTION = "--generator-key"
GENERATE_EPILOG = (
    f"{GENERATOR_KEY_OPTION} NAME...  Run configured generators by key. Takes several names, "
    "repeats, or separate by comma."
)


class SynthesizerState(str, Enum):
    UNINITIALIZED = "uninitialized"
    DISCOVERING = "discovering"
    READY = "ready"
    FAILED = "failed"


class DispatchKind(str, Enum):
    PASSTHROUGH = "passthrough"
    GENERATE = "generate"
    HELP = "help"


def parse_help_output(text: str) -> dict[str, str]:
    """Indented `name   description` lines of the engine's `help` output."""

    commands: dict[str, str] = {}
    for line in text.splitlines():
        if not line[:1].isspace():
            continue
        match = _HELP_LINE_RE.match(line.strip())
        if match:
            commands[match.group(1)] = match.group(2).strip()
    return commands


def parse_completion_output(text: str) -> list[str]:
    """Bare command tokens of the engine's `completion` output (options dropped)."""

    tokens = (line.strip() for line in text.splitlines())
    return [token for token in tokens if token and not token.startswith("--")]


def merge_discovered(help_text: str, completion_text: str) -> tuple[DiscoveredCommand, ...]:
    described = parse_help_output(help_text)
    for name in parse_completion_output(completion_text):
        described.setdefault(name, "")
    return tuple(DiscoveredCommand(name=name, description=description) for name, description in described.items())


def _split_keys(value: str) -> list[str]:
    return [key.strip() for key in value.split(",") if key.strip()]


def take_generator_keys(args: Sequence[str]) -> tuple[list[str] | None, list[str]]:
    """Split `--generator-key a b,c` out of `args`.

    The option repeats and takes every following value up to the next token
    starting with `-`. Returns the keys (None when the option is absent) and
    the remaining arguments in order.
    """

    keys: list[str] | None = None
    rest: list[str] = []
    collecting = False
    for token in args:
        if token == GENERATOR_KEY_OPTION or token.startswith(f"{GENERATOR_KEY_OPTION}="):
            keys = keys if keys is not None else []
            keys.extend(_split_keys(token.partition("=")[2]))
            collecting = True
            continue
        if collecting and keys is not None and not token.startswith("-"):
            keys.extend(_split_keys(token))
            continue
        collecting = False
        rest.append(token)
    return keys, rest


def command_help(prog: str, command: DiscoveredCommand) -> str:
    """Local help for a discovered command, built from its cached description."""

    lines = [f"Usage: {prog} {command.name} [ARGS]..."]
    if command.description:
        lines.extend(["", f"  {command.description}"])
    if command.name == "generate":
        lines.extend(["", f"  {GENERATE_EPILOG}"])
    return "\n".join(lines)


def _run_inherited(args: Sequence[str]) -> int:
    return subprocess.run(list(args), check=False).returncode


class CommandSurfaceSynthesizer:
    def __init__(
        self,
        context: AppContext,
        store: VersionStore,
        orchestrator: GeneratorOrchestrator,
        app: typer.Typer,
        *,
        process_runner: ProcessRunner | None = None,
    ) -> None:
        self._context = context
        self._store = store
        self._orchestrator = orchestrator
        self._app = app
        self._console = context.console
        self._process_runner = process_runner or _run_inherited
        self.state = SynthesizerState.UNINITIALIZED
        self.commands: tuple[DiscoveredCommand, ...] = ()
        self.dispatch: Mapping[str, DispatchKind] = MappingProxyType({})

    async def init(self) -> None:
        if self.state is not SynthesizerState.UNINITIALIZED:
            raise GeneratorCliError(f"command surface already {self.state.value}")

        self.state = SynthesizerState.DISCOVERING
        try:
            help_text, completion_text = await asyncio.gather(
                self._run_engine("help"),
                self._run_optional("completion"),
            )
        except Exception:
            self.state = SynthesizerState.FAILED
            raise

        self.commands = merge_discovered(help_text, completion_text)
        self.dispatch = MappingProxyType({command.name: self._kind_for(command.name) for command in self.commands})
        for command in self.commands:
            self._register(command)
        self.state = SynthesizerState.READY

    def passthrough(self, name: str, args: Sequence[str]) -> NoReturn:
        """Run the engine with `name` and `args` appended; exit with its code."""

        argv = [*self._prefix(), name, *args]
        try:
            exit_code = self._process_runner(argv)
        except OSError as exc:
            self._console.print(f"[red]Unable to start the generator: {escape(str(exc))}[/red]")
            raise typer.Exit(code=127) from exc
        raise typer.Exit(code=exit_code)

    def _prefix(self) -> list[str]:
        return self._store.invocation_prefix(custom_jar=self._context.custom_generator)

    @staticmethod
    def _kind_for(name: str) -> DispatchKind:
        if name == "generate":
            return DispatchKind.GENERATE
        if name == "help":
            return DispatchKind.HELP
        return DispatchKind.PASSTHROUGH

    def _register(self, command: DiscoveredCommand) -> None:
        builders = {
            DispatchKind.PASSTHROUGH: self._passthrough_command,
            DispatchKind.GENERATE: self._generate_command,
            DispatchKind.HELP: self._help_command,
        }
        kind = self.dispatch[command.name]
        callback = builders[kind](command.name)
        self._app.command(
            name=command.name,
            help=command.description or None,
            epilog=GENERATE_EPILOG if kind is DispatchKind.GENERATE else None,
            hidden=command.hidden,
            add_help_option=False,
            context_settings=PASSTHROUGH_CONTEXT,
        )(callback)

    def _passthrough_command(self, name: str) -> Callable[..., None]:
        def command(ctx: typer.Context) -> None:
            self.passthrough(name, ctx.args)

        return command

    def _help_command(self, name: str) -> Callable[..., None]:
        def command(ctx: typer.Context) -> None:
            root = ctx.find_root()
            if not ctx.args:
                self._print_help(root.get_help())
                return

            known = {command.name: command for command in self.commands}.get(ctx.args[0])
            if known is not None:
                self._print_help(command_help(root.info_name or "generator-cli", known))

            self.passthrough(name, ctx.args)

        return command

    def _generate_command(self, name: str) -> Callable[..., None]:
        def command(ctx: typer.Context) -> None:
            keys, rest = take_generator_keys(ctx.args)
            if (not rest or keys is not None) and self._orchestrator.enabled:
                generated = asyncio.run(self._orchestrator.generate(self._context.custom_generator, *(keys or [])))
                if not generated:
                    self._console.print("[red]Code generation failed[/red]")
                    raise typer.Exit(code=1)
                return

            self.passthrough(name, ctx.args)

        return command

    def _print_help(self, text: str) -> None:
        # Rich-formatted root help is written by typer itself and comes back empty.
        if not text:
            return
        self._console.print(text, style="bright_cyan", markup=False, highlight=False)

    async def _run_engine(self, subcommand: str) -> str:
        try:
            process = await asyncio.create_subprocess_exec(
                *self._prefix(),
                subcommand,
                cwd=str(self._context.cwd),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise EngineIntrospectionError(str(exc)) from exc

        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            raise EngineIntrospectionError(stderr.decode(errors="replace").strip() or f"exit code {process.returncode}")
        return stdout.decode(errors="replace")

    async def _run_optional(self, subcommand: str) -> str:
        # Older engine versions have no `completion` command.
        try:
            return await self._run_engine(subcommand)
        except EngineIntrospectionError:
            return ""
