"""Batch generation from `generator-cli.generators`.

This module expands the declarative generator map into engine invocations and
runs them, keeping side-effects (printing) to the report at the end of a run:

1) read the specs fresh from the configuration,
2) expand each glob (or take the single `inputSpec`) into spec files,
3) substitute `#{...}` placeholders and serialize parameters into flags,
4) run every invocation under one bounded pool (10 processes),
5) print a sorted pass/fail report and the globs that matched nothing.
"""

from __future__ import annotations

import asyncio
import glob as globlib
import os
import re
from pathlib import Path
from typing import Awaitable, Callable, Iterable, Mapping
from urllib.parse import urlsplit

from rich.markup import escape

from adapters.java import java_launch_line
from core.context import AppContext
from core.domain.generators import GeneratorSpec, substitute_placeholders
from core.domain.models import Invocation, InvocationResult
from core.services.version_store import VersionStore


GENERATORS_KEY = "generator-cli.generators"
MAX_PARALLEL_PROCESSES = 10
_OUTPUT_CHUNK = 64 * 1024

InvocationRunner = Callable[[Invocation], Awaitable[int]]

_BRACE_RE = re.compile(r"\{([^{}]*)\}")


def expand_braces(pattern: str) -> list[str]:
    """`def/**/*.{json,yaml}` -> `['def/**/*.json', 'def/**/*.yaml']`."""

    match = _BRACE_RE.search(pattern)
    if not match or "," not in match.group(1):
        return [pattern]
    head, tail = pattern[: match.start()], pattern[match.end():]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(f"{head}{option}{tail}"))
    return expanded


def match_spec_files(cwd: Path, pattern: str) -> list[str]:
    """Files matching `pattern` relative to `cwd`, as sorted posix paths."""

    found: set[str] = set()
    for candidate in expand_braces(pattern):
        for rel in globlib.glob(candidate, root_dir=cwd, recursive=True):
            if (cwd / rel).is_file():
                found.add(Path(rel).as_posix())
    return sorted(found)


def _is_url(value: str) -> bool:
    return "://" in value


def _capitalize(value: str) -> str:
    return value[:1].upper() + value[1:]


def build_placeholders(cwd: Path, *, spec_file: str | None = None, input_spec: str | None = None) -> dict[str, str]:
    """Values for `#{name}`, `#{Name}`, `#{cwd}`, `#{base}`, `#{dir}`, `#{path}`,
    `#{relDir}`, `#{relPath}` and `#{ext}`.

    `dir`, `relDir` and `relPath` only exist in glob mode; for an `inputSpec`
    they are left out so the tokens stay literal.
    """

    if spec_file is not None:
        absolute = Path(os.path.abspath(cwd / spec_file))
        return {
            "name": absolute.stem,
            "Name": _capitalize(absolute.stem),
            "cwd": str(cwd),
            "base": absolute.name,
            "dir": str(absolute.parent),
            "path": str(absolute),
            "relDir": os.path.dirname(spec_file) or ".",
            "relPath": spec_file,
            "ext": absolute.suffix.lstrip("."),
        }

    value = input_spec or ""
    base = Path(urlsplit(value).path if _is_url(value) else value).name
    stem = Path(base).stem
    return {
        "name": stem,
        "Name": _capitalize(stem),
        "cwd": str(cwd),
        "base": base,
        "path": value if _is_url(value) else os.path.abspath(cwd / value),
        "ext": Path(base).suffix.lstrip("."),
    }


class GeneratorOrchestrator:
    def __init__(
        self,
        context: AppContext,
        store: VersionStore,
        *,
        runner: InvocationRunner | None = None,
        max_parallel: int = MAX_PARALLEL_PROCESSES,
    ) -> None:
        self._context = context
        self._store = store
        self._console = context.console
        self._runner = runner or self._run_shell
        self._max_parallel = max_parallel

    @property
    def enabled(self) -> bool:
        return self._context.config.has(GENERATORS_KEY)

    def load_specs(self) -> list[GeneratorSpec]:
        raw = self._context.config.get(GENERATORS_KEY, {})
        if isinstance(raw, list):
            self._console.print(
                f"[yellow]\\[warn] '{GENERATORS_KEY}' must be an object keyed by generator name; "
                "the array form is not supported.[/yellow]"
            )
            return []
        if not isinstance(raw, Mapping):
            return []
        return [GeneratorSpec.from_config(str(name), spec) for name, spec in raw.items()]

    def build_invocations(
        self,
        custom_generator: str | None = None,
        name_filters: Iterable[str] = (),
    ) -> tuple[list[Invocation], list[str]]:
        """Invocations for every enabled spec, plus the globs that matched nothing."""

        filters = {name for name in name_filters if name}
        invocations: list[Invocation] = []
        unmatched_globs: list[str] = []

        for spec in self.load_specs():
            if spec.disabled:
                self._console.print(f"[dim]Skipping disabled generator \\[{escape(spec.name)}][/dim]")
                continue
            if filters and spec.name not in filters:
                self._console.print(f"[dim]Skipping generator \\[{escape(spec.name)}] (not selected)[/dim]")
                continue

            custom_jar = spec.custom_jar_path or custom_generator
            if spec.glob:
                spec_files = match_spec_files(self._context.cwd, spec.glob)
                if not spec_files:
                    unmatched_globs.append(spec.glob)
                for spec_file in spec_files:
                    placeholders = build_placeholders(self._context.cwd, spec_file=spec_file)
                    invocations.append(
                        Invocation(
                            label=f"[{spec.name}] {spec_file}",
                            command_line=self._command_line(spec, placeholders, custom_jar),
                        )
                    )
            elif spec.input_spec:
                placeholders = build_placeholders(self._context.cwd, input_spec=spec.input_spec)
                invocations.append(
                    Invocation(
                        label=f"[{spec.name}] {spec.input_spec}",
                        command_line=self._command_line(spec, placeholders, custom_jar),
                    )
                )
            else:
                self._console.print(
                    f"[yellow]\\[warn] Generator \\[{escape(spec.name)}] has neither 'glob' nor 'inputSpec'[/yellow]"
                )

        return invocations, unmatched_globs

    async def generate(self, custom_generator: str | None = None, *name_filters: str) -> bool:
        invocations, unmatched_globs = self.build_invocations(custom_generator, name_filters)

        if invocations:
            results = await self.run_all(invocations)
            self.print_report(results)

        for pattern in unmatched_globs:
            self._console.print(f'[yellow]\\[warn] Did not find any file matching glob "{escape(pattern)}"[/yellow]')

        return len(invocations) > 0

    async def run_all(self, invocations: list[Invocation]) -> list[InvocationResult]:
        """Run everything; at most `max_parallel` at once, failures never cancel siblings."""

        semaphore = asyncio.Semaphore(max(1, self._max_parallel))

        async def run_one(invocation: Invocation) -> InvocationResult:
            async with semaphore:
                exit_code = await self._runner(invocation)
            return InvocationResult(invocation=invocation, exit_code=exit_code)

        return list(await asyncio.gather(*(run_one(invocation) for invocation in invocations)))

    def print_report(self, results: list[InvocationResult]) -> None:
        for result in sorted(results, key=lambda item: item.invocation.label):
            label = escape(result.invocation.label)
            if result.failed:
                self._console.print(f"[red]{label}[/red]")
                self._console.print(f"[yellow]  {escape(result.invocation.command_line)}[/yellow]\n")
            else:
                self._console.print(f"[green]{label}[/green]")

    def _command_line(self, spec: GeneratorSpec, placeholders: dict[str, str], custom_jar: str | None) -> str:
        def substitute(text: str) -> str:
            return substitute_placeholders(text, placeholders)

        flags = [f'--input-spec="{placeholders["path"]}"', *spec.render_flags(substitute)]
        prefix = java_launch_line(self._context.settings, self._store.resolve_path(), custom_jar)
        return " ".join([prefix, "generate", *flags])

    async def _run_shell(self, invocation: Invocation) -> int:
        try:
            process = await asyncio.create_subprocess_shell(
                invocation.command_line,
                cwd=str(self._context.cwd),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as exc:
            self._console.print(f"[red]{escape(invocation.label)} {escape(str(exc))}[/red]")
            return 127

        assert process.stdout is not None
        # Chunked reads: a single output line may exceed the stream reader's line limit.
        pending = b""
        while chunk := await process.stdout.read(_OUTPUT_CHUNK):
            *lines, pending = (pending + chunk).split(b"\n")
            for line in lines:
                self._print_output(invocation, line)
        self._print_output(invocation, pending)
        return await process.wait()

    def _print_output(self, invocation: Invocation, raw_line: bytes) -> None:
        line = raw_line.decode(errors="replace").rstrip()
        if line:
            self._console.print(f"[dim]{escape(invocation.label)}[/dim] {escape(line)}")
