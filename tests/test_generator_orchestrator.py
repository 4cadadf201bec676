from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

from core.context import AppContext
from core.domain.models import Invocation
from core.services.generator_orchestrator import (
    GeneratorOrchestrator,
    build_placeholders,
    expand_braces,
    match_spec_files,
)
from core.services.version_store import VersionStore

pytestmark = [pytest.mark.unit]


class RecordingRunner:
    def __init__(self, exit_codes: dict[str, int] | None = None, delay: float = 0.0) -> None:
        self.exit_codes = exit_codes or {}
        self.delay = delay
        self.seen: list[Invocation] = []
        self.active = 0
        self.peak = 0

    async def __call__(self, invocation: Invocation) -> int:
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(self.delay)
            self.seen.append(invocation)
            return self.exit_codes.get(invocation.label, 0)
        finally:
            self.active -= 1


def _touch(root: Path, *names: str) -> None:
    for name in names:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("openapi: 3.0.0\n", encoding="utf-8")


@pytest.fixture
def configure(context: AppContext, write_config):
    def configure(generators) -> None:
        write_config(
            {
                "generator-cli": {
                    "version": "4.2.1",
                    "storageDir": "versions",
                    "generators": generators,
                }
            }
        )

    return configure


@pytest.fixture
def orchestrator_for(context: AppContext, make_backend):
    def build(runner: RecordingRunner) -> GeneratorOrchestrator:
        store = VersionStore(context, backend=make_backend({"4.2.1"}))
        return GeneratorOrchestrator(context, store, runner=runner)

    return build


def test_expand_braces() -> None:
    assert expand_braces("def/**/*.{json,yaml}") == ["def/**/*.json", "def/**/*.yaml"]
    assert expand_braces("def/*.yaml") == ["def/*.yaml"]


def test_match_spec_files(tmp_path: Path) -> None:
    _touch(tmp_path, "api/v1/pet.yaml", "api/v2/store.yaml", "api/v2/readme.md", "api/root.json")

    assert match_spec_files(tmp_path, "api/**/*.yaml") == ["api/v1/pet.yaml", "api/v2/store.yaml"]
    assert match_spec_files(tmp_path, "api/**/*.{json,yaml}") == [
        "api/root.json",
        "api/v1/pet.yaml",
        "api/v2/store.yaml",
    ]
    assert match_spec_files(tmp_path, "missing/*.yaml") == []


def test_glob_placeholders(tmp_path: Path) -> None:
    values = build_placeholders(tmp_path, spec_file="abc/app/pet.yaml")

    assert values["name"] == "pet"
    assert values["Name"] == "Pet"
    assert values["base"] == "pet.yaml"
    assert values["ext"] == "yaml"
    assert values["cwd"] == str(tmp_path)
    assert values["dir"] == str(tmp_path / "abc" / "app")
    assert values["path"] == str(tmp_path / "abc" / "app" / "pet.yaml")
    assert values["relDir"] == "abc/app"
    assert values["relPath"] == "abc/app/pet.yaml"


def test_input_spec_placeholders(tmp_path: Path) -> None:
    local = build_placeholders(tmp_path, input_spec="specs/api.yaml")
    remote = build_placeholders(tmp_path, input_spec="https://example.com/v1/petstore.json?raw=1")

    assert local["path"] == str(tmp_path / "specs" / "api.yaml")
    assert "dir" not in local and "relPath" not in local
    assert remote["path"] == "https://example.com/v1/petstore.json?raw=1"
    assert remote["name"] == "petstore"
    assert remote["ext"] == "json"


def test_glob_invocations(context: AppContext, configure, orchestrator_for, tmp_path: Path) -> None:
    _touch(tmp_path, "abc/app/pet.yaml", "abc/app/car.yaml", "abc/app/notes.txt")
    configure(
        {
            "v2.0": {
                "glob": "abc/**/*.yaml",
                "output": "#{cwd}/out/#{name}",
                "generatorName": "typescript-angular",
            }
        }
    )
    jar = tmp_path / "versions" / "4.2.1.jar"

    invocations, unmatched = orchestrator_for(RecordingRunner()).build_invocations()

    assert unmatched == []
    assert [invocation.label for invocation in invocations] == [
        "[v2.0] abc/app/car.yaml",
        "[v2.0] abc/app/pet.yaml",
    ]
    assert invocations[1].command_line == (
        f'java -jar "{jar}" generate'
        f' --input-spec="{tmp_path}/abc/app/pet.yaml"'
        f' --output="{tmp_path}/out/pet"'
        ' --generator-name="typescript-angular"'
    )


def test_input_spec_invocation_keeps_glob_only_placeholders(context: AppContext, configure, orchestrator_for, tmp_path: Path) -> None:
    configure({"single": {"inputSpec": "specs/api.yaml", "output": "out/#{dir}/#{name}"}})

    invocations, _ = orchestrator_for(RecordingRunner()).build_invocations()

    assert [invocation.label for invocation in invocations] == ["[single] specs/api.yaml"]
    assert f'--input-spec="{tmp_path}/specs/api.yaml"' in invocations[0].command_line
    assert '--output="out/#{dir}/api"' in invocations[0].command_line


def test_custom_jar_uses_classpath_form(context: AppContext, configure, orchestrator_for, tmp_path: Path) -> None:
    _touch(tmp_path, "api.yaml")
    configure(
        {
            "plugin": {"glob": "api.yaml", "customJarPath": "plugins/own.jar"},
            "global": {"glob": "api.yaml"},
        }
    )
    jar = tmp_path / "versions" / "4.2.1.jar"

    invocations, _ = orchestrator_for(RecordingRunner()).build_invocations(custom_generator="shared.jar")
    lines = {invocation.label: invocation.command_line for invocation in invocations}

    assert lines["[plugin] api.yaml"].startswith(
        f'java -cp "{jar}:plugins/own.jar" org.openapitools.codegen.OpenAPIGenerator generate'
    )
    assert lines["[global] api.yaml"].startswith(
        f'java -cp "{jar}:shared.jar" org.openapitools.codegen.OpenAPIGenerator generate'
    )


def test_java_opts_are_inserted(context: AppContext, configure, orchestrator_for, tmp_path: Path) -> None:
    _touch(tmp_path, "api.yaml")
    configure({"opts": {"glob": "api.yaml"}})
    context.settings.java_opts = "-Xmx2g -Dlog.level=warn"

    invocations, _ = orchestrator_for(RecordingRunner()).build_invocations()

    assert invocations[0].command_line.startswith("java -Xmx2g -Dlog.level=warn -jar ")


def test_disabled_and_filtered_specs_are_skipped(context: AppContext, configure, orchestrator_for, tmp_path: Path) -> None:
    _touch(tmp_path, "api.yaml")
    configure(
        {
            "one": {"glob": "api.yaml"},
            "two": {"glob": "api.yaml"},
            "off": {"glob": "api.yaml", "disabled": True},
        }
    )
    orchestrator = orchestrator_for(RecordingRunner())

    everything, _ = orchestrator.build_invocations()
    selected, _ = orchestrator.build_invocations(name_filters=["two", "off"])

    assert [invocation.label for invocation in everything] == ["[one] api.yaml", "[two] api.yaml"]
    assert [invocation.label for invocation in selected] == ["[two] api.yaml"]


@pytest.mark.asyncio
async def test_generate_runs_everything_and_reports(context: AppContext, console, configure, orchestrator_for, tmp_path: Path) -> None:
    _touch(tmp_path, "abc/app/pet.yaml", "abc/app/car.yaml", "abc/app/notes.txt")
    configure({"v2.0": {"glob": "abc/**/*.yaml", "output": "#{cwd}/out/#{name}"}})
    runner = RecordingRunner(exit_codes={"[v2.0] abc/app/car.yaml": 1})

    assert await orchestrator_for(runner).generate()

    assert sorted(invocation.label for invocation in runner.seen) == [
        "[v2.0] abc/app/car.yaml",
        "[v2.0] abc/app/pet.yaml",
    ]
    output = console.export_text()
    assert output.index("[v2.0] abc/app/car.yaml") < output.index("[v2.0] abc/app/pet.yaml")
    assert "generate --input-spec=" in output


@pytest.mark.asyncio
async def test_generate_without_matches_warns_after_the_run(context: AppContext, console, configure, orchestrator_for, tmp_path: Path) -> None:
    _touch(tmp_path, "api.yaml")
    configure({"ok": {"glob": "api.yaml"}, "none": {"glob": "missing/*.yaml"}})
    runner = RecordingRunner()

    assert await orchestrator_for(runner).generate()

    output = console.export_text()
    assert 'Did not find any file matching glob "missing/*.yaml"' in output
    assert output.index("[ok] api.yaml") < output.index("Did not find")


@pytest.mark.asyncio
async def test_generate_returns_false_when_nothing_ran(context: AppContext, configure, orchestrator_for) -> None:
    configure({"none": {"glob": "missing/*.yaml"}})
    runner = RecordingRunner()

    assert not await orchestrator_for(runner).generate()
    assert runner.seen == []


@pytest.mark.asyncio
async def test_generate_filter_without_match_returns_false(context: AppContext, configure, orchestrator_for, tmp_path: Path) -> None:
    _touch(tmp_path, "api.yaml")
    configure({"one": {"glob": "api.yaml"}})

    assert not await orchestrator_for(RecordingRunner()).generate(None, "other")


@pytest.mark.asyncio
async def test_at_most_ten_processes_at_once(context: AppContext, configure, orchestrator_for, tmp_path: Path) -> None:
    _touch(tmp_path, *(f"specs/api{index:02d}.yaml" for index in range(25)))
    configure({"bulk": {"glob": "specs/*.yaml"}})
    runner = RecordingRunner(delay=0.01)

    assert await orchestrator_for(runner).generate()

    assert len(runner.seen) == 25
    assert runner.peak == 10


def test_array_form_is_rejected(context: AppContext, console, configure, orchestrator_for) -> None:
    configure([{"glob": "api.yaml"}])
    orchestrator = orchestrator_for(RecordingRunner())

    assert orchestrator.enabled
    assert orchestrator.load_specs() == []
    assert "array form is not supported" in console.export_text()


def test_enabled_requires_generators_key(context: AppContext, write_config, orchestrator_for) -> None:
    write_config({"generator-cli": {"version": "4.2.1"}})

    assert not orchestrator_for(RecordingRunner()).enabled


@pytest.mark.asyncio
async def test_shell_runner_exit_codes_output_and_report(context: AppContext, console, configure, make_backend) -> None:
    configure({})
    orchestrator = GeneratorOrchestrator(context, VersionStore(context, backend=make_backend({"4.2.1"})))
    invocations = [
        Invocation(label="[ok] echo", command_line="echo done; exit 0"),
        Invocation(label="[fail] exit", command_line="exit 3"),
        Invocation(label="[long] line", command_line=f'"{sys.executable}" -c "print(\'x\' * 100000)"'),
    ]

    results = await orchestrator.run_all(invocations)
    orchestrator.print_report(results)

    assert [result.exit_code for result in results] == [0, 3, 0]
    assert [result.failed for result in results] == [False, True, False]
    output = console.export_text()
    assert "[ok] echo done" in output
    assert "x" * 300 in output
    assert output.count("x") >= 100000
    assert "[fail] exit\n  exit 3" in output
    assert output.rindex("[fail] exit") < output.rindex("[long] line") < output.rindex("[ok] echo")
