from __future__ import annotations

import os
from pathlib import Path

import httpx
import pytest

from adapters.engine import DockerBackend, JarBackend
from adapters.engine.jar_backend import STAGING_PREFIX
from core.config import get_default_storage_dir
from core.context import AppContext
from core.errors import GeneratorCliError
from core.services.version_store import VersionStore, build_backend, resolve_storage_dir

pytestmark = [pytest.mark.unit]

JAR_BYTES = b"PK\x03\x04fake-engine"


def _jar_backend(context: AppContext, storage: Path, handler) -> JarBackend:
    transport = httpx.MockTransport(handler)
    return JarBackend(
        settings=context.settings,
        storage_dir=storage,
        download_link=lambda version: f"https://repo.example/engine-{version}.jar",
        client_factory=lambda: httpx.AsyncClient(transport=transport),
    )


@pytest.mark.asyncio
async def test_download_then_installed_then_removed(context: AppContext, tmp_path: Path) -> None:
    storage = tmp_path / "versions"
    backend = _jar_backend(context, storage, lambda request: httpx.Response(200, content=JAR_BYTES))
    store = VersionStore(context, backend=backend)

    assert not store.is_installed("7.15.0")
    assert await store.download("7.15.0")
    assert store.is_installed("7.15.0")
    assert (storage / "7.15.0.jar").read_bytes() == JAR_BYTES

    store.remove("7.15.0")
    assert not store.is_installed("7.15.0")
    store.remove("7.15.0")


@pytest.mark.asyncio
async def test_failed_download_leaves_nothing_behind(context: AppContext, console, tmp_path: Path) -> None:
    storage = tmp_path / "versions"
    backend = _jar_backend(context, storage, lambda request: httpx.Response(404))
    store = VersionStore(context, backend=backend)

    assert not await store.download("0.0.1")
    assert not (storage / "0.0.1.jar").exists()
    assert "Download failed, because of" in console.export_text()


@pytest.mark.asyncio
async def test_download_is_staged_inside_the_store(context: AppContext, tmp_path: Path) -> None:
    storage = tmp_path / "versions"
    staged: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        staged.extend(path.name for path in storage.iterdir() if path.is_dir())
        return httpx.Response(200, content=JAR_BYTES)

    store = VersionStore(context, backend=_jar_backend(context, storage, handler))

    assert await store.download("7.15.0")

    assert len(staged) == 1 and staged[0].startswith(STAGING_PREFIX)
    assert sorted(path.name for path in storage.iterdir()) == ["7.15.0.jar"]


@pytest.mark.asyncio
async def test_failed_download_removes_staging(context: AppContext, tmp_path: Path) -> None:
    storage = tmp_path / "versions"
    store = VersionStore(context, backend=_jar_backend(context, storage, lambda request: httpx.Response(500)))

    assert not await store.download("7.15.0")

    assert list(storage.iterdir()) == []

@pytest.mark.asyncio
async def test_select_persists_only_after_successful_download(context: AppContext, make_backend) -> None:
    store = VersionStore(context, backend=make_backend(fail=True))
    context.config.set("generator-cli.version", "6.6.0")

    assert not await store.select("7.15.0")
    assert store.selected_version == "6.6.0"

    store.backend = make_backend()
    assert await store.select("7.15.0")
    assert store.selected_version == "7.15.0"
    assert store.is_selected("7.15.0")


@pytest.mark.asyncio
async def test_select_installed_version_skips_download(context: AppContext, make_backend) -> None:
    backend = make_backend({"7.14.0"})
    store = VersionStore(context, backend=backend)

    assert await store.select("7.14.0")
    assert backend.downloads == []


@pytest.mark.asyncio
async def test_custom_storage_location_is_reported(context: AppContext, console, make_backend) -> None:
    context.config.set("generator-cli.storageDir", "./jars")
    store = VersionStore(context, backend=make_backend())

    assert await store.download("7.15.0")
    assert "to custom storage location" in console.export_text()


def test_storage_dir_resolution(tmp_path: Path) -> None:
    assert resolve_storage_dir(tmp_path, None) == get_default_storage_dir()
    assert resolve_storage_dir(tmp_path, "./jars/../store") == tmp_path / "store"
    assert resolve_storage_dir(tmp_path, "~/engines") == Path.home() / "engines"
    assert resolve_storage_dir(tmp_path, "/opt/engines") == Path("/opt/engines")


def test_resolve_path_is_pure(context: AppContext, make_backend, tmp_path: Path) -> None:
    context.config.set("generator-cli.storageDir", "jars")
    context.config.set("generator-cli.version", "7.15.0")
    store = VersionStore(context, backend=make_backend())

    assert store.resolve_path() == tmp_path / "jars" / "7.15.0.jar"
    assert store.resolve_path("6.0.0") == tmp_path / "jars" / "6.0.0.jar"
    assert not (tmp_path / "jars").exists()


def test_resolve_path_without_selection_is_an_error(context: AppContext, make_backend) -> None:
    store = VersionStore(context, backend=make_backend())

    with pytest.raises(GeneratorCliError, match="No generator version selected"):
        store.resolve_path()
    with pytest.raises(GeneratorCliError, match="No generator version selected"):
        store.invocation_prefix()
    assert store.resolve_path("7.15.0").name == "7.15.0.jar"

def test_backend_follows_use_docker(context: AppContext) -> None:
    assert isinstance(build_backend(context), JarBackend)
    context.config.set("generator-cli.useDocker", True)
    assert isinstance(build_backend(context), DockerBackend)


def test_jar_invocation_prefix(context: AppContext, tmp_path: Path) -> None:
    backend = _jar_backend(context, tmp_path / "versions", lambda request: httpx.Response(200))
    jar = tmp_path / "versions" / "7.15.0.jar"

    assert backend.invocation_prefix("7.15.0") == ["java", "-jar", str(jar)]
    assert backend.invocation_prefix("7.15.0", "plugins/custom.jar")[-3:] == [
        "-cp",
        f"{jar}{os.pathsep}plugins/custom.jar",
        "org.openapitools.codegen.OpenAPIGenerator",
    ]


def test_docker_backend_commands(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls: list[list[str]] = []

    class Completed:
        returncode = 0

    def fake_run(args, **kwargs):
        calls.append(list(args))
        return Completed()

    monkeypatch.setattr("adapters.engine.docker_backend.subprocess.run", fake_run)
    backend = DockerBackend(cwd=tmp_path, image_name="openapitools/openapi-generator-cli")

    assert backend.is_installed("7.15.0")
    backend.remove("7.15.0")
    assert calls == [
        ["docker", "image", "inspect", "openapitools/openapi-generator-cli:v7.15.0"],
        ["docker", "rmi", "openapitools/openapi-generator-cli:v7.15.0"],
    ]

    prefix = backend.invocation_prefix("7.15.0")
    assert prefix[:3] == ["docker", "run", "--rm"]
    assert prefix[-3:] == ["-v", f"{tmp_path}:/local", "openapitools/openapi-generator-cli:v7.15.0"]


def test_docker_backend_without_docker_binary(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def missing(args, **kwargs):
        raise FileNotFoundError("docker")

    monkeypatch.setattr("adapters.engine.docker_backend.subprocess.run", missing)
    backend = DockerBackend(cwd=tmp_path, image_name="img")

    assert not backend.is_installed("1.0.0")
    backend.remove("1.0.0")
