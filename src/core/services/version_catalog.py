"""Catalog of published engine versions.

This module owns the remote side of version management:
- query the Maven search index for every published version,
- derive tags (stable / qualifiers / latest) and release dates,
- fall back to the bundled list when the query fails, so the tool keeps
  working offline.

Filtering by tag is a pure prefix match (`4.2` matches `4.2.0`) and keeps the
repository order.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Mapping, Sequence

import httpx
from rich.markup import escape

from adapters.http_client import ClientFactory, build_async_client, describe_http_error
from core.bundled_versions import known_release_dates
from core.config_store import ConfigStore
from core.context import AppContext
from core.domain.models import Version
from core.domain.versions import derive_tags, filter_by_tags, mark_latest

if TYPE_CHECKING:
    from core.services.version_store import VersionStore


MAVEN_GROUP_ID = "org.openapitools"
MAVEN_ARTIFACT_ID = "openapi-generator-cli"

DEFAULT_QUERY_URL = (
    "https://search.maven.org/solrsearch/select"
    "?q=g:${group.id}+AND+a:${artifact.id}&core=gav&start=0&rows=200"
)
DEFAULT_DOWNLOAD_URL = (
    "https://repo1.maven.org/maven2/${groupId}/${artifactId}/${versionName}/${artifactId}-${versionName}.jar"
)


def expand_repository_template(template: str, extra: Mapping[str, str] | None = None) -> str:
    """Expand `${groupId}`, `${artifactId}` (path forms), `${group.id}`, `${artifact.id}` and extras."""

    placeholders: dict[str, str] = dict(extra or {})
    placeholders.update(
        {
            "groupId": MAVEN_GROUP_ID.replace(".", "/"),
            "artifactId": MAVEN_ARTIFACT_ID.replace(".", "/"),
            "group.id": MAVEN_GROUP_ID,
            "artifact.id": MAVEN_ARTIFACT_ID,
        }
    )
    for key, value in placeholders.items():
        template = template.replace("${" + key + "}", value)
    return template


def build_download_link(config: ConfigStore, version: str) -> str:
    template = config.get("generator-cli.repository.downloadUrl") or DEFAULT_DOWNLOAD_URL
    return expand_repository_template(str(template), {"versionName": version})


def _doc_version(doc: Mapping[str, Any]) -> str:
    version = doc.get("v")
    if isinstance(version, str) and version:
        return version
    # `id` is `group:artifact:version` in the gav core.
    doc_id = doc["id"]
    return str(doc_id).rsplit(":", 1)[-1]


def _doc_release_date(doc: Mapping[str, Any]) -> datetime:
    return datetime.fromtimestamp(int(doc["timestamp"]) / 1000, tz=timezone.utc)


class VersionCatalog:
    def __init__(
        self,
        context: AppContext,
        store: "VersionStore",
        *,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._context = context
        self._store = store
        self._client_factory = client_factory
        self._console = context.console

    @property
    def query_url(self) -> str:
        template = self._context.config.get("generator-cli.repository.queryUrl") or DEFAULT_QUERY_URL
        return expand_repository_template(str(template))

    def download_link(self, version: str) -> str:
        return build_download_link(self._context.config, version)

    async def fetch_all(self) -> list[Version]:
        if self._context.settings.skip_repository_query:
            return self.bundled_versions()

        url = self.query_url
        try:
            async with self._client(url) as client:
                response = await client.get(url)
                response.raise_for_status()
                payload = response.json()
            versions = self._parse(payload)
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            reason = describe_http_error(exc)
            self._console.print(
                f'[red]Unable to query repository, because of: "{escape(reason)}". '
                "Return default versions instead.[/red]"
            )
            return self.bundled_versions()

        mark_latest(versions)
        return versions

    async def search(self, tags: Sequence[str]) -> list[Version]:
        return filter_by_tags(await self.fetch_all(), list(tags))

    def bundled_versions(self) -> list[Version]:
        versions = [self._build(version, released) for version, released in known_release_dates()]
        mark_latest(versions)
        return versions

    def _parse(self, payload: Any) -> list[Version]:
        docs = payload["response"]["docs"]
        if not isinstance(docs, list):
            raise TypeError("response.docs is not a list")
        return [self._build(_doc_version(doc), _doc_release_date(doc)) for doc in docs]

    def _build(self, version: str, released: datetime) -> Version:
        return Version(
            version=version,
            tags=derive_tags(version),
            release_date=released,
            installed=self._store.is_installed(version),
            download_link=self.download_link(version),
        )

    def _client(self, url: str) -> httpx.AsyncClient:
        if self._client_factory is not None:
            return self._client_factory()
        return build_async_client(self._context.settings, auth_url=url, npmrc=self._context.npmrc)
