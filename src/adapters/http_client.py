"""httpx wrapper.

Why a wrapper:
- Standardises timeouts, headers and registry credentials for every request.
- Proxies come from the environment (`HTTP_PROXY`, `HTTPS_PROXY`, `NO_PROXY`)
  through httpx's `trust_env`.
- Easy to test: callers accept a client factory, so a mocked transport slots in.
"""

from __future__ import annotations

from typing import Callable

import httpx

from adapters.npmrc import NpmrcReader
from core.config import AppSettings


ClientFactory = Callable[[], httpx.AsyncClient]


def build_async_client(
    settings: AppSettings | None = None,
    *,
    auth_url: str | None = None,
    npmrc: NpmrcReader | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with the wrapper's defaults.

    When `auth_url` is given and the `.npmrc` holds a token for the same
    host, it is sent as a bearer token (Maven mirrors behind npm registries).
    """

    settings = settings or AppSettings()
    npmrc = npmrc or NpmrcReader()

    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json, application/java-archive, */*;q=0.8",
    }
    if auth_url:
        token = npmrc.auth_token(auth_url)
        if token:
            headers["Authorization"] = f"Bearer {token}"

    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        verify=npmrc.strict_ssl(),
        trust_env=True,
    )


def describe_http_error(exc: Exception) -> str:
    """Short, single-line reason for a failed request."""

    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        reason = response.reason_phrase or "error"
        return f"HTTP {response.status_code} {reason} for {response.request.url}"
    if isinstance(exc, httpx.TimeoutException):
        return f"timeout ({exc.__class__.__name__})"
    if isinstance(exc, httpx.RequestError):
        detail = str(exc) or exc.__class__.__name__
        return f"{detail} ({exc.request.url})" if _has_request(exc) else detail
    return str(exc) or exc.__class__.__name__


def _has_request(exc: httpx.RequestError) -> bool:
    try:
        exc.request
    except RuntimeError:
        return False
    return True
