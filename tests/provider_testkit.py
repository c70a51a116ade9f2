"""Test utilities for provider and strategy tests.

Provides a minimal async HTTP client fake matching the shape used by modules
via `create_http_client()`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import httpx


@dataclass(frozen=True)
class FakeResponse:
    status_code: int
    payload: Any
    text: str = ""

    def json(self) -> Any:
        return self.payload


@dataclass(frozen=True)
class FakeResponseJsonError(FakeResponse):
    def json(self) -> Any:
        raise ValueError("invalid json")


class FakeAsyncHttpClient:
    """Minimal async context manager standing in for `httpx.AsyncClient`.

    - `post()` returns `post_response`
    - `get()` and `request()` return `get_response`
    - Every call is recorded as `(method, url, kwargs)` in `calls`
    """

    def __init__(
        self,
        *,
        post_response: FakeResponse | None = None,
        get_response: FakeResponse | None = None,
    ) -> None:
        self._post_response = post_response or FakeResponse(200, {})
        self._get_response = get_response or FakeResponse(200, {})
        self.calls: list[tuple[str, str, dict[str, Any]]] = []

    async def __aenter__(self) -> "FakeAsyncHttpClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: Any,
    ) -> bool:
        return False

    async def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append(("POST", str(url), kwargs))
        return self._post_response

    async def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append(("GET", str(url), kwargs))
        return self._get_response

    async def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append((method, str(url), kwargs))
        if method == "POST":
            return self._post_response
        return self._get_response


def patch_http_client(monkeypatch: Any, create_client_path: str, fake_client: Any) -> None:
    """Patch a module's `create_http_client`."""

    monkeypatch.setattr(create_client_path, lambda: fake_client)


def patch_mock_transport(
    monkeypatch: Any,
    create_client_path: str,
    handler: Callable[[httpx.Request], httpx.Response],
) -> list[httpx.Request]:
    """Patch `create_http_client` with real httpx clients over a `MockTransport`.

    A fresh client is built per call since a closed `AsyncClient` cannot be reopened.
    Returns the list that collects every request sent.
    """
    requests: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    monkeypatch.setattr(
        create_client_path,
        lambda: httpx.AsyncClient(transport=httpx.MockTransport(_handler)),
    )
    return requests
