"""Shared fixtures: an in-memory AstraSync registry behind ``httpx.MockTransport``."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from astrasync_bridge.app import Bridge
from astrasync_bridge.config import AuthMode, BridgeSettings

Route = Callable[[httpx.Request], httpx.Response]


class FakeRegistry:
    """Routes keyed by ``"METHOD /path"``; unknown routes answer 404.

    Every request is recorded in :attr:`requests`.  A route value may be a
    callable, an ``httpx.Response``, or an exception instance to raise.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Any] = {
            "POST /v1/log-attempt": httpx.Response(200, json={"ok": True}),
            "POST /v1/auth/login": httpx.Response(200, json={"token": "tok-123"}),
        }
        self.requests: list[httpx.Request] = []

    def set(self, key: str, value: Any) -> None:
        self.routes[key] = value

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(f"{request.method} {request.url.path}")
        if route is None:
            return httpx.Response(404, text="Not found")
        if isinstance(route, Exception):
            raise route
        if isinstance(route, httpx.Response):
            return httpx.Response(route.status_code, headers=route.headers, content=route.content)
        return route(request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, key: str) -> list[httpx.Request]:
        method, path = key.split(" ", 1)
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def body(self, key: str, index: int = -1) -> dict[str, Any]:
        return json.loads(self.calls(key)[index].content)


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def settings() -> BridgeSettings:
    return BridgeSettings(api_url="https://registry.test", auth_mode=AuthMode.API_KEY)


@pytest.fixture
def make_bridge(registry: FakeRegistry) -> Callable[..., Bridge]:
    def _make(**overrides: Any) -> Bridge:
        params: dict[str, Any] = {"api_url": "https://registry.test", "auth_mode": AuthMode.API_KEY}
        params.update(overrides)
        return Bridge(BridgeSettings(**params), transport=registry.transport())

    return _make


def tool_call(name: str, arguments: dict[str, Any] | None = None, request_id: Any = 1) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": "tools/call",
        "params": {"name": name, "arguments": arguments or {}},
    }


@pytest.fixture
def call() -> Callable[..., dict[str, Any]]:
    """Build a ``tools/call`` message."""
    return tool_call
