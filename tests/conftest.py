from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest

from bolddesk.client import BoldDeskClient

API_PREFIX = "/api/v1.0"

Reply = Union[Dict[str, Any], Callable[[httpx.Request], httpx.Response]]


class FakeBoldDesk:
    """In-memory BoldDesk: canned replies per (method, path), every request recorded.

    Replies queued for a route are consumed in order; the last one repeats.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.routes: Dict[Tuple[str, str], List[Reply]] = {}

    def add(
        self,
        method: str,
        path: str,
        status: int = 200,
        *,
        json: Any = None,
        text: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> "FakeBoldDesk":
        reply = {"status": status, "json": json, "text": text, "headers": headers or {}}
        self.routes.setdefault((method, API_PREFIX + path), []).append(reply)
        return self

    def add_handler(self, method: str, path: str, handler: Callable[[httpx.Request], httpx.Response]) -> "FakeBoldDesk":
        self.routes.setdefault((method, API_PREFIX + path), []).append(handler)
        return self

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == API_PREFIX + path]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": f"No route for {request.method} {request.url.path}"})
        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        if callable(reply):
            return reply(request)
        if reply["text"] is not None:
            return httpx.Response(reply["status"], text=reply["text"], headers=reply["headers"])
        if reply["json"] is None:
            return httpx.Response(reply["status"], headers=reply["headers"])
        return httpx.Response(reply["status"], json=reply["json"], headers=reply["headers"])

    def client(self, **kwargs) -> BoldDeskClient:
        return BoldDeskClient(
            "acme.bolddesk.com",
            "test-api-key-123",
            transport=httpx.MockTransport(self.handle),
            **kwargs,
        )


@pytest.fixture
def fake_api() -> FakeBoldDesk:
    return FakeBoldDesk()


@pytest.fixture
def sleeps(monkeypatch) -> List[float]:
    """Record rate-limit pauses instead of sleeping."""
    recorded: List[float] = []

    async def fake_sleep(seconds: float) -> None:
        recorded.append(seconds)

    monkeypatch.setattr("bolddesk.ratelimit._async_sleep", fake_sleep)
    return recorded


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No BoldDesk variables in the environment and an empty home directory."""
    monkeypatch.delenv("BOLDDESK_DOMAIN", raising=False)
    monkeypatch.delenv("BOLDDESK_API_KEY", raising=False)
    monkeypatch.delenv("BOLDDESK_HTTP_TIMEOUT_SECONDS", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path
