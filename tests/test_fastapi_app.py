from __future__ import annotations

import json
from typing import Any

import pytest
from fastapi.testclient import TestClient

import markmap_generator.serve.fastapi_app as app_mod
import markmap_generator.serve.gemini as gemini_mod
from markmap_generator.common.schema import MAX_CHAR_LIMIT

ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.0-flash:generateContent"


class _FakeResponse:
    def __init__(self, status_code: int, json_data: Any = None, raw: str | None = None) -> None:
        self.status_code = status_code
        self._json = json_data
        self._raw = raw

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        if self._raw is not None:
            return json.loads(self._raw)
        return self._json


def _fake_client(response: _FakeResponse | None = None, exc: Exception | None = None, calls: list | None = None):
    class _FakeAsyncClient:
        def __init__(self, timeout: float | None = None) -> None:  # signature-compatible
            self.timeout = timeout

        async def __aenter__(self) -> "_FakeAsyncClient":
            return self

        async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
            return None

        async def post(self, url: str, headers: dict[str, str] | None = None, json: dict[str, Any] | None = None) -> _FakeResponse:  # noqa: A002
            if calls is not None:
                calls.append({"url": url, "headers": headers, "json": json})
            if exc is not None:
                raise exc
            return response

    return _FakeAsyncClient


def _gemini_reply(text: str) -> _FakeResponse:
    return _FakeResponse(200, {"candidates": [{"content": {"parts": [{"text": text}]}}]})


def _body(**overrides: Any) -> dict[str, Any]:
    body = {"text": "Some notes", "apiKey": "k-123", "apiEndpoint": ENDPOINT, "modelId": "gemini-2.0-flash"}
    body.update(overrides)
    return body


@pytest.fixture
def client() -> TestClient:
    return TestClient(app_mod.app)


def test_health_ok(client: TestClient) -> None:
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "model": "gemini-2.0-flash"}


@pytest.mark.parametrize("field", ["text", "apiKey", "apiEndpoint"])
def test_missing_parameters_rejected(client: TestClient, field: str) -> None:
    body = _body()
    del body[field]
    r = client.post("/api/generate-mindmap", json=body)
    assert r.status_code == 400
    assert r.json() == {"error": "Missing required parameters"}


def test_empty_parameter_rejected(client: TestClient) -> None:
    r = client.post("/api/generate-mindmap", json=_body(apiKey=""))
    assert r.status_code == 400
    assert r.json() == {"error": "Missing required parameters"}


def test_text_over_limit_rejected(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list = []
    monkeypatch.setattr(gemini_mod.httpx, "AsyncClient", _fake_client(_gemini_reply("x"), calls=calls))
    r = client.post("/api/generate-mindmap", json=_body(text="a" * (MAX_CHAR_LIMIT + 1)))
    assert r.status_code == 400
    message = r.json()["error"]
    assert str(MAX_CHAR_LIMIT + 1) in message
    assert str(MAX_CHAR_LIMIT) in message
    assert calls == []


def test_fenced_reply_is_unwrapped(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list = []
    monkeypatch.setattr(gemini_mod.httpx, "AsyncClient", _fake_client(_gemini_reply("```markdown\nHELLO\n```"), calls=calls))
    r = client.post("/api/generate-mindmap", json=_body())
    assert r.status_code == 200
    assert r.headers["content-type"] == "text/event-stream"
    assert r.headers["cache-control"] == "no-cache"
    assert r.text.endswith("\n")
    lines = [line for line in r.text.split("\n") if line]
    assert len(lines) == 1
    assert json.loads(lines[0]) == {"done": True, "markdown": "HELLO"}

    assert calls[0]["url"] == f"{ENDPOINT}?key=k-123"
    assert calls[0]["headers"] == {"Content-Type": "application/json"}
    prompt = calls[0]["json"]["contents"][0]["parts"][0]["text"]
    assert prompt.rstrip().endswith("Some notes")


def test_unfenced_reply_passes_through(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(gemini_mod.httpx, "AsyncClient", _fake_client(_gemini_reply("  # Title\n- a\n  ")))
    r = client.post("/api/generate-mindmap", json=_body())
    assert json.loads(r.text) == {"done": True, "markdown": "# Title\n- a"}


def test_missing_candidates_yields_empty_markdown(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(gemini_mod.httpx, "AsyncClient", _fake_client(_FakeResponse(200, {"candidates": []})))
    r = client.post("/api/generate-mindmap", json=_body())
    assert json.loads(r.text) == {"done": True, "markdown": ""}


def test_upstream_error_message_forwarded(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    reply = _FakeResponse(429, {"error": {"message": "quota exceeded"}})
    monkeypatch.setattr(gemini_mod.httpx, "AsyncClient", _fake_client(reply))
    r = client.post("/api/generate-mindmap", json=_body())
    assert r.status_code == 200
    assert json.loads(r.text) == {"error": "quota exceeded"}
    assert "done" not in r.text


def test_upstream_error_without_json_body(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    reply = _FakeResponse(502, raw="<html>Bad Gateway</html>")
    monkeypatch.setattr(gemini_mod.httpx, "AsyncClient", _fake_client(reply))
    r = client.post("/api/generate-mindmap", json=_body())
    assert json.loads(r.text) == {"error": "Failed to generate mind map"}


def test_transport_failure_becomes_error_line(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        gemini_mod.httpx, "AsyncClient", _fake_client(exc=gemini_mod.httpx.ConnectError("connection refused"))
    )
    r = client.post("/api/generate-mindmap", json=_body())
    assert r.status_code == 200
    assert json.loads(r.text) == {"error": "connection refused"}


def test_malformed_body_is_internal_error(client: TestClient) -> None:
    r = client.post(
        "/api/generate-mindmap",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert r.status_code == 500
    assert r.json()["error"]
