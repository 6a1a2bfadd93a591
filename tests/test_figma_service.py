import json

import pytest
import requests
from fastapi import HTTPException

from Services import figma_service


class FakeResponse:
    def __init__(self, status_code=200, payload=None, headers=None):
        self.status_code = status_code
        self.text = json.dumps(payload or {})
        self.headers = headers or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


@pytest.fixture(autouse=True)
def figma_env(monkeypatch):
    monkeypatch.setenv("FIGMA_TOKEN", "test-token")
    monkeypatch.setattr(figma_service, "FIGMA_API_BASE", "https://api.figma.test/v1")
    monkeypatch.setattr(figma_service, "FIGMA_IMAGE_MAX_RETRIES", 2)
    monkeypatch.setattr(figma_service, "FIGMA_IMAGE_RETRY_BACKOFF", 2.0)
    monkeypatch.setattr(figma_service, "_FIGMA_IMAGE_COOLDOWN", {})


@pytest.fixture
def sleeps(monkeypatch):
    calls = []
    monkeypatch.setattr(figma_service.time, "sleep", calls.append)
    return calls


def test_extract_file_key():
    assert figma_service.extract_file_key("https://www.figma.com/design/AbC123/My-File?node-id=1-2") == "AbC123"
    assert figma_service.extract_file_key("https://www.figma.com/file/XYZ/Old") == "XYZ"


def test_extract_file_key_rejects_other_urls():
    with pytest.raises(HTTPException) as exc:
        figma_service.extract_file_key("https://example.com/nothing")
    assert exc.value.status_code == 400


def test_extract_node_id():
    assert figma_service.extract_node_id("https://www.figma.com/design/A/B?node-id=12-34&t=x") == "12:34"
    assert figma_service.extract_node_id("https://www.figma.com/design/A/B?node-id=12%3A34") == "12:34"
    assert figma_service.extract_node_id("https://www.figma.com/design/A/B") is None


def test_get_figma_nodes_sends_ids_and_depth(monkeypatch):
    calls = []

    def fake_get(url, headers=None, params=None, timeout=None):
        calls.append((url, headers, params))
        return FakeResponse(payload={"name": "File", "nodes": {}})

    monkeypatch.setattr(figma_service.requests, "get", fake_get)

    data = figma_service.get_figma_nodes("KEY", "1:2", depth=3)

    assert data == {"name": "File", "nodes": {}}
    url, headers, params = calls[0]
    assert url == "https://api.figma.test/v1/files/KEY/nodes"
    assert headers == {"X-Figma-Token": "test-token"}
    assert params == {"ids": "1:2", "depth": 3}


def test_get_figma_file_raises_http_errors(monkeypatch):
    monkeypatch.setattr(figma_service.requests, "get", lambda *a, **kw: FakeResponse(status_code=404))

    with pytest.raises(requests.HTTPError):
        figma_service.get_figma_file("KEY")


def test_missing_token(monkeypatch):
    monkeypatch.delenv("FIGMA_TOKEN")

    with pytest.raises(RuntimeError):
        figma_service.get_figma_file("KEY")


def test_get_figma_images_batches_ids(monkeypatch, sleeps):
    batches = []

    def fake_get(url, headers=None, params=None, timeout=None):
        ids = params["ids"].split(",")
        batches.append(ids)
        return FakeResponse(payload={"images": {i: f"https://img/{i}.png" for i in ids}})

    monkeypatch.setattr(figma_service.requests, "get", fake_get)
    node_ids = [f"1:{i}" for i in range(150)]

    images = figma_service.get_figma_images("KEY", node_ids)

    assert [len(b) for b in batches] == [100, 50]
    assert len(images) == 150
    assert images["1:149"] == "https://img/1:149.png"
    assert sleeps == []


def test_get_figma_images_retries_rate_limits(monkeypatch, sleeps):
    responses = [
        FakeResponse(status_code=429, headers={"Retry-After": "5"}),
        FakeResponse(status_code=429),
        FakeResponse(payload={"images": {"1:1": "https://img/1.png"}}),
    ]
    monkeypatch.setattr(figma_service.requests, "get", lambda *a, **kw: responses.pop(0))

    images = figma_service.get_figma_images("KEY", ["1:1"], "svg")

    assert images == {"1:1": "https://img/1.png"}
    assert sleeps == [5.0, 4.0]


def test_get_figma_images_cooldown_after_exhausted_retries(monkeypatch, sleeps):
    calls = []

    def fake_get(*args, **kwargs):
        calls.append(kwargs.get("params"))
        return FakeResponse(status_code=429)

    monkeypatch.setattr(figma_service.requests, "get", fake_get)

    assert figma_service.get_figma_images("KEY", ["1:1"]) == {}
    assert len(calls) == 3

    assert figma_service.get_figma_images("KEY", ["1:1"]) == {}
    assert len(calls) == 3


def test_get_figma_images_without_ids():
    assert figma_service.get_figma_images("KEY", []) == {}
