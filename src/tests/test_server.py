from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from news_reader.errors import NetworkTimeout, UpstreamRateLimited, UpstreamUnauthorized
from news_reader.proxy import ProxyResult
from news_reader import server
from news_reader.server import app, get_proxy, get_settings
from news_reader.settings import Settings


@pytest.fixture
def fake_proxy():
    return MagicMock()


@pytest.fixture
def test_settings(tmp_path):
    return Settings(UPLOAD_DIR=str(tmp_path / "uploads"), MAX_UPLOAD_BYTES=10)


@pytest.fixture
def client(fake_proxy, test_settings):
    app.dependency_overrides[get_proxy] = lambda: fake_proxy
    app.dependency_overrides[get_settings] = lambda: test_settings
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_news_returns_payload(client, fake_proxy, payload_factory):
    payload = payload_factory(count=2, total=2)
    fake_proxy.get.return_value = ProxyResult(payload=payload, cached=True)

    resp = client.get("/api/news", params={"query": "tech", "page": 3})

    assert resp.status_code == 200
    assert resp.json() == payload
    assert resp.headers["X-Cache"] == "HIT"
    fake_proxy.get.assert_called_once_with("tech", 3)


def test_news_defaults(client, fake_proxy, payload_factory):
    fake_proxy.get.return_value = ProxyResult(payload=payload_factory(count=0, total=0))
    resp = client.get("/api/news")
    assert resp.status_code == 200
    fake_proxy.get.assert_called_once_with("", 1)


@pytest.mark.parametrize(
    "error, status, code",
    [
        (UpstreamRateLimited(), 429, "rate_limited"),
        (UpstreamUnauthorized(), 401, "unauthorized"),
        (NetworkTimeout(), 503, "network_timeout"),
    ],
)
def test_news_errors_become_json(client, fake_proxy, error, status, code):
    fake_proxy.get.side_effect = error
    resp = client.get("/api/news", params={"query": "tech"})
    assert resp.status_code == status
    body = resp.json()
    assert body["error"] == code
    assert body["message"] == error.user_message


def test_news_rejects_bad_page(client):
    assert client.get("/api/news", params={"page": 0}).status_code == 422


def test_upload_list_serve_delete(client):
    resp = client.post("/api/upload", files={"file": ("notes.txt", b"hello", "text/plain")})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    stored = body["data"]["filename"]
    assert stored.endswith("-notes.txt")
    assert body["data"] == {"url": f"/uploads/{stored}", "filename": stored, "size": 5}

    files = client.get("/api/files").json()
    assert files == {"success": True, "files": [{"filename": stored, "size": 5}]}

    served = client.get(f"/uploads/{stored}")
    assert served.status_code == 200
    assert served.content == b"hello"
    assert served.headers["content-disposition"].startswith("inline")

    deleted = client.delete(f"/api/upload/{stored}")
    assert deleted.json() == {"success": True, "message": "File deleted successfully"}
    assert client.get("/api/files").json()["files"] == []


def test_delete_missing_file(client):
    resp = client.delete("/api/upload/nothing.txt")
    assert resp.status_code == 404
    assert resp.json()["success"] is False


def test_serve_missing_file(client):
    assert client.get("/uploads/nothing.txt").status_code == 404


def test_upload_too_large(client):
    resp = client.post("/api/upload", files={"file": ("big.bin", b"x" * 11, "application/octet-stream")})
    assert resp.status_code == 413
    assert resp.json()["success"] is False
    assert client.get("/api/files").json()["files"] == []


def test_upload_without_file(client):
    resp = client.post("/api/upload", data={"note": "no file"})
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "No file uploaded"}


def test_healthz(client):
    assert client.get("/healthz").json()["status"] == "ok"


def test_failed_write_leaves_no_partial_file(client, monkeypatch):
    def failing_store(src, dest, limit):
        dest.write_bytes(b"par")
        raise OSError("disk full")

    monkeypatch.setattr(server, "_store_upload", failing_store)
    resp = client.post("/api/upload", files={"file": ("notes.txt", b"hello", "text/plain")})

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "Failed to store file"}
    assert client.get("/api/files").json()["files"] == []
