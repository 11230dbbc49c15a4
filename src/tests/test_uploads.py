from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests
from fastapi.testclient import TestClient

from news_reader.errors import NetworkTimeout, NetworkUnreachable, UploadFailed
from news_reader.screens import format_size
from news_reader.server import app, get_settings
from news_reader.settings import Settings
from news_reader.uploads import UploadClient


@pytest.fixture
def uploads(tmp_path):
    test_settings = Settings(UPLOAD_DIR=str(tmp_path / "stored"), MAX_UPLOAD_BYTES=64)
    app.dependency_overrides[get_settings] = lambda: test_settings
    yield UploadClient("http://testserver", session=TestClient(app))
    app.dependency_overrides.clear()


def test_upload_list_and_delete(uploads, tmp_path):
    local = tmp_path / "report.txt"
    local.write_bytes(b"quarterly numbers")

    data = uploads.upload(str(local))
    assert data.filename.endswith("-report.txt")
    assert data.size == 17
    assert data.url == f"/uploads/{data.filename}"

    files = uploads.list_files()
    assert [(f.filename, f.size) for f in files] == [(data.filename, 17)]

    served = uploads.session.get(uploads.file_url(data.filename))
    assert served.content == b"quarterly numbers"

    uploads.delete(data.filename)
    assert uploads.list_files() == []


def test_delete_unknown_file(uploads):
    with pytest.raises(UploadFailed, match="File not found"):
        uploads.delete("missing.txt")


def test_oversized_upload_is_refused(uploads, tmp_path):
    local = tmp_path / "big.bin"
    local.write_bytes(b"x" * 65)
    with pytest.raises(UploadFailed, match="too large"):
        uploads.upload(str(local))
    assert uploads.list_files() == []


def test_missing_local_file_never_calls_backend(tmp_path):
    session = MagicMock()
    client = UploadClient("http://backend.test", session=session)
    with pytest.raises(UploadFailed):
        client.upload(str(tmp_path / "nope.txt"))
    session.post.assert_not_called()


def test_urls_are_built_from_base():
    client = UploadClient("http://backend.test:3001/", session=MagicMock())
    assert client.url_for("api/files") == "http://backend.test:3001/api/files"
    assert client.file_url("1-a b.txt") == "http://backend.test:3001/uploads/1-a%20b.txt"


def test_network_failures_are_typed():
    client = UploadClient("http://backend.test")
    with patch.object(client.session, "get", side_effect=requests.Timeout()):
        with pytest.raises(NetworkTimeout):
            client.list_files()
    with patch.object(client.session, "get", side_effect=requests.ConnectionError()):
        with pytest.raises(NetworkUnreachable):
            client.list_files()


def test_non_json_answer_is_an_upload_failure():
    client = UploadClient("http://backend.test", session=MagicMock())
    client.session.get.return_value.status_code = 502
    client.session.get.return_value.json.side_effect = ValueError("html")
    with pytest.raises(UploadFailed, match="502"):
        client.list_files()


@pytest.mark.parametrize(
    "size, text",
    [(17, "17 B"), (2048, "2.0 KB"), (5 * 1024 * 1024, "5.0 MB")],
)
def test_format_size(size, text):
    assert format_size(size) == text
