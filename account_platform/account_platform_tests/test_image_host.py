"""
Unit tests for the image host client.
"""
import os
from unittest.mock import patch

import httpx
import pytest

from account_platform.account_service.utils.image_host import ImageHost

UPLOAD_URL = "https://images.example.com/upload"


@pytest.fixture
def local_file(tmp_path):
    path = tmp_path / "avatar.png"
    path.write_bytes(b"\x89PNG fake")
    return str(path)


def _response(status_code, payload):
    return httpx.Response(status_code, json=payload, request=httpx.Request("POST", UPLOAD_URL))


def test_upload_returns_url_and_removes_local_file(local_file):
    host = ImageHost(UPLOAD_URL, api_key="k")
    with patch("account_platform.account_service.utils.image_host.httpx.post",
               return_value=_response(200, {"secure_url": "https://cdn.example.com/a.png"})) as post:
        result = host.upload(local_file)

    assert result == {"url": "https://cdn.example.com/a.png"}
    assert not os.path.exists(local_file)
    _, kwargs = post.call_args
    assert kwargs["headers"] == {"Authorization": "Bearer k"}
    assert "file" in kwargs["files"]


def test_upload_returns_none_on_http_error(local_file):
    host = ImageHost(UPLOAD_URL)
    with patch("account_platform.account_service.utils.image_host.httpx.post",
               return_value=_response(500, {"error": "boom"})):
        assert host.upload(local_file) is None
    assert not os.path.exists(local_file)


def test_upload_returns_none_on_transport_error(local_file):
    host = ImageHost(UPLOAD_URL)
    with patch("account_platform.account_service.utils.image_host.httpx.post",
               side_effect=httpx.ConnectError("refused")):
        assert host.upload(local_file) is None


def test_upload_returns_none_without_url_in_response(local_file):
    host = ImageHost(UPLOAD_URL)
    with patch("account_platform.account_service.utils.image_host.httpx.post",
               return_value=_response(200, {"id": "abc"})):
        assert host.upload(local_file) is None


def test_upload_skipped_when_host_not_configured(local_file):
    host = ImageHost("")
    with patch("account_platform.account_service.utils.image_host.httpx.post") as post:
        assert host.upload(local_file) is None
    post.assert_not_called()
    assert not os.path.exists(local_file)


def test_upload_of_nothing_is_none():
    assert ImageHost(UPLOAD_URL).upload(None) is None
