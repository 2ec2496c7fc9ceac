"""Tests for loading registry documents from files and URLs."""

import json

import pytest
import requests

from serdegen import utils
from serdegen.formats import Registry
from serdegen.utils import (
    RegistryLoaderError,
    load_registry,
    load_registry_from_file,
    load_registry_from_url,
    parse_registry_text,
)

DOCUMENT = {"Test": {"STRUCT": [{"a": {"SEQ": "U64"}}, {"b": {"TUPLE": ["U32", "U32"]}}]}}

YAML_DOCUMENT = """\
Test:
  STRUCT:
    - a:
        SEQ: U64
    - b:
        TUPLE:
          - U32
          - U32
"""


class FakeResponse:
    def __init__(self, text, status_code=200, content_type="application/json"):
        self.text = text
        self.status_code = status_code
        self.headers = {"content-type": content_type}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(response=self)


class TestParse:
    def test_json_then_yaml(self):
        assert parse_registry_text(json.dumps(DOCUMENT), "inline") == DOCUMENT
        assert parse_registry_text(YAML_DOCUMENT, "inline") == DOCUMENT

    def test_invalid_text(self):
        with pytest.raises(RegistryLoaderError, match="Invalid registry document"):
            parse_registry_text("Test: [unclosed", "inline")


class TestFiles:
    def test_json_file(self, tmp_path):
        path = tmp_path / "registry.json"
        path.write_text(json.dumps(DOCUMENT), encoding="utf-8")

        source, data = load_registry_from_file(path)
        assert source == f"📄 {path}"
        assert data == DOCUMENT

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "registry.yaml"
        path.write_text(YAML_DOCUMENT, encoding="utf-8")

        source, registry = load_registry(path)
        assert isinstance(registry, Registry)
        assert list(registry.names()) == ["Test"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_registry(tmp_path / "missing.yaml")

    def test_invalid_registry(self, tmp_path):
        path = tmp_path / "registry.yaml"
        path.write_text("A:\n  NEWTYPESTRUCT:\n    TYPENAME: Ghost\n", encoding="utf-8")

        with pytest.raises(RegistryLoaderError, match="Invalid registry"):
            load_registry(path)


class TestUrls:
    def test_json_url(self, monkeypatch):
        calls = []

        def fake_get(url, timeout):
            calls.append((url, timeout))
            return FakeResponse(json.dumps(DOCUMENT))

        monkeypatch.setattr(utils.requests, "get", fake_get)
        source, registry = load_registry("https://example.com/registry.json", timeout=5)

        assert source == "🌐 https://example.com/registry.json"
        assert calls == [("https://example.com/registry.json", 5)]
        assert "Test" in registry

    def test_yaml_url(self, monkeypatch):
        monkeypatch.setattr(
            utils.requests,
            "get",
            lambda url, timeout: FakeResponse(YAML_DOCUMENT, content_type="text/plain"),
        )
        _, data = load_registry_from_url("https://example.com/registry.yaml")
        assert data == DOCUMENT

    def test_http_error(self, monkeypatch):
        monkeypatch.setattr(
            utils.requests, "get", lambda url, timeout: FakeResponse("", status_code=404)
        )
        with pytest.raises(RegistryLoaderError, match="HTTP error 404"):
            load_registry_from_url("https://example.com/missing.json")

    @pytest.mark.parametrize(
        "error, message",
        [
            (requests.exceptions.Timeout, "timeout"),
            (requests.exceptions.ConnectionError, "Connection error"),
        ],
    )
    def test_request_failures(self, monkeypatch, error, message):
        def fake_get(url, timeout):
            raise error("boom")

        monkeypatch.setattr(utils.requests, "get", fake_get)
        with pytest.raises(RegistryLoaderError, match=message):
            load_registry_from_url("https://example.com/registry.json")

    def test_invalid_url(self):
        with pytest.raises(RegistryLoaderError, match="Invalid URL"):
            load_registry_from_url("not a url")
