from __future__ import annotations

import json
import os

import httpx
import pytest

from discovery_client import BearerTokenAuthenticator, ClientConfig, DiscoveryClient

VERSION = "2020-08-30"


class RecordingHandler:
    def __init__(self, status_code: int = 200, body=None, text: str | None = None) -> None:
        self.status_code = status_code
        self.body = {"ok": True} if body is None and text is None else body
        self.text = text
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_path(self) -> str:
        return self.last.url.raw_path.decode("ascii").split("?", 1)[0]

    def last_json(self):
        return json.loads(self.last.content)


@pytest.fixture(autouse=True)
def _isolated_credentials(tmp_path, monkeypatch):
    for key in list(os.environ):
        if key.startswith("DISCOVERY_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("IBM_CREDENTIALS_FILE", str(tmp_path / "missing.env"))


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def make_client(handler):
    def _make(**overrides) -> DiscoveryClient:
        cfg_kwargs = {
            "version": VERSION,
            "service_url": "https://discovery.test/instances/abc",
            "authenticator": BearerTokenAuthenticator("secret-token"),
        }
        cfg_kwargs.update(overrides)
        return DiscoveryClient(ClientConfig(**cfg_kwargs), transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def client(make_client):
    c = make_client()
    yield c
    c.close()
