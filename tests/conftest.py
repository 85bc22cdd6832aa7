"""Shared pytest fixtures for the blockless SDK test suite."""

import json
from typing import Any, Callable

import httpx
import pytest

from blockless.backends import clear_host_binding

EXAMPLE_URL = "https://example.com"


# ---------------------------------------------------------------------------
# Isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch, tmp_path):
    """Keep env overrides, .env files and registered bindings out of every test."""
    for name in ("BLESS_ENDPOINT_URL", "BLESS_FUNCTION_ID", "BLESS_HTTP_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    clear_host_binding()
    yield
    clear_host_binding()


# ---------------------------------------------------------------------------
# Reply envelopes
# ---------------------------------------------------------------------------


@pytest.fixture
def scrape_data() -> dict[str, Any]:
    """The ``data`` payload of a successful scrape of example.com."""
    return {
        "success": True,
        "timestamp": 1,
        "format": "markdown",
        "content": "hi",
        "metadata": {"url": EXAMPLE_URL, "status_code": 200},
    }


@pytest.fixture
def make_stdout() -> Callable[..., str]:
    """Build the JSON stdout document a function writes."""

    def _make(data: Any = None, *, success: bool = True, operation: str = "scrape",
              error: dict | None = None) -> str:
        doc: dict[str, Any] = {"success": success, "operation": operation, "url": EXAMPLE_URL}
        if data is not None:
            doc["data"] = data
        if error is not None:
            doc["error"] = error
        return json.dumps(doc)

    return _make


@pytest.fixture
def make_reply() -> Callable[..., dict]:
    """Build an outer reply envelope around a stdout string."""

    def _make(stdout: Any = "", *, exit_code: Any = 0, stderr: str = "", code: str = "200") -> dict:
        return {
            "code": code,
            "results": [
                {"result": {"stdout": stdout, "stderr": stderr, "exit_code": exit_code}}
            ],
        }

    return _make


# ---------------------------------------------------------------------------
# Mock execution endpoint
# ---------------------------------------------------------------------------


class RecordingEndpoint:
    """A fake function-execution endpoint served through ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.reply: Any = {}
        self.status_code = 200
        self.raw_body: str | None = None
        self.error: Exception | None = None
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.raw_body is not None:
            return httpx.Response(self.status_code, text=self.raw_body)
        return httpx.Response(self.status_code, json=self.reply)

    @property
    def last_body(self) -> dict:
        return json.loads(self.requests[-1].content)

    @property
    def last_stdin(self) -> dict:
        return json.loads(self.last_body["config"]["stdin"])


@pytest.fixture
def endpoint() -> RecordingEndpoint:
    return RecordingEndpoint()


# ---------------------------------------------------------------------------
# Fake host binding
# ---------------------------------------------------------------------------


class FakeHostBinding:
    """Stands in for a runtime-provided BlessCrawl binding."""

    instances: list["FakeHostBinding"] = []

    def __init__(self, config: dict) -> None:
        self.config = config
        self.calls: list[tuple[str, str, dict]] = []
        self.error: Exception | None = None
        FakeHostBinding.instances.append(self)

    async def _run(self, operation: str, url: str, options: dict) -> dict:
        self.calls.append((operation, url, options))
        if self.error is not None:
            raise self.error
        return {"operation": operation, "url": url}

    async def scrape(self, url, options):
        return await self._run("scrape", url, options)

    async def map(self, url, options):
        return await self._run("map", url, options)

    async def crawl(self, url, options):
        return await self._run("crawl", url, options)


@pytest.fixture
def host_binding():
    """Return the fake binding class with a fresh instance registry."""
    FakeHostBinding.instances = []
    return FakeHostBinding
