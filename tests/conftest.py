"""Shared fixtures: a scripted fake server and a virtual clock."""

import asyncio

import httpx
import pytest

from centraldogma.client.base_client import Client
from centraldogma.shared.config import Settings

BASE_URL = "http://dogma.test"


def entry_json(revision, content, path="/a.json"):
    return {
        "path": path,
        "type": "JSON",
        "content": content,
        "revision": revision,
        "url": f"/api/v1/projects/foo/repos/bar/contents{path}",
    }


def changed(revision, content=None):
    """A 200 watch response; with `content` it is a file watch result."""
    body = {"revision": revision}
    if content is not None:
        body["entry"] = entry_json(revision, content)
    return lambda request: httpx.Response(200, json=body)


def not_modified():
    return lambda request: httpx.Response(304)


def refused():
    def respond(request):
        raise httpx.ConnectError("Connection refused", request=request)

    return respond


def timed_out():
    def respond(request):
        raise httpx.ReadTimeout("timed out", request=request)

    return respond


def server_error(status=500, message="boom"):
    return lambda request: httpx.Response(status, json={"message": message})


class ScriptedServer:
    """Answers requests from a script; the last step repeats once the script runs out."""

    def __init__(self, *steps, clock=None):
        self.steps = list(steps)
        self.requests: list[httpx.Request] = []
        self.request_times: list[float] = []
        self.clock = clock

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.clock is not None:
            self.request_times.append(self.clock.now)
        step = self.steps.pop(0) if len(self.steps) > 1 else self.steps[0]
        return step(request)


class FakeClock:
    """
    Virtual time for the watch loop. Every sleep advances `now` instantly, except the
    `block_at`-th one (1-based), which hangs until cancelled.
    """

    def __init__(self, block_at=None):
        self.now = 0.0
        self.delays: list[float] = []
        self.block_at = block_at
        self.blocked = asyncio.Event()
        self.cancelled = False

    async def sleep(self, delay):
        self.delays.append(delay)
        if self.block_at is not None and len(self.delays) >= self.block_at:
            self.blocked.set()
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        self.now += delay
        await asyncio.sleep(0)


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        BASE_URL=BASE_URL,
        TOKEN=None,
        WATCH_TIMEOUT_S=60.0,
        WATCH_TIMEOUT_BUFFER_S=5.0,
    )


@pytest.fixture
def make_client(test_settings):
    def factory(handler, token=None, base_url=BASE_URL):
        return Client(base_url, token, settings=test_settings, transport=httpx.MockTransport(handler))

    return factory
