"""Shared fixtures for agents-mcp tests."""

import asyncio
from types import SimpleNamespace

import pytest

from agents_mcp.config import Settings
from agents_mcp.invoker import AgentInvoker
from agents_mcp.store import PresetStore
from agents_mcp.tools import AgentTools

DEFAULT_URL = "http://127.0.0.1:3030/v1"


def completion(content):
    """Minimal stand-in for an openai ChatCompletion."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeCompletions:
    """Records create() calls; returns ``content``, raises ``error`` or hangs."""

    def __init__(self, content="agent reply"):
        self.content = content
        self.error: Exception | None = None
        self.hang = False
        self.cancelled = False
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.hang:
            try:
                await asyncio.sleep(3600)
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        if self.error is not None:
            raise self.error
        return completion(self.content)


class FakeOpenAIClient:
    """Shape-compatible with AsyncOpenAI for what the invoker touches."""

    def __init__(self, base_url: str, api_key: str, timeout: float, completions: FakeCompletions):
        self.base_url = base_url
        self.api_key = api_key
        self.timeout = timeout
        self.chat = SimpleNamespace(completions=completions)
        self.closed = False

    async def close(self):
        self.closed = True


class ClientFactory:
    def __init__(self, completions: FakeCompletions):
        self.completions = completions
        self.created: list[FakeOpenAIClient] = []

    def __call__(self, base_url: str, api_key: str, timeout: float) -> FakeOpenAIClient:
        client = FakeOpenAIClient(base_url, api_key, timeout, self.completions)
        self.created.append(client)
        return client


@pytest.fixture
def settings(tmp_path):
    return Settings(
        base_url=DEFAULT_URL,
        api_key="test-key",
        model="default-model",
        timeout_ms=5_000,
        allow_custom_base_url=True,
        presets_dir=tmp_path / "presets",
    )


@pytest.fixture
def store(settings):
    s = PresetStore(settings.presets_dir)
    s.ensure_dir()
    return s


@pytest.fixture
def fake_completions():
    return FakeCompletions()


@pytest.fixture
def client_factory(fake_completions):
    return ClientFactory(fake_completions)


@pytest.fixture
def invoker(settings, client_factory):
    return AgentInvoker(settings, client_factory=client_factory)


@pytest.fixture
def tools(settings, store, invoker):
    return AgentTools(settings, store, invoker)
