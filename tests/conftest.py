from typing import Optional

import pytest

from askbot.models import ProviderResponse
from askbot.providers import AIProvider
from askbot.registry import ProviderRegistry
from askbot.storage import StateStore


class MockProvider(AIProvider):
    """Provider returning canned answers and recording prompts."""

    vendor = "mock"

    def __init__(self, answer: Optional[str] = "4", error: Optional[Exception] = None):
        super().__init__(endpoint="mock://", model="mock")
        self.answer = answer
        self.error = error
        self.prompts: list[str] = []
        self.closed = False

    async def _complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.answer

    async def close(self) -> None:
        self.closed = True


class RaisingProvider(AIProvider):
    """Provider whose get_response itself blows up."""

    vendor = "raising"

    async def _complete(self, prompt: str) -> str:
        raise AssertionError("unreachable")

    async def get_response(self, prompt: str) -> ProviderResponse:
        raise RuntimeError("socket exploded: secret-token-123")


class Recorder:
    """Collects ack and say calls in order."""

    def __init__(self, fail_ack: bool = False, fail_say: bool = False):
        self.calls: list[tuple[str, Optional[str]]] = []
        self.fail_ack = fail_ack
        self.fail_say = fail_say

    async def ack(self) -> None:
        self.calls.append(("ack", None))
        if self.fail_ack:
            raise ConnectionError("ack failed")

    async def say(self, message: str) -> None:
        self.calls.append(("say", message))
        if self.fail_say:
            raise ConnectionError("say failed")

    @property
    def messages(self) -> list[str]:
        return [text for kind, text in self.calls if kind == "say"]


@pytest.fixture
def store(tmp_path) -> StateStore:
    return StateStore(tmp_path / "user_state.json")


@pytest.fixture
def primary() -> MockProvider:
    return MockProvider(answer="4")


@pytest.fixture
def secondary() -> MockProvider:
    return MockProvider(answer="quatre")


@pytest.fixture
def registry(primary, secondary) -> ProviderRegistry:
    registry = ProviderRegistry()
    registry.register("primary", primary)
    registry.register("secondary", secondary)
    return registry


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()
