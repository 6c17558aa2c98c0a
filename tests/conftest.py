"""Shared pytest fixtures."""

from collections.abc import Callable

import pytest

from ytsage.providers.base import TextGenerator
from ytsage.utils.retry import TEST_RETRY_POLICY, RetryPolicy


class ScriptedGenerator(TextGenerator):
    """Text generator returning canned responses (or raising) in order."""

    name = "scripted"

    def __init__(self, *responses: str | BaseException) -> None:
        self.responses = list(responses)
        self.prompts: list[str] = []

    async def generate(self, prompt: str, max_tokens: int = 2048) -> str:
        self.prompts.append(prompt)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def scripted_generator() -> Callable[..., ScriptedGenerator]:
    """Factory for generators with canned responses."""
    return ScriptedGenerator


@pytest.fixture
def fast_policy() -> RetryPolicy:
    """Retry policy with millisecond delays."""
    return TEST_RETRY_POLICY


@pytest.fixture
def recorded_sleeps() -> list[float]:
    return []


@pytest.fixture
def recording_sleep(recorded_sleeps: list[float]):
    """Sleep replacement that records requested delays without waiting."""

    async def sleep(seconds: float) -> None:
        recorded_sleeps.append(seconds)

    return sleep


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep tests away from real API keys and the user's config directory."""
    for var in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "ANTHROPIC_API_KEY"):
        monkeypatch.delenv(var, raising=False)
    config_dir = tmp_path / "config"
    monkeypatch.setattr("ytsage.utils.paths.get_config_dir", lambda: config_dir)
    monkeypatch.setattr("ytsage.config.manager.get_config_dir", lambda: config_dir)
