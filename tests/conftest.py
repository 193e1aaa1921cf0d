"""Pytest configuration and fixtures."""

import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest

from repolingo.core.exceptions import EngineError
from repolingo.translation.base import TranslationEngine


class CountingEngine(TranslationEngine):
    """Stub engine that echoes text with a prefix and counts calls."""

    name = "counting"

    def __init__(self, prefix: str = "[MOCK] ", locale: str = "en", delay: float = 0.0):
        super().__init__(api_key="test", model="test")
        self.prefix = prefix
        self.locale = locale
        self.delay = delay
        self.localize_calls = 0
        self.detect_calls = 0
        self.last_text = None
        self.last_locales = None

    async def detect_locale(self, text: str) -> str:
        self.detect_calls += 1
        return self.locale

    async def localize(self, text: str, source_locale: str, target_locale: str) -> str:
        self.localize_calls += 1
        self.last_text = text
        self.last_locales = (source_locale, target_locale)
        if self.delay:
            await asyncio.sleep(self.delay)
        return f"{self.prefix}{text}"


class UnavailableEngine(TranslationEngine):
    """Engine without credentials; must never be called."""

    name = "unavailable"

    def __init__(self):
        super().__init__(api_key=None)

    async def detect_locale(self, text: str) -> str:
        raise AssertionError("detect_locale called on unavailable engine")

    async def localize(self, text: str, source_locale: str, target_locale: str) -> str:
        raise AssertionError("localize called on unavailable engine")


class FailingEngine(TranslationEngine):
    """Engine whose every call fails like a network outage."""

    name = "failing"

    def __init__(self):
        super().__init__(api_key="test")
        self.localize_calls = 0

    async def detect_locale(self, text: str) -> str:
        raise EngineError(self.name, "connection reset")

    async def localize(self, text: str, source_locale: str, target_locale: str) -> str:
        self.localize_calls += 1
        raise EngineError(self.name, "connection reset")


class SlowEngine(TranslationEngine):
    """Engine that never answers within a short timeout."""

    name = "slow"

    def __init__(self, delay: float = 5.0):
        super().__init__(api_key="test")
        self.delay = delay

    async def detect_locale(self, text: str) -> str:
        await asyncio.sleep(self.delay)
        return "de"

    async def localize(self, text: str, source_locale: str, target_locale: str) -> str:
        await asyncio.sleep(self.delay)
        return text


@pytest.fixture
def counting_engine():
    return CountingEngine()


@pytest.fixture
def delayed_engine():
    """Counting engine that holds each call open long enough to overlap."""
    return CountingEngine(delay=0.05)


@pytest.fixture
def unavailable_engine():
    return UnavailableEngine()


@pytest.fixture
def failing_engine():
    return FailingEngine()


@pytest.fixture
def slow_engine():
    return SlowEngine()


@pytest.fixture
def masking_engine():
    from repolingo.masking.engine import MarkdownMaskingEngine
    return MarkdownMaskingEngine()


@pytest.fixture
def sample_markdown():
    """Pull request description with prose, inline code and a fenced block."""
    return (
        "## Summary\n"
        "\n"
        "This PR fixes `parse_args()` when `--verbose` is passed.\n"
        "\n"
        "```python\n"
        "def main():\n"
        "    return parse_args(sys.argv[1:])\n"
        "```\n"
        "\n"
        "- Run `pytest -q` before merging\n"
    )


@pytest.fixture
def clean_env(monkeypatch):
    """Remove engine credentials so nothing talks to the network."""
    for var in (
        "LINGO_API_KEY", "OPENAI_API_KEY", "LIBRETRANSLATE_URL",
        "LIBRETRANSLATE_API_KEY", "REPOLINGO_ENGINE", "REPOLINGO_TIMEOUT",
    ):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch
