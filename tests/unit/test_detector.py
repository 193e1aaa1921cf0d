"""Unit tests for source language detection."""

import pytest

from repolingo.translation.detector import LanguageDetector


@pytest.mark.asyncio
async def test_detects_and_caches(counting_engine):
    counting_engine.locale = "de"
    detector = LanguageDetector(engine=counting_engine)

    assert await detector.detect("Hallo Welt, das ist ein Test.") == "de"
    assert await detector.detect("Hallo Welt, das ist ein Test.") == "de"
    assert counting_engine.detect_calls == 1


@pytest.mark.asyncio
async def test_shared_prefix_is_not_redetected(counting_engine):
    """Texts that differ only past the prefix window share one detection."""
    detector = LanguageDetector(engine=counting_engine, prefix_chars=20)

    await detector.detect("Same opening words.. then English")
    counting_engine.locale = "fr"
    result = await detector.detect("Same opening words.. puis du français")

    assert result == "en"
    assert counting_engine.detect_calls == 1


@pytest.mark.asyncio
async def test_sample_is_truncated(counting_engine):
    seen = []

    async def record(text):
        seen.append(text)
        return "en"

    counting_engine.detect_locale = record
    detector = LanguageDetector(engine=counting_engine, sample_chars=10)
    await detector.detect("0123456789abcdef")

    assert seen == ["0123456789"]


@pytest.mark.asyncio
async def test_no_engine_falls_back():
    detector = LanguageDetector(engine=None, fallback_language="en")

    assert await detector.detect("Bonjour tout le monde") == "en"
    assert len(detector.cache) == 0


@pytest.mark.asyncio
async def test_unavailable_engine_falls_back(unavailable_engine):
    detector = LanguageDetector(engine=unavailable_engine)

    assert await detector.detect("Hola a todos") == "en"


@pytest.mark.asyncio
async def test_engine_error_falls_back_without_caching(failing_engine):
    detector = LanguageDetector(engine=failing_engine, fallback_language="en")

    assert await detector.detect("Hola a todos") == "en"
    assert len(detector.cache) == 0


@pytest.mark.asyncio
async def test_timeout_falls_back(slow_engine):
    detector = LanguageDetector(engine=slow_engine, timeout=0.05)

    assert await detector.detect("Hola a todos") == "en"


@pytest.mark.asyncio
async def test_empty_text(counting_engine):
    detector = LanguageDetector(engine=counting_engine, fallback_language="en")

    assert await detector.detect("   ") == "en"
    assert counting_engine.detect_calls == 0
