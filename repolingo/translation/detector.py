"""
Source language detection with a prefix-fingerprint cache.

Detection looks only at the opening of a document: two texts that share the
first ``prefix_chars`` characters share one detection result, even when they
differ further on.
"""

import asyncio
import logging
from typing import Optional

from repolingo.translation.base import TranslationEngine
from repolingo.utils.cache import DetectionCache, prefix_fingerprint

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_LANGUAGE = "en"


class LanguageDetector:
    """Detects the source language and never lets detection abort a translation."""

    def __init__(
        self,
        engine: Optional[TranslationEngine] = None,
        cache: Optional[DetectionCache] = None,
        fallback_language: str = DEFAULT_FALLBACK_LANGUAGE,
        prefix_chars: int = 500,
        sample_chars: int = 1000,
        timeout: float = 30.0,
    ):
        self.engine = engine
        self.cache = cache if cache is not None else DetectionCache()
        self.fallback_language = fallback_language
        self.prefix_chars = prefix_chars
        self.sample_chars = sample_chars
        self.timeout = timeout
        self.engine_calls = 0

    async def detect(self, text: str) -> str:
        """Return the best-guess language code for ``text``."""
        if not text or not text.strip():
            return self.fallback_language

        fingerprint = prefix_fingerprint(text, self.prefix_chars)
        cached = self.cache.get(fingerprint)
        if cached is not None:
            logger.debug(f"Using cached source language: {cached}")
            return cached

        if self.engine is None or not self.engine.is_available():
            logger.info(f"No translation engine configured, defaulting to {self.fallback_language}")
            return self.fallback_language

        self.engine_calls += 1
        try:
            detected = await asyncio.wait_for(
                self.engine.detect_locale(text[:self.sample_chars]),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Language detection timed out after {self.timeout}s, defaulting to {self.fallback_language}")
            return self.fallback_language
        except Exception as e:
            logger.warning(f"Language detection error, defaulting to {self.fallback_language}: {e}")
            return self.fallback_language

        if not detected or not detected.strip():
            logger.warning(f"Engine returned no language, defaulting to {self.fallback_language}")
            return self.fallback_language

        detected = detected.strip()
        self.cache.set(fingerprint, detected)
        logger.info(f"Detected source language: {detected}")
        return detected
