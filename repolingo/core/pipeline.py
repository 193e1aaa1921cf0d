"""
Markdown-safe translation pipeline for RepoLingo.

Orchestrates one request: resolve the source language, consult the cache,
mask code, call the engine, restore code, cache the result. Engine outages
never raise past this module; they come back as marked outcomes.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional
import asyncio
import logging

from repolingo.core.exceptions import ConfigurationError
from repolingo.core.models import (
    CacheKey, MaskedDocument, TranslationOutcome, TranslationStatus
)
from repolingo.masking.engine import MarkdownMaskingEngine, MaskingConfig
from repolingo.translation.base import TranslationEngine
from repolingo.translation.backends import ENGINE_FAILURES, create_engine
from repolingo.translation.detector import LanguageDetector
from repolingo.utils.cache import DetectionCache, TranslationCache

logger = logging.getLogger(__name__)

# Constructor argument each engine takes its endpoint URL through
_ENDPOINT_OPTIONS = {"lingo": "api_url", "libre": "endpoint"}


@dataclass
class PipelineConfig:
    """Complete configuration for the translation pipeline."""

    # Engine ("lingo", "libre", "openai"; empty for mock-only operation)
    engine: Optional[str] = "lingo"
    api_key: Optional[str] = None
    model_name: Optional[str] = None
    timeout: float = 30.0  # Seconds per engine call
    engine_options: Dict[str, Any] = field(default_factory=dict)  # Extra engine kwargs

    # Language detection
    fallback_language: str = "en"
    detection_prefix_chars: int = 500  # Cache fingerprint window
    detection_sample_chars: int = 1000  # Text sent to the engine

    # Caching
    cache_max_entries: int = 1024
    cache_ttl: Optional[float] = 86400
    detection_cache_max_entries: int = 4096
    single_flight: bool = True  # Share one engine call between identical requests

    # Masking
    enable_masking: bool = True
    masking_config: MaskingConfig = field(default_factory=MaskingConfig)

    # Degraded output markers
    mock_marker: str = "[MOCK {source}->{target}]"
    failure_marker: str = "[FAILED]"

    def validate(self) -> List[str]:
        """Validate configuration and return any issues."""
        issues = []

        if self.timeout <= 0:
            issues.append("timeout must be positive")

        if self.detection_prefix_chars < 1:
            issues.append("detection_prefix_chars must be at least 1")

        if self.detection_sample_chars < self.detection_prefix_chars:
            issues.append("detection_sample_chars must not be smaller than detection_prefix_chars")

        if self.cache_max_entries < 1 or self.detection_cache_max_entries < 1:
            issues.append("cache sizes must be at least 1")

        if self.cache_ttl is not None and self.cache_ttl <= 0:
            issues.append("cache_ttl must be positive or null")

        if not self.fallback_language:
            issues.append("fallback_language must not be empty")

        return issues

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PipelineConfig:
        """Build a config from the ``translation`` section of a config file."""
        known = {f.name for f in fields(cls)} - {"masking_config"}
        values = {k: v for k, v in data.items() if k in known}
        masking = data.get("masking") or {}
        if masking:
            values["masking_config"] = MaskingConfig(**masking)
        return cls(**values)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> PipelineConfig:
        """Build a config from a full ``load_config()`` dictionary."""
        pipeline_config = cls.from_dict(config.get("translation") or {})
        engine = pipeline_config.engine
        if engine:
            if not pipeline_config.api_key:
                pipeline_config.api_key = (config.get("api_keys") or {}).get(engine) or None
            endpoint = (config.get("endpoints") or {}).get(engine)
            if endpoint and engine in _ENDPOINT_OPTIONS:
                pipeline_config.engine_options.setdefault(_ENDPOINT_OPTIONS[engine], endpoint)
        return pipeline_config


class TranslationPipeline:
    """
    Markdown-safe translation orchestrator.

    Caches are process-lifetime objects owned by the pipeline unless injected,
    so several pipelines may share one cache.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        engine: Optional[TranslationEngine] = None,
        cache: Optional[TranslationCache] = None,
        detection_cache: Optional[DetectionCache] = None,
        masking_engine: Optional[MarkdownMaskingEngine] = None,
    ):
        self.config = config or PipelineConfig()

        issues = self.config.validate()
        if issues:
            raise ConfigurationError(f"Invalid pipeline configuration: {'; '.join(issues)}")

        self.engine = engine if engine is not None else self._create_engine()
        self.cache = cache if cache is not None else TranslationCache(
            max_entries=self.config.cache_max_entries,
            ttl=self.config.cache_ttl,
        )
        self.masking_engine = masking_engine or MarkdownMaskingEngine(self.config.masking_config)
        self.detector = LanguageDetector(
            engine=self.engine,
            cache=detection_cache if detection_cache is not None else DetectionCache(
                max_entries=self.config.detection_cache_max_entries
            ),
            fallback_language=self.config.fallback_language,
            prefix_chars=self.config.detection_prefix_chars,
            sample_chars=self.config.detection_sample_chars,
            timeout=self.config.timeout,
        )

        self._in_flight: Dict[CacheKey, asyncio.Task] = {}
        self.stats: Dict[str, int] = {
            "requests": 0,
            "cache_hits": 0,
            "deduplicated": 0,
            "engine_calls": 0,
            "mocked": 0,
            "failed": 0,
        }

        if self.engine is None or not self.engine.is_available():
            logger.warning("Translation engine not configured: responses will be mocked")

    def _create_engine(self) -> Optional[TranslationEngine]:
        if not self.config.engine:
            return None
        kwargs = dict(self.config.engine_options)
        if self.config.model_name:
            kwargs["model"] = self.config.model_name
        return create_engine(self.config.engine, api_key=self.config.api_key, **kwargs)

    async def translate(
        self,
        markdown: str,
        target_lang: str,
        source_lang: Optional[str] = None
    ) -> TranslationOutcome:
        """
        Translate Markdown while keeping its code untouched.

        Args:
            markdown: Pull request body or comment
            target_lang: Target language code
            source_lang: Source language code; detected when omitted or empty

        Returns:
            TranslationOutcome whose status is ok, mocked or failed
        """
        if not target_lang or not target_lang.strip():
            raise ConfigurationError(
                "target_lang is required",
                config_key="target_lang",
                invalid_value=target_lang
            )
        target_lang = target_lang.strip()
        self.stats["requests"] += 1

        if source_lang and source_lang.strip():
            source = source_lang.strip()
        else:
            source = await self.detector.detect(markdown or "")

        if not markdown or not markdown.strip():
            return TranslationOutcome(
                text=markdown or "",
                status=TranslationStatus.OK,
                source_lang=source,
                target_lang=target_lang,
            )

        key = CacheKey.for_text(markdown, source, target_lang)
        cached = self.cache.get(key)
        if cached is not None:
            self.stats["cache_hits"] += 1
            logger.debug(f"Serving {source}->{target_lang} from cache")
            return replace(cached, cached=True)

        if not self.config.single_flight:
            return await self._translate_uncached(markdown, source, target_lang, key)

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(
                self._translate_uncached(markdown, source, target_lang, key)
            )
            self._in_flight[key] = task
            task.add_done_callback(lambda t, k=key: self._forget(k, t))
        else:
            self.stats["deduplicated"] += 1
            logger.debug(f"Joining in-flight translation {source}->{target_lang}")

        # One waiter cancelling must not cancel the shared call
        return await asyncio.shield(task)

    async def translate_text(
        self,
        markdown: str,
        target_lang: str,
        source_lang: Optional[str] = None
    ) -> str:
        """Translate and return only the output text."""
        outcome = await self.translate(markdown, target_lang, source_lang)
        return outcome.text

    def _forget(self, key: CacheKey, task: asyncio.Task) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]

    async def _translate_uncached(
        self,
        markdown: str,
        source: str,
        target: str,
        key: CacheKey
    ) -> TranslationOutcome:
        if self.config.enable_masking:
            masked = self.masking_engine.protect(markdown)
        else:
            masked = MaskedDocument(masked_text=markdown)

        if self.engine is None or not self.engine.is_available():
            self.stats["mocked"] += 1
            marker = self.config.mock_marker.format(source=source, target=target.upper())
            return TranslationOutcome(
                text=self._echo(marker, masked),
                status=TranslationStatus.MOCKED,
                source_lang=source,
                target_lang=target,
            )

        logger.info(f"Translating {len(markdown)} chars from {source} to {target}")
        self.stats["engine_calls"] += 1
        try:
            translated = await asyncio.wait_for(
                self.engine.localize(masked.masked_text, source, target),
                timeout=self.config.timeout,
            )
        except asyncio.TimeoutError:
            return self._failed(masked, source, target, f"timed out after {self.config.timeout}s")
        except ENGINE_FAILURES as e:
            return self._failed(masked, source, target, str(e))

        if not isinstance(translated, str):
            return self._failed(
                masked, source, target,
                f"engine returned {type(translated).__name__} instead of text"
            )

        report = self.masking_engine.restore_with_report(translated, masked.spans)
        outcome = TranslationOutcome(
            text=report.text,
            status=TranslationStatus.OK,
            source_lang=source,
            target_lang=target,
            missing_placeholders=report.missing,
        )

        if report.complete:
            self.cache.set(key, outcome)
        else:
            logger.warning(
                f"Engine dropped {len(report.missing)}/{report.expected} placeholders; "
                f"result not cached"
            )
        return outcome

    def _echo(self, marker: str, masked: MaskedDocument) -> str:
        return self.masking_engine.restore(f"{marker} {masked.masked_text}", masked.spans)

    def _failed(self, masked: MaskedDocument, source: str, target: str, error: str) -> TranslationOutcome:
        self.stats["failed"] += 1
        logger.error(f"Translation engine error (falling back to echo): {error}")
        return TranslationOutcome(
            text=self._echo(self.config.failure_marker, masked),
            status=TranslationStatus.FAILED,
            source_lang=source,
            target_lang=target,
            error=error,
        )

    def get_statistics(self) -> Dict[str, Any]:
        """Get request and cache statistics."""
        return {
            **self.stats,
            "detections": self.detector.engine_calls,
            "in_flight": len(self._in_flight),
            "translation_cache": self.cache.get_stats(),
            "detection_cache": self.detector.cache.get_stats(),
            "engine": self.engine.get_info() if self.engine else None,
        }

    def clear_caches(self) -> None:
        """Drop every cached translation and detection."""
        self.cache.clear()
        self.detector.cache.clear()

    async def aclose(self) -> None:
        if self.engine is not None:
            await self.engine.aclose()

    async def __aenter__(self) -> TranslationPipeline:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
