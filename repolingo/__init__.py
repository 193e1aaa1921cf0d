"""
RepoLingo: Markdown-safe translation of GitHub pull request text.

Translates pull request descriptions and comments while keeping inline
code, code blocks and Markdown structure untouched.

Usage:
    from repolingo import TranslationPipeline, PipelineConfig

    pipeline = TranslationPipeline(PipelineConfig(engine="lingo"))
    outcome = await pipeline.translate("Run `npm test` please.", "es")
    print(outcome.status, outcome.text)
"""

__version__ = "1.0.0"
__author__ = "RepoLingo Team"
__license__ = "MIT"

from repolingo.core.models import (
    PlaceholderId,
    SpanKind,
    ProtectedSpan,
    MaskedDocument,
    RestoreReport,
    CacheKey,
    TranslationStatus,
    TranslationOutcome,
)
from repolingo.core.exceptions import (
    RepoLingoError,
    EngineError,
    EngineUnavailableError,
    ConfigurationError,
    MaskingError,
    CacheError,
)
from repolingo.masking.engine import MarkdownMaskingEngine, MaskingConfig
from repolingo.translation.base import TranslationEngine
from repolingo.translation.detector import LanguageDetector
from repolingo.core.pipeline import TranslationPipeline, PipelineConfig

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "PlaceholderId", "SpanKind", "ProtectedSpan", "MaskedDocument",
    "RestoreReport", "CacheKey", "TranslationStatus", "TranslationOutcome",
    "RepoLingoError", "EngineError", "EngineUnavailableError",
    "ConfigurationError", "MaskingError", "CacheError",
    "MarkdownMaskingEngine", "MaskingConfig",
    "TranslationEngine", "LanguageDetector",
    "TranslationPipeline", "PipelineConfig",
]
