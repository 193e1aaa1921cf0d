"""
Core data models for RepoLingo.

Defines the typed values passed between the masking engine, the language
detector, the caches and the translation pipeline.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Pattern, Any
import hashlib
import re
import uuid


# Sentinels framing every placeholder token. Letters only, so neither
# Markdown nor a translation engine has punctuation to rewrite.
PLACEHOLDER_HEAD = "ZXQ"
PLACEHOLDER_TAIL = "QXZ"


class SpanKind(Enum):
    """Kinds of protected Markdown content."""
    INLINE_CODE = "inlineCode"
    CODE_BLOCK = "codeBlock"


class TranslationStatus(Enum):
    """How a translation outcome was produced."""
    OK = "ok"
    MOCKED = "mocked"
    FAILED = "failed"


def new_nonce() -> str:
    """Random per-call nonce embedded in placeholder tokens."""
    return uuid.uuid4().hex[:6].upper()


@dataclass(frozen=True)
class PlaceholderId:
    """Typed identifier for one protected span within a single masking call."""
    nonce: str
    index: int

    @property
    def token(self) -> str:
        """Token text written into the masked Markdown."""
        return f"{PLACEHOLDER_HEAD}{self.nonce}{self.index:04d}{PLACEHOLDER_TAIL}"

    def pattern(self) -> Pattern[str]:
        """Tolerant pattern: ignores case and whitespace the engine may insert."""
        parts = [PLACEHOLDER_HEAD, self.nonce, f"{self.index:04d}", PLACEHOLDER_TAIL]
        body = r"\s*".join(re.escape(p) for p in parts)
        return re.compile(body, re.IGNORECASE)

    def __str__(self) -> str:
        return self.token


@dataclass
class ProtectedSpan:
    """Code content shielded from the translation engine."""
    placeholder_id: PlaceholderId
    kind: SpanKind
    original_content: str
    info: str = ""  # fence language tag, code blocks only
    fence: str = ""  # fence string long enough for the body, code blocks only


@dataclass
class MaskedDocument:
    """Markdown after masking plus the spans needed to restore it."""
    masked_text: str
    spans: Dict[PlaceholderId, ProtectedSpan] = field(default_factory=dict)
    parse_failed: bool = False

    @property
    def span_count(self) -> int:
        return len(self.spans)

    def tokens(self) -> List[str]:
        return [pid.token for pid in self.spans]


@dataclass
class RestoreReport:
    """Result of restoring placeholders, with counts for mismatch detection."""
    text: str
    expected: int
    restored: int
    missing: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.missing


def content_hash(text: str) -> str:
    """Deterministic fingerprint of text used in cache keys."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class CacheKey:
    """Content-addressed key for the translation cache."""
    source_lang: str
    target_lang: str
    content_hash: str

    @classmethod
    def for_text(cls, text: str, source_lang: str, target_lang: str) -> CacheKey:
        return cls(source_lang, target_lang, content_hash(text))


@dataclass
class TranslationOutcome:
    """
    Structured pipeline result.

    ``text`` is always usable by callers. ``status`` tells a real translation
    apart from a mock echo or a failure echo.
    """
    text: str
    status: TranslationStatus
    source_lang: str
    target_lang: str
    cached: bool = False
    missing_placeholders: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is TranslationStatus.OK

    @property
    def is_degraded(self) -> bool:
        return self.status is not TranslationStatus.OK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "translation": self.text,
            "status": self.status.value,
            "source_lang": self.source_lang,
            "target_lang": self.target_lang,
            "cached": self.cached,
            "missing_placeholders": list(self.missing_placeholders),
            "error": self.error,
        }
