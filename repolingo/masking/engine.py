"""
Markdown masking engine for RepoLingo.

Code content (inline code spans, fenced and indented code blocks) is swapped
for opaque placeholder tokens before text reaches a translation engine, and
swapped back afterwards. Parsing uses markdown-it-py; the edited token stream
is serialized back to Markdown with mdformat's renderer so that every masking
call formats the document the same way.
"""

from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Match, Pattern, Tuple
import logging

from markdown_it import MarkdownIt
from markdown_it.token import Token
from mdformat.renderer import MDRenderer

from repolingo.core.exceptions import MaskingError
from repolingo.core.models import (
    MaskedDocument, PlaceholderId, ProtectedSpan, RestoreReport, SpanKind, new_nonce
)

logger = logging.getLogger(__name__)

_BLOCK_CODE_TYPES = ("fence", "code_block")
_LINE_LEAD = re.compile(r"[ \t>]*\Z")
_LONGEST_BACKTICKS = re.compile(r"`+")
_MIN_FENCE = 3


@dataclass
class MaskingConfig:
    """Configuration for the masking engine."""
    mask_inline_code: bool = True
    mask_code_blocks: bool = True

    # Raise MaskingError instead of falling back to unmasked text
    strict_parsing: bool = False

    # Restoration
    tolerant_unmasking: bool = True  # Ignore case/whitespace damage around tokens
    log_validation_errors: bool = True


def build_markdown_parser() -> MarkdownIt:
    """CommonMark parser wired to render back to Markdown."""
    mdit = MarkdownIt("commonmark", renderer_cls=MDRenderer)
    mdit.options["mdformat"] = {}
    mdit.options["store_labels"] = True
    mdit.options["parser_extension"] = []
    mdit.options["codeformatters"] = {}
    return mdit


def required_fence(content: str, info: str = "") -> str:
    """Shortest fence that cannot be closed early by a line of ``content``."""
    # Backtick fences cannot carry backticks in their info string
    char = "~" if "`" in info else "`"
    runs = re.findall(re.escape(char) + "+", content)
    return char * max(_MIN_FENCE, max((len(r) for r in runs), default=0) + 1)


def render_code_span(content: str) -> str:
    """Render inline code with delimiters long enough for its content."""
    runs = _LONGEST_BACKTICKS.findall(content)
    fence = "`" * (max((len(r) for r in runs), default=0) + 1)
    needs_padding = (
        content.startswith("`") or content.endswith("`")
        or (content.startswith(" ") and content.endswith(" ") and content.strip())
    )
    if needs_padding:
        return f"{fence} {content} {fence}"
    return f"{fence}{content}{fence}"


class MarkdownMaskingEngine:
    """
    Protects code content in Markdown and restores it after translation.

    The engine holds no per-document state: every ``protect`` call gets a
    fresh nonce and counter, so one engine may serve concurrent requests.
    """

    def __init__(self, config: Optional[MaskingConfig] = None):
        self.config = config or MaskingConfig()
        self._parser = build_markdown_parser()

    # ------------------------------------------------------------------
    # Protection
    # ------------------------------------------------------------------

    def protect(self, markdown: str) -> MaskedDocument:
        """
        Mask every code node in ``markdown``.

        Never raises on bad Markdown unless ``strict_parsing`` is set; a
        parser or renderer failure yields the original text with no spans.
        """
        if not markdown or not markdown.strip():
            return MaskedDocument(masked_text=markdown)

        try:
            env: Dict = {}
            tokens = self._parser.parse(markdown, env)
            spans = self._mask_tokens(tokens)
            masked_text = self._parser.renderer.render(tokens, self._parser.options, env)
        except Exception as e:
            if self.config.strict_parsing:
                raise MaskingError("Failed to mask Markdown", original_error=e) from e
            logger.warning(f"Markdown masking failed, translating unprotected text: {e}")
            return MaskedDocument(masked_text=markdown, parse_failed=True)

        masked_text = self._widen_fences(masked_text, spans)

        # The renderer always terminates the document with a newline
        if not markdown.endswith("\n") and masked_text.endswith("\n"):
            masked_text = masked_text[:-1]

        logger.debug(f"Masked {len(spans)} code spans")
        return MaskedDocument(masked_text=masked_text, spans=spans)

    def _mask_tokens(self, tokens: List[Token]) -> Dict[PlaceholderId, ProtectedSpan]:
        nonce = new_nonce()
        spans: Dict[PlaceholderId, ProtectedSpan] = {}

        def register(kind: SpanKind, content: str, info: str = "", fence: str = "") -> PlaceholderId:
            pid = PlaceholderId(nonce=nonce, index=len(spans))
            spans[pid] = ProtectedSpan(
                placeholder_id=pid,
                kind=kind,
                original_content=content,
                info=info,
                fence=fence,
            )
            return pid

        for token in tokens:
            if token.type in _BLOCK_CODE_TYPES:
                if not self.config.mask_code_blocks:
                    continue
                # Block content ends with a newline the fence renderer relies on
                body = token.content[:-1] if token.content.endswith("\n") else token.content
                info = token.info.strip()
                pid = register(SpanKind.CODE_BLOCK, body, info, required_fence(body, info))
                token.content = pid.token + "\n"
            elif token.type == "inline" and token.children:
                if not self.config.mask_inline_code:
                    continue
                for child in token.children:
                    if child.type == "code_inline":
                        pid = register(SpanKind.INLINE_CODE, child.content)
                        child.content = pid.token

        return spans

    @staticmethod
    def _widen_fences(masked_text: str, spans: Dict[PlaceholderId, ProtectedSpan]) -> str:
        """
        Replace the fences rendered around block placeholders with fences
        sized for the original body.

        The renderer picks fence length from the placeholder, which never
        contains backticks, so a body holding a fence of its own would
        otherwise close the block early once restored.
        """
        for pid, span in spans.items():
            if span.kind is not SpanKind.CODE_BLOCK or len(span.fence) <= _MIN_FENCE:
                continue
            pattern = re.compile(
                r"^(?P<open_lead>[^\n]*?)(?P<fence>`{3,}|~{3,})(?P<info>[^\n]*)\n"
                r"(?P<lead>[ \t>]*)" + re.escape(pid.token) + r"\n"
                r"(?P<close_lead>[ \t>]*)(?P=fence)(?P<trail>[ \t]*)$",
                re.MULTILINE,
            )
            masked_text = pattern.sub(
                lambda m, f=span.fence, t=pid.token: (
                    f"{m['open_lead']}{f}{m['info']}\n"
                    f"{m['lead']}{t}\n"
                    f"{m['close_lead']}{f}{m['trail']}"
                ),
                masked_text,
                count=1,
            )
        return masked_text

    # ------------------------------------------------------------------
    # Restoration
    # ------------------------------------------------------------------

    def restore(self, translated_text: str, spans: Dict[PlaceholderId, ProtectedSpan]) -> str:
        """Substitute every placeholder in ``translated_text`` with its content."""
        return self.restore_with_report(translated_text, spans).text

    def restore_with_report(
        self,
        translated_text: str,
        spans: Dict[PlaceholderId, ProtectedSpan]
    ) -> RestoreReport:
        """
        Restore placeholders and report which ones the engine dropped.

        Missing placeholders leave their content absent; they are logged,
        never raised.
        """
        if not spans:
            return RestoreReport(text=translated_text, expected=0, restored=0)

        text = translated_text
        restored = 0
        missing: List[str] = []

        for pid, span in spans.items():
            pattern = self._span_pattern(span)
            text, count = pattern.subn(lambda m, s=span: self._replacement(m, s), text)
            if count:
                restored += 1
            else:
                missing.append(pid.token)

        if missing and self.config.log_validation_errors:
            logger.warning(
                f"Restored {restored}/{len(spans)} protected spans; "
                f"engine dropped: {missing}"
            )
        return RestoreReport(text=text, expected=len(spans), restored=restored, missing=missing)

    def _span_pattern(self, span: ProtectedSpan) -> Pattern[str]:
        pid = span.placeholder_id
        if self.config.tolerant_unmasking:
            core = pid.pattern().pattern
        else:
            core = re.escape(pid.token)
        flags = re.IGNORECASE if self.config.tolerant_unmasking else 0

        if span.kind is SpanKind.INLINE_CODE:
            # Consume whatever backtick delimiters survived translation
            return re.compile(r"(?:`+[ \t]*)?" + core + r"(?:[ \t]*`+)?", flags)
        if not span.original_content:
            # An empty block has no body line: drop the whole placeholder line
            return re.compile(r"^[ \t>]*" + core + r"[ \t]*\n|" + core + r"[ \t]*", flags | re.MULTILINE)
        return re.compile(core + r"[ \t]*", flags)

    @staticmethod
    def _replacement(match: Match[str], span: ProtectedSpan) -> str:
        if span.kind is SpanKind.INLINE_CODE:
            return render_code_span(span.original_content)

        # Code nested in blockquotes or list items needs its line prefix
        # repeated on every restored line.
        source = match.string
        line_start = source.rfind("\n", 0, match.start()) + 1
        lead = source[line_start:match.start()]
        body = span.original_content
        if lead and _LINE_LEAD.match(lead) and "\n" in body:
            body = body.replace("\n", "\n" + lead)
        return body

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def count_placeholders(self, text: str, spans: Dict[PlaceholderId, ProtectedSpan]) -> int:
        """Number of placeholder occurrences still present in ``text``."""
        return sum(len(pid.pattern().findall(text)) for pid in spans)

    def validate_masks(
        self,
        translated_text: str,
        spans: Dict[PlaceholderId, ProtectedSpan]
    ) -> Tuple[bool, List[str]]:
        """
        Check that each placeholder survived translation.

        Returns:
            Tuple of (is_valid, list_of_missing_tokens)
        """
        missing = [pid.token for pid in spans if not pid.pattern().search(translated_text)]
        return len(missing) == 0, missing
