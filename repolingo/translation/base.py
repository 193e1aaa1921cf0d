"""
Base translation engine interface.
All translation engines must inherit from TranslationEngine.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional


class TranslationEngine(ABC):
    """Abstract base class for translation engines.

    The pipeline depends on engines only through ``detect_locale`` and
    ``localize``; both are awaited under the pipeline's timeout.
    """

    name = "base"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key
        self.model = model

    @abstractmethod
    async def detect_locale(self, text: str) -> str:
        """
        Detect the language of a text sample.

        Args:
            text: Sample of the document (already truncated by the caller)

        Returns:
            Language code such as "en" or "pt-BR"
        """
        pass

    @abstractmethod
    async def localize(self, text: str, source_locale: str, target_locale: str) -> str:
        """
        Translate masked Markdown.

        Args:
            text: Markdown with code replaced by placeholder tokens
            source_locale: Source language code
            target_locale: Target language code

        Returns:
            Translated text, placeholders expected to survive untouched
        """
        pass

    def is_available(self) -> bool:
        """Check if engine is configured well enough to be called."""
        return bool(self.api_key)

    async def aclose(self) -> None:
        """Release network resources held by the engine."""
        return None

    def get_info(self) -> Dict:
        """Get engine information."""
        return {
            "name": self.name,
            "model": self.model,
            "available": self.is_available()
        }
