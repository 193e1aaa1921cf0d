"""OpenAI chat-completions translation engine."""

import os
import re
from typing import Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError

from ..base import TranslationEngine
from ...core.exceptions import EngineError, EngineUnavailableError

_LOCALE_RE = re.compile(r"[A-Za-z]{2,3}(?:-[A-Za-z0-9]{2,4})?")


class OpenAIEngine(TranslationEngine):
    """OpenAI GPT-based translation engine."""

    name = "openai"

    SYSTEM_PROMPT = (
        "You translate GitHub pull request text written in Markdown. "
        "Keep the Markdown structure exactly as given. Tokens shaped like "
        "ZXQ...QXZ are code placeholders: copy them unchanged, never translate, "
        "reorder or drop them. Reply with the translation only."
    )

    def __init__(self, api_key: Optional[str] = None, model: str = "gpt-4o-mini"):
        api_key = api_key or os.getenv("OPENAI_API_KEY") or None
        super().__init__(api_key, model)

        if self.api_key:
            self.async_client = AsyncOpenAI(api_key=self.api_key)
        else:
            self.async_client = None

    def _build_messages(self, text: str, source_locale: str, target_locale: str) -> List[Dict]:
        return [
            {"role": "system", "content": self.SYSTEM_PROMPT},
            {
                "role": "user",
                "content": f"Translate the following text from {source_locale} to {target_locale}:\n\n{text}"
            },
        ]

    async def _complete(self, messages: List[Dict], max_tokens: int) -> str:
        if not self.async_client:
            raise EngineUnavailableError(self.name, missing="OPENAI_API_KEY")

        try:
            response = await self.async_client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=0.0,
                max_tokens=max_tokens
            )
        except OpenAIError as e:
            raise EngineError(self.name, str(e), original_error=e) from e

        content = response.choices[0].message.content if response.choices else None
        if content is None:
            raise EngineError(self.name, "empty completion")
        return content

    async def detect_locale(self, text: str) -> str:
        messages = [
            {
                "role": "system",
                "content": "Identify the language of the user's text. Reply with its BCP 47 code only, e.g. en, es, pt-BR."
            },
            {"role": "user", "content": text},
        ]
        reply = (await self._complete(messages, max_tokens=8)).strip()
        match = _LOCALE_RE.search(reply)
        if not match:
            raise EngineError(self.name, f"unrecognized locale reply: {reply!r}")
        return match.group(0)

    async def localize(self, text: str, source_locale: str, target_locale: str) -> str:
        messages = self._build_messages(text, source_locale, target_locale)
        return (await self._complete(messages, max_tokens=4096)).strip("\n")

    async def aclose(self) -> None:
        if self.async_client is not None:
            await self.async_client.close()
