"""LibreTranslate engine (free, no-key by default, endpoint configurable)."""

import asyncio
import os
from typing import Any, Dict, Optional

import requests

from ..base import TranslationEngine
from ...core.exceptions import EngineError, EngineUnavailableError


class LibreTranslateEngine(TranslationEngine):
    """LibreTranslate HTTP engine."""

    name = "libre"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "libre",
        endpoint: Optional[str] = None,
        timeout: float = 8.0,
    ):
        api_key = api_key or os.getenv("LIBRETRANSLATE_API_KEY") or None
        super().__init__(api_key, model)
        self.endpoint = endpoint if endpoint is not None else os.getenv("LIBRETRANSLATE_URL", "")
        self.timeout = timeout

    def _post_sync(self, path: str, payload: Dict[str, Any]) -> Any:
        if not self.endpoint:
            raise EngineUnavailableError(self.name, missing="LIBRETRANSLATE_URL")

        url = f"{self.endpoint.rstrip('/')}{path}"
        if self.api_key:
            payload["api_key"] = self.api_key

        try:
            resp = requests.post(url, json=payload, timeout=self.timeout)
            resp.raise_for_status()

            if not resp.text or not resp.text.strip():
                raise ValueError("Empty response from LibreTranslate")

            try:
                return resp.json()
            except ValueError:
                raise ValueError(f"Invalid JSON response from LibreTranslate: {resp.text[:200]}")

        except requests.exceptions.RequestException as e:
            raise EngineError(self.name, f"request failed: {e}", original_error=e) from e
        except ValueError as e:
            raise EngineError(self.name, f"response error: {e}", original_error=e) from e

    def detect_locale_sync(self, text: str) -> str:
        data = self._post_sync("/detect", {"q": text})
        # [{"language": "en", "confidence": 90.0}, ...], best first
        best = data[0] if isinstance(data, list) and data else None
        if not isinstance(best, dict) or not isinstance(best.get("language"), str) or not best["language"]:
            raise EngineError(self.name, "no language in /detect response")
        return data[0]["language"]

    def localize_sync(self, text: str, source_locale: str, target_locale: str) -> str:
        payload = {
            "q": text,
            "source": source_locale,
            "target": target_locale,
            "format": "text",
        }
        data = self._post_sync("/translate", payload)
        translation = data.get("translatedText") if isinstance(data, dict) else None
        if not isinstance(translation, str):
            raise EngineError(self.name, "no translatedText in /translate response")
        return translation

    # requests blocks, so the async interface runs it off the event loop
    async def detect_locale(self, text: str) -> str:
        return await asyncio.to_thread(self.detect_locale_sync, text)

    async def localize(self, text: str, source_locale: str, target_locale: str) -> str:
        return await asyncio.to_thread(self.localize_sync, text, source_locale, target_locale)

    def is_available(self) -> bool:
        return bool(self.endpoint)

    def get_info(self) -> Dict:
        info = super().get_info()
        info["endpoint"] = self.endpoint or None
        return info
