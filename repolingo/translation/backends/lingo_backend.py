"""Lingo.dev localization engine over its HTTP API."""

import os
from typing import Any, Dict, Optional

import httpx

from ..base import TranslationEngine
from ...core.exceptions import EngineError, EngineUnavailableError


class LingoEngine(TranslationEngine):
    """Lingo.dev engine: ``/recognize`` for detection, ``/i18n`` for localization."""

    name = "lingo"
    DEFAULT_API_URL = "https://engine.lingo.dev"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "lingo",
        api_url: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        api_key = api_key or os.getenv("LINGO_API_KEY") or None
        super().__init__(api_key, model)
        self.api_url = (api_url or os.getenv("LINGO_API_URL") or self.DEFAULT_API_URL).rstrip("/")
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.api_url,
                timeout=self.timeout,
                headers={
                    "Content-Type": "application/json; charset=utf-8",
                    "Authorization": f"Bearer {self.api_key}",
                },
            )
        return self._client

    async def _post(self, path: str, payload: Dict[str, Any]) -> Any:
        if not self.api_key:
            raise EngineUnavailableError(self.name, missing="LINGO_API_KEY")

        try:
            resp = await self._get_client().post(path, json=payload)
        except httpx.HTTPError as e:
            raise EngineError(self.name, f"request to {path} failed: {e}", original_error=e) from e

        if resp.status_code >= 400:
            raise EngineError(self.name, f"{path} returned HTTP {resp.status_code}: {resp.text[:200]}")

        try:
            return resp.json()
        except ValueError as e:
            raise EngineError(self.name, f"invalid JSON from {path}: {resp.text[:200]}", original_error=e) from e

    async def detect_locale(self, text: str) -> str:
        data = await self._post("/recognize", {"text": text})
        locale = data.get("locale") if isinstance(data, dict) else None
        if not isinstance(locale, str) or not locale:
            raise EngineError(self.name, "no locale in /recognize response")
        return locale

    async def localize(self, text: str, source_locale: str, target_locale: str) -> str:
        payload = {
            "params": {"fast": False},
            "locale": {"source": source_locale, "target": target_locale},
            "data": {"text": text},
        }
        data = await self._post("/i18n", payload)
        body = data.get("data") if isinstance(data, dict) else None
        result = body.get("text") if isinstance(body, dict) else None
        if not isinstance(result, str):
            raise EngineError(self.name, f"unexpected /i18n response: {str(data)[:200]}")
        return result

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def get_info(self) -> Dict:
        info = super().get_info()
        info["endpoint"] = self.api_url
        return info
