"""Translation engine implementations."""

from typing import Dict, Optional, Type

import httpx
import requests
from openai import OpenAIError

from ..base import TranslationEngine
from ...core.exceptions import ConfigurationError, EngineError
from .lingo_backend import LingoEngine
from .libre_backend import LibreTranslateEngine
from .openai_backend import OpenAIEngine

# Errors an engine call may raise that count as a translation outage
ENGINE_FAILURES = (
    EngineError,
    httpx.HTTPError,
    requests.RequestException,
    OpenAIError,
    ConnectionError,
)

ENGINES: Dict[str, Type[TranslationEngine]] = {
    "lingo": LingoEngine,
    "libre": LibreTranslateEngine,
    "openai": OpenAIEngine,
}


def create_engine(name: str, api_key: Optional[str] = None, **kwargs) -> TranslationEngine:
    """Instantiate an engine by name."""
    engine_cls = ENGINES.get(name.lower().strip())
    if engine_cls is None:
        raise ConfigurationError(
            f"Unknown translation engine: {name}",
            config_key="engine",
            invalid_value=name,
            valid_values=sorted(ENGINES),
        )
    return engine_cls(api_key=api_key, **kwargs)


__all__ = [
    'ENGINES',
    'ENGINE_FAILURES',
    'create_engine',
    'LingoEngine',
    'LibreTranslateEngine',
    'OpenAIEngine',
]
