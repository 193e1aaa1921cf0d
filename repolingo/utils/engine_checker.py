"""
Engine configuration checker.

Reports which translation engines can be called with the current
environment, without making any network request.
"""

from __future__ import annotations
from typing import Dict, Optional, Tuple, Any
import logging

from repolingo.core.exceptions import ConfigurationError, EngineUnavailableError
from repolingo.translation.backends import ENGINES, create_engine

logger = logging.getLogger(__name__)

# Setting each engine needs before it is considered available
ENGINE_REQUIREMENTS: Dict[str, str] = {
    "lingo": "LINGO_API_KEY",
    "libre": "LIBRETRANSLATE_URL",
    "openai": "OPENAI_API_KEY",
}


def get_engine_status(engine: str, api_key: Optional[str] = None) -> Dict[str, Any]:
    """
    Get configuration status for an engine.

    Args:
        engine: Engine name
        api_key: Explicit key overriding the environment

    Returns:
        Status dictionary with availability and the missing setting, if any
    """
    status: Dict[str, Any] = {
        "engine": engine,
        "available": False,
        "requires": ENGINE_REQUIREMENTS.get(engine),
        "info": None,
        "error": None,
    }

    try:
        instance = create_engine(engine, api_key=api_key)
    except ConfigurationError as e:
        status["error"] = e.message
        return status

    status["available"] = instance.is_available()
    status["info"] = instance.get_info()
    if not status["available"]:
        status["error"] = f"{status['requires']} is not set"
    return status


def get_all_engines_status() -> Dict[str, Dict[str, Any]]:
    """Status for every registered engine."""
    return {name: get_engine_status(name) for name in ENGINES}


def validate_engine(
    engine: str,
    api_key: Optional[str] = None,
    raise_on_error: bool = True
) -> Tuple[bool, Optional[str]]:
    """
    Validate that an engine is configured and ready to use.

    Returns:
        Tuple of (is_valid, error_message)
    """
    status = get_engine_status(engine, api_key=api_key)
    if status["available"]:
        return True, None

    if raise_on_error:
        if status["requires"] is None:
            raise ConfigurationError(
                status["error"], config_key="engine", invalid_value=engine,
                valid_values=sorted(ENGINES)
            )
        raise EngineUnavailableError(engine, missing=status["requires"])

    logger.debug(f"Engine '{engine}' not usable: {status['error']}")
    return False, status["error"]
