"""Configuration loading and management."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional

from dotenv import load_dotenv

from repolingo.core.exceptions import ConfigurationError


def load_config(config_path: Optional[str] = None, env_file: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file (defaults to configs/default.yaml)
        env_file: Optional .env file; variables already set are kept

    Returns:
        Configuration dictionary
    """
    load_dotenv(env_file, override=False)

    if config_path is None:
        possible_paths = [
            Path("configs/default.yaml"),
            Path(__file__).parent.parent.parent / "configs" / "default.yaml"
        ]

        for path in possible_paths:
            if path.exists():
                config_path = str(path)
                break
        else:
            return override_with_env(get_default_config())

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        loaded = yaml.safe_load(f) or {}

    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Config file must contain a mapping: {config_path}")

    config = _merge(get_default_config(), loaded)
    return override_with_env(config)


def save_config(config: Dict[str, Any], config_path: str) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration dictionary
        config_path: Output path
    """
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w', encoding='utf-8') as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def override_with_env(config: Dict[str, Any]) -> Dict[str, Any]:
    """Override config with environment variables."""
    env_mappings = {
        "LINGO_API_KEY": ["api_keys", "lingo"],
        "OPENAI_API_KEY": ["api_keys", "openai"],
        "LIBRETRANSLATE_API_KEY": ["api_keys", "libre"],
        "LIBRETRANSLATE_URL": ["endpoints", "libre"],
        "REPOLINGO_ENGINE": ["translation", "engine"],
        "REPOLINGO_TIMEOUT": ["translation", "timeout"],
    }

    for env_var, path in env_mappings.items():
        value = os.getenv(env_var)
        if value:
            current = config
            for key in path[:-1]:
                if key not in current:
                    current[key] = {}
                current = current[key]
            current[path[-1]] = value

    timeout = config.get("translation", {}).get("timeout")
    if isinstance(timeout, str):
        try:
            config["translation"]["timeout"] = float(timeout)
        except ValueError:
            raise ConfigurationError(
                f"Invalid timeout: {timeout}",
                config_key="translation.timeout",
                invalid_value=timeout
            )

    return config


def get_default_config() -> Dict[str, Any]:
    """Get default configuration."""
    return {
        "translation": {
            "engine": "lingo",
            "timeout": 30.0,
            "fallback_language": "en",
            "detection_prefix_chars": 500,
            "detection_sample_chars": 1000,
            "cache_max_entries": 1024,
            "cache_ttl": 86400,
            "detection_cache_max_entries": 4096,
            "single_flight": True,
            "enable_masking": True,
            "masking": {
                "mask_inline_code": True,
                "mask_code_blocks": True
            }
        },
        "logging": {
            "level": "WARNING",
            "file": None
        },
        "api_keys": {
            "lingo": "",
            "openai": "",
            "libre": ""
        },
        "endpoints": {
            "libre": ""
        }
    }
