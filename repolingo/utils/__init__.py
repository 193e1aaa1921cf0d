"""Utility functions and helpers."""

from .logger import setup_logger, get_logger
from .cache import BoundedCache, TranslationCache, DetectionCache
from .config_loader import load_config, save_config

__all__ = [
    'setup_logger',
    'get_logger',
    'BoundedCache',
    'TranslationCache',
    'DetectionCache',
    'load_config',
    'save_config'
]
