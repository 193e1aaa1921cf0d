"""Core models, errors and the translation pipeline."""
