"""Markdown code protection."""
