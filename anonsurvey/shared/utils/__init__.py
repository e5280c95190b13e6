"""Shared utilities for the questionnaire service."""
from .sanitize import HTML_ESCAPE_MAP, escape_html, sanitize_text

__all__ = ["HTML_ESCAPE_MAP", "escape_html", "sanitize_text"]
