"""WordPress REST API adapter."""

from __future__ import annotations

from .client import WordPressClient

__all__ = ["WordPressClient"]
