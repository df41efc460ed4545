"""
Analyzer module for page categorization and filtering.
"""

from .categorizer import (
    ContentFilter,
    ContentFilterConfig,
    DEFAULT_CATEGORIES,
    DEFAULT_FILTER_CONFIG,
)

__all__ = [
    "ContentFilter",
    "ContentFilterConfig",
    "DEFAULT_CATEGORIES",
    "DEFAULT_FILTER_CONFIG",
]
