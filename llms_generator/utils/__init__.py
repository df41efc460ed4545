"""
Utility modules for the llms-full generator.

Contains logging, URL and glob helpers, robots.txt rules, errors and constants.
"""

from .log import setup_logger, get_logger
from .urls import normalize_url, is_internal_url, filter_urls
from .patterns import matches_glob, matches_globs
from .robots import RobotsRules
from .errors import (
    ErrorType,
    GeneratorError,
    NetworkError,
    RequestTimeoutError,
    ParseError,
    InvalidURLError,
    ContentTooLargeError,
)
from .constants import (
    DEFAULT_USER_AGENT,
    DEFAULT_TIMEOUT_MS,
    DEFAULT_CONCURRENCY,
    DEFAULT_MAX_PAGES,
    FORMAT_LIMITS,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "normalize_url",
    "is_internal_url",
    "filter_urls",
    "matches_glob",
    "matches_globs",
    "RobotsRules",
    "ErrorType",
    "GeneratorError",
    "NetworkError",
    "RequestTimeoutError",
    "ParseError",
    "InvalidURLError",
    "ContentTooLargeError",
    "DEFAULT_USER_AGENT",
    "DEFAULT_TIMEOUT_MS",
    "DEFAULT_CONCURRENCY",
    "DEFAULT_MAX_PAGES",
    "FORMAT_LIMITS",
]
