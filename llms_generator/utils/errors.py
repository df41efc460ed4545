"""
Error types raised by the generator.

Per-page problems never surface as exceptions from `generate`; only
configuration errors and a failed root sitemap fetch abort a run.
"""

from enum import Enum
from typing import Optional


class ErrorType(Enum):
    """Kinds of generator failures."""
    NETWORK_ERROR = "NETWORK_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    ROBOTS_BLOCKED = "ROBOTS_BLOCKED"
    INVALID_URL = "INVALID_URL"
    CONTENT_TOO_LARGE = "CONTENT_TOO_LARGE"


class GeneratorError(Exception):
    """
    Base error for the generator.

    Carries the error kind, the URL involved (if any) and the underlying
    exception that triggered it.
    """

    def __init__(
        self,
        message: str,
        error_type: ErrorType,
        url: Optional[str] = None,
        original_error: Optional[BaseException] = None
    ):
        super().__init__(message)
        self.error_type = error_type
        self.url = url
        self.original_error = original_error


class NetworkError(GeneratorError):
    """Transport failure after all retries were exhausted."""

    def __init__(self, message: str, url: Optional[str] = None,
                 original_error: Optional[BaseException] = None):
        super().__init__(message, ErrorType.NETWORK_ERROR, url, original_error)


class RequestTimeoutError(GeneratorError):
    """A request exceeded its timeout budget."""

    def __init__(self, message: str, url: Optional[str] = None,
                 original_error: Optional[BaseException] = None):
        super().__init__(message, ErrorType.TIMEOUT_ERROR, url, original_error)


class ParseError(GeneratorError):
    """Content could not be parsed."""

    def __init__(self, message: str, url: Optional[str] = None,
                 original_error: Optional[BaseException] = None):
        super().__init__(message, ErrorType.PARSE_ERROR, url, original_error)


class InvalidURLError(GeneratorError):
    """The site URL is missing or cannot be parsed."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message, ErrorType.INVALID_URL, url)


class ContentTooLargeError(GeneratorError):
    """A page exceeded the raw size ceiling."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message, ErrorType.CONTENT_TOO_LARGE, url)
