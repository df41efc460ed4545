"""
Shared constants for the llms-full generator.

Contains default limits and settings used across the crawl pipeline.
"""

from .. import __version__

# Generator identity written into the document header
GENERATOR_NAME = "llms-full-generator"

# Default user agent string for all HTTP requests
DEFAULT_USER_AGENT = f"{GENERATOR_NAME}/{__version__}"

# Default request timeout in milliseconds
DEFAULT_TIMEOUT_MS = 20000

# Default number of fetch attempts for transport failures
DEFAULT_RETRIES = 3

# Base delay for linear retry backoff in milliseconds
DEFAULT_RETRY_BACKOFF_MS = 250

# Default concurrent page fetches
DEFAULT_CONCURRENCY = 5

# Default delay between discovery requests in milliseconds
DEFAULT_REQUEST_DELAY_MS = 100

# Page and character limits for the "full" output format
DEFAULT_MAX_PAGES = 5000
DEFAULT_MAX_CHARS_PER_PAGE = 200000
DEFAULT_MAX_TOTAL_CHARS = 50000000

# Recursive discovery bounds
DEFAULT_MAX_RECURSIVE_DEPTH = 3
DEFAULT_MAX_LINKS_PER_PAGE = 50

# File system discovery defaults
DEFAULT_MAX_FILE_SYSTEM_DEPTH = 10
DEFAULT_FILE_INCLUDE_PATTERNS = ["**/*.md", "**/*.mdx", "**/*.txt"]
DEFAULT_FILE_EXCLUDE_PATTERNS = [
    "**/node_modules/**",
    "**/.*/**",
    "**/dist/**",
    "**/build/**",
]

# Raw pages above this size are skipped without extraction
MAX_RAW_PAGE_BYTES = 5 * 1024 * 1024

# Extracted text must be longer than this to be accepted by a fallback method
MIN_EXTRACTED_CHARS = 50

# Per-format overrides for page and character limits
FORMAT_LIMITS = {
    "full": {
        "max_pages": 5000,
        "max_chars_per_page": 200000,
        "max_total_chars": 50000000,
    },
    "small": {
        "max_pages": 100,
        "max_chars_per_page": 50000,
        "max_total_chars": 5000000,
    },
    "minimal": {
        "max_pages": 20,
        "max_chars_per_page": 10000,
        "max_total_chars": 200000,
    },
}

# Elements removed from every page before extraction
DEFAULT_STRIP_SELECTORS = [
    "header",
    "footer",
    "nav",
    ".toc",
    ".site-header",
    ".site-footer",
    ".navigation",
    ".sidebar",
    ".menu",
    ".breadcrumb",
    ".pagination",
]

# Content types treated as HTML pages
HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")
