"""
URL utilities for the llms-full generator.

Provides URL normalization, same-site checks, include/exclude pattern
matching and the ordering applied to crawl targets.
"""

import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Pattern, Sequence, Union
from urllib.parse import urlparse, urlunparse, urljoin, parse_qsl, urlencode

from ..models import SitemapEntry


UrlPattern = Union[str, Pattern]

# Schemes and prefixes that never point at a crawlable page
_IGNORED_PREFIXES = ('javascript:', 'data:', 'mailto:', 'tel:', '#')


def normalize_url(
    url: str,
    base_url: Optional[str] = None,
    keep_query_params: Sequence[str] = ()
) -> str:
    """
    Normalize a URL for use as a discovery key.

    Resolves relative URLs, lowercases scheme and host, drops the fragment,
    keeps only the whitelisted query parameters and strips the trailing
    slash of non-root paths. Applying it twice gives the same result.

    Args:
        url: URL to normalize
        base_url: Base URL for resolving relative URLs
        keep_query_params: Query parameter names to keep (in this order)

    Returns:
        Normalized URL string, or "" for non-page links
    """
    if not url:
        return ""

    url = url.strip()
    if not url or url.lower().startswith(_IGNORED_PREFIXES):
        return ""

    # Handle protocol-relative URLs
    if url.startswith('//'):
        scheme = urlparse(base_url).scheme if base_url else 'https'
        url = f"{scheme or 'https'}:{url}"

    # Resolve relative URLs
    if base_url and not url.lower().startswith(('http://', 'https://')):
        url = urljoin(base_url, url)

    parsed = urlparse(url)

    query = ''
    if keep_query_params and parsed.query:
        params = parse_qsl(parsed.query, keep_blank_values=True)
        kept = []
        for name in keep_query_params:
            for key, value in params:
                if key == name:
                    kept.append((key, value))
                    break
        query = urlencode(kept)

    path = parsed.path or '/'
    # Remove trailing slash for consistency (except for root path)
    if len(path) > 1:
        path = path.rstrip('/') or '/'

    return urlunparse((
        parsed.scheme.lower(),
        parsed.netloc.lower(),
        path,
        parsed.params,
        query,
        ''  # Remove fragment
    ))


def get_hostname(url: str) -> str:
    """
    Extract the lowercase hostname (without port) from a URL.

    Args:
        url: URL to inspect

    Returns:
        Hostname, or "" when the URL has none
    """
    try:
        return (urlparse(url).hostname or '').lower()
    except ValueError:
        return ''


def is_internal_url(url: str, site_url: str) -> bool:
    """
    Check whether a URL is on the same host as the site.

    Args:
        url: URL to check
        site_url: Site base URL

    Returns:
        True if both hostnames are equal
    """
    host = get_hostname(url)
    return bool(host) and host == get_hostname(site_url)


def strip_trailing_slashes(url: str) -> str:
    """Remove every trailing slash from a URL."""
    return re.sub(r'/+$', '', url.strip())


def matches_any_pattern(url: str, patterns: Iterable[UrlPattern]) -> bool:
    """
    Check if a URL matches any include/exclude pattern.

    String patterns are literal substrings; compiled patterns are searched.

    Args:
        url: URL to test
        patterns: Substrings or compiled regular expressions

    Returns:
        True on the first match
    """
    for pattern in patterns:
        if isinstance(pattern, str):
            if pattern in url:
                return True
        elif pattern.search(url):
            return True
    return False


def filter_urls(
    entries: List[SitemapEntry],
    include_patterns: Sequence[UrlPattern],
    exclude_patterns: Sequence[UrlPattern],
    max_pages: int,
    site_url: str
) -> List[SitemapEntry]:
    """
    Apply include/exclude patterns and the page cap to sitemap entries.

    Include patterns are applied first, then exclude patterns. When nothing
    survives, the site URL itself becomes the only entry.

    Args:
        entries: Candidate entries
        include_patterns: Patterns an entry must match (if any are given)
        exclude_patterns: Patterns that reject an entry
        max_pages: Maximum number of entries to keep
        site_url: Fallback entry

    Returns:
        Filtered entry list
    """
    filtered = list(entries)

    if include_patterns:
        filtered = [e for e in filtered if matches_any_pattern(e.loc, include_patterns)]

    if exclude_patterns:
        filtered = [e for e in filtered if not matches_any_pattern(e.loc, exclude_patterns)]

    filtered = filtered[:max(0, max_pages)]

    if not filtered:
        filtered = [SitemapEntry(loc=site_url)]

    return filtered


def parse_lastmod(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a sitemap lastmod value.

    Accepts W3C datetime forms (`2024-01-02`, `2024-01-02T10:00:00Z`,
    offsets). Naive values are treated as UTC.

    Args:
        value: Raw lastmod string

    Returns:
        Aware datetime, or None when absent or unparseable
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def sort_key(url: str, lastmod: Optional[str]):
    """
    Sort key ordering entries by lastmod descending, then URL ascending.

    Entries without a usable lastmod come after all dated entries.
    """
    parsed = parse_lastmod(lastmod)
    if parsed is None:
        return (1, 0.0, url)
    return (0, -parsed.timestamp(), url)
