"""
Sitemap resolver.

Fetches sitemap documents and scrapes `<loc>`/`<lastmod>` values with
tolerant regular expressions rather than a validating XML parser, so
near-but-not-quite well-formed sitemaps still resolve.
"""

import html
import re
from typing import Dict, List, Set

from .fetcher import Fetcher
from ..models import SitemapEntry, SitemapResult
from ..utils.errors import GeneratorError, NetworkError
from ..utils.log import get_logger
from ..utils.urls import is_internal_url


# <url>...</url> blocks with their <loc> and optional <lastmod>
URL_BLOCK_PATTERN = re.compile(r'<url(?:\s[^>]*)?>([\s\S]*?)</url>', re.IGNORECASE)
LOC_PATTERN = re.compile(r'<loc>\s*([^<]+?)\s*</loc>', re.IGNORECASE)
LASTMOD_PATTERN = re.compile(r'<lastmod>\s*([^<]+?)\s*</lastmod>', re.IGNORECASE)

# Nested sitemap indexes are followed at most this deep
MAX_INDEX_DEPTH = 5


def extract_entries(xml: str) -> List[SitemapEntry]:
    """
    Extract sitemap entries from raw XML text.

    Parses `<url>` blocks first; if none match, falls back to every bare
    `<loc>` element (sitemap indexes and minimal sitemaps).

    Args:
        xml: Sitemap document text

    Returns:
        Entries in document order
    """
    entries: List[SitemapEntry] = []

    for block in URL_BLOCK_PATTERN.finditer(xml):
        loc_match = LOC_PATTERN.search(block.group(1))
        if not loc_match:
            continue
        lastmod_match = LASTMOD_PATTERN.search(block.group(1))
        entries.append(SitemapEntry(
            loc=html.unescape(loc_match.group(1).strip()),
            lastmod=lastmod_match.group(1).strip() if lastmod_match else None
        ))

    # Fallback for simple sitemap format
    if not entries:
        for loc_match in LOC_PATTERN.finditer(xml):
            entries.append(SitemapEntry(loc=html.unescape(loc_match.group(1).strip())))

    return entries


class SitemapResolver:
    """
    Resolves a sitemap (or sitemap index) into a flat list of page URLs.

    Child sitemaps that fail are logged and skipped; only a failure of the
    root sitemap aborts resolution.
    """

    def __init__(self, fetcher: Fetcher, site_url: str):
        """
        Initialize the sitemap resolver.

        Args:
            fetcher: Shared fetcher
            site_url: Site base URL; leaf URLs must share its hostname
        """
        self.fetcher = fetcher
        self.site_url = site_url
        self.logger = get_logger("sitemap")

    async def parse_sitemap(self, sitemap_url: str) -> SitemapResult:
        """
        Fetch and parse a single sitemap document.

        Args:
            sitemap_url: Sitemap URL

        Returns:
            SitemapResult; an index carries child sitemaps and no URLs

        Raises:
            NetworkError: If the sitemap cannot be fetched
        """
        try:
            response = await self.fetcher.fetch(sitemap_url)
        except GeneratorError as e:
            raise NetworkError(
                f"Failed to parse sitemap: {sitemap_url}",
                sitemap_url,
                e
            ) from e

        if not response.ok:
            raise NetworkError(
                f"Failed to parse sitemap: {sitemap_url} (HTTP {response.status})",
                sitemap_url
            )

        entries = extract_entries(response.text)
        self.logger.debug(f"Extracted {len(entries)} locations from {sitemap_url}")

        if any(entry.loc.endswith('.xml') for entry in entries):
            children = [e.loc for e in entries if e.loc.endswith('.xml')]
            return SitemapResult(is_index=True, child_sitemaps=children)

        internal = [e for e in entries if is_internal_url(e.loc, self.site_url)]
        if len(internal) != len(entries):
            self.logger.debug(
                f"Dropped {len(entries) - len(internal)} off-site URLs from {sitemap_url}"
            )
        return SitemapResult(urls=internal, is_index=False)

    async def resolve(self, sitemap_url: str) -> List[SitemapEntry]:
        """
        Resolve a sitemap, following sitemap indexes.

        Leaf URL sets are merged by location; a later occurrence replaces
        an earlier one.

        Args:
            sitemap_url: Root sitemap URL

        Returns:
            De-duplicated entries

        Raises:
            NetworkError: If the root sitemap cannot be fetched
        """
        self.logger.info(f"Resolving sitemap {sitemap_url}")
        root = await self.parse_sitemap(sitemap_url)

        if not root.is_index:
            return list({entry.loc: entry for entry in root.urls}.values())

        self.logger.info(f"Found sitemap index with {len(root.child_sitemaps)} child sitemaps")
        merged: Dict[str, SitemapEntry] = {}
        seen: Set[str] = {sitemap_url}
        await self._resolve_children(root.child_sitemaps, merged, seen, depth=1)
        return list(merged.values())

    async def _resolve_children(
        self,
        children: List[str],
        merged: Dict[str, SitemapEntry],
        seen: Set[str],
        depth: int
    ) -> None:
        """Resolve child sitemaps into `merged`, skipping failures."""
        for child_url in children:
            if child_url in seen:
                continue
            seen.add(child_url)

            try:
                child = await self.parse_sitemap(child_url)
            except NetworkError as e:
                self.logger.warning(f"Failed to parse child sitemap {child_url}: {e.original_error or e}")
                continue

            if child.is_index:
                if depth >= MAX_INDEX_DEPTH:
                    self.logger.warning(f"Sitemap index nesting too deep at {child_url}")
                    continue
                await self._resolve_children(child.child_sitemaps, merged, seen, depth + 1)
            else:
                for entry in child.urls:
                    merged[entry.loc] = entry
