"""
Recursive link discovery.

Expands a seed URL set breadth-first by following same-host anchors, one
depth round at a time, up to a configured depth.
"""

import asyncio
from collections import deque
from typing import Deque, Dict, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup

from .fetcher import Fetcher
from ..models import DiscoveredURL, DiscoveryMethod, SitemapEntry
from ..utils.constants import HTML_CONTENT_TYPES
from ..utils.errors import GeneratorError
from ..utils.log import get_logger
from ..utils.urls import normalize_url, is_internal_url


def extract_links(
    html: str,
    page_url: str,
    site_url: str,
    keep_query_params: Sequence[str] = (),
    max_links: Optional[int] = None
) -> List[str]:
    """
    Extract same-host page links from HTML.

    Links are resolved against the page URL, normalized, de-duplicated in
    document order, and exclude the page itself.

    Args:
        html: Page HTML
        page_url: URL of the page (for resolving relative links)
        site_url: Site base URL (for the same-host check)
        keep_query_params: Query parameters preserved by normalization
        max_links: Maximum number of links to return

    Returns:
        Normalized internal links
    """
    soup = BeautifulSoup(html, 'lxml')
    current = normalize_url(page_url, keep_query_params=keep_query_params)
    links: List[str] = []
    seen = set()

    for anchor in soup.find_all('a', href=True):
        full_url = normalize_url(anchor['href'], page_url, keep_query_params)
        if not full_url or full_url == current or full_url in seen:
            continue
        if not is_internal_url(full_url, site_url):
            continue
        seen.add(full_url)
        links.append(full_url)
        if max_links is not None and len(links) >= max_links:
            break

    return links


class LinkDiscoverer:
    """
    Breadth-first same-site link discoverer.

    The discovery set maps normalized URL to DiscoveredURL. The first
    discovery of a URL wins, which bounds the walk and breaks cycles.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        site_url: str,
        max_depth: int = 3,
        max_links_per_page: int = 50,
        concurrency: int = 5,
        request_delay_ms: int = 100,
        keep_query_params: Sequence[str] = ()
    ):
        """
        Initialize the link discoverer.

        Args:
            fetcher: Shared fetcher
            site_url: Site base URL
            max_depth: Maximum discovery depth
            max_links_per_page: Cap on links taken from one page
            concurrency: Concurrent fetches per round
            request_delay_ms: Delay after each fetch and between rounds
            keep_query_params: Query parameters preserved by normalization
        """
        self.fetcher = fetcher
        self.site_url = site_url
        self.max_depth = max_depth
        self.max_links_per_page = max_links_per_page
        self.concurrency = max(1, concurrency)
        self.delay = request_delay_ms / 1000
        self.keep_query_params = list(keep_query_params)
        self.logger = get_logger("discovery")

    async def discover(self, seeds: List[SitemapEntry]) -> List[DiscoveredURL]:
        """
        Expand seeds by following internal links.

        Args:
            seeds: Seed entries (depth 0)

        Returns:
            Every discovered URL, seeds first, in discovery order
        """
        discovered: Dict[str, DiscoveredURL] = {}

        for seed in seeds:
            url = normalize_url(seed.loc, keep_query_params=self.keep_query_params)
            if not url or url in discovered:
                continue
            discovered[url] = DiscoveredURL(
                url=url,
                depth=0,
                discovery_method=DiscoveryMethod.SITEMAP,
                lastmod=seed.lastmod
            )

        for depth in range(self.max_depth):
            frontier = [u for u, d in discovered.items() if d.depth == depth]
            if not frontier:
                break

            self.logger.info(
                f"Discovering links at depth {depth + 1} from {len(frontier)} pages"
            )
            page_links = await self._collect_round(frontier)

            added = 0
            for parent_url, links in page_links:
                for link in links:
                    if link in discovered:
                        continue
                    discovered[link] = DiscoveredURL(
                        url=link,
                        depth=depth + 1,
                        discovery_method=DiscoveryMethod.INTERNAL_LINK,
                        parent_url=parent_url
                    )
                    added += 1

            self.logger.info(f"Depth {depth + 1}: {added} new URLs")
            if added == 0:
                break

            if depth < self.max_depth - 1:
                await asyncio.sleep(self.delay)

        return list(discovered.values())

    async def _collect_round(self, urls: List[str]) -> List[Tuple[str, List[str]]]:
        """
        Fetch one round of pages with bounded concurrency.

        Returns:
            (page URL, links) pairs in the order of `urls`
        """
        queue: Deque[Tuple[int, str]] = deque(enumerate(urls))
        results: List[Optional[List[str]]] = [None] * len(urls)

        async def worker() -> None:
            while queue:
                index, url = queue.popleft()
                results[index] = await self._links_from_page(url)
                await asyncio.sleep(self.delay)

        workers = min(self.concurrency, len(urls))
        await asyncio.gather(*(worker() for _ in range(workers)))

        return [(url, links or []) for url, links in zip(urls, results)]

    async def _links_from_page(self, url: str) -> List[str]:
        """Fetch a page and return its internal links (empty on failure)."""
        try:
            response = await self.fetcher.fetch(url)
            if not response.ok:
                self.logger.debug(f"HTTP {response.status} while discovering links on {url}")
                return []
            content_type = response.content_type.lower()
            if content_type and not any(t in content_type for t in HTML_CONTENT_TYPES):
                return []
            return extract_links(
                response.text,
                url,
                self.site_url,
                self.keep_query_params,
                self.max_links_per_page
            )
        except GeneratorError as e:
            self.logger.warning(f"Failed to extract links from {url}: {e}")
            return []
        except Exception as e:
            self.logger.warning(f"Failed to extract links from {url}: {type(e).__name__}: {e}")
            return []
