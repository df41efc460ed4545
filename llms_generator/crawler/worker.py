"""
Crawl worker pool.

Fetches and extracts a list of pages with bounded concurrency. Results are
written into pre-indexed slots so output order always equals input order.
"""

import asyncio
import os
import re
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .extractor import ContentExtractor
from .fetcher import Fetcher
from ..models import DiscoveredFile, DiscoveredURL, PageResult
from ..utils.constants import HTML_CONTENT_TYPES, MAX_RAW_PAGE_BYTES
from ..utils.errors import ContentTooLargeError
from ..utils.log import get_logger


ContentTransformer = Callable[[str, str], str]

HTML_FILE_EXTENSIONS = ('.html', '.htm', '.xhtml')
MARKDOWN_TITLE_PATTERN = re.compile(r'^#\s+(.+?)\s*#*\s*$', re.MULTILINE)


def _skipped(
    url: str,
    content: str,
    error: str,
    skip_reason: str,
    title: Optional[str] = None,
    status_code: Optional[int] = None,
    lastmod: Optional[str] = None
) -> PageResult:
    return PageResult(
        url=url,
        title=title or url,
        content=content,
        success=False,
        error=error,
        skip_reason=skip_reason,
        status_code=status_code,
        lastmod=lastmod
    )


class CrawlWorkerPool:
    """
    Pool of crawl workers sharing one cursor.

    Each worker claims the next unclaimed index, processes that target and
    stores the result at the claimed index. Per-page failures become failed
    PageResults and never abort the pool.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        extractor: ContentExtractor,
        concurrency: int = 5,
        content_transformer: Optional[ContentTransformer] = None
    ):
        """
        Initialize the worker pool.

        Args:
            fetcher: Shared fetcher
            extractor: Content extractor
            concurrency: Number of concurrent workers
            content_transformer: Optional callable(content, url) -> content
        """
        self.fetcher = fetcher
        self.extractor = extractor
        self.concurrency = max(1, concurrency)
        self.content_transformer = content_transformer
        self.logger = get_logger("worker")

    async def run(self, targets: Sequence[DiscoveredURL]) -> List[PageResult]:
        """
        Crawl every target.

        Args:
            targets: Ordered crawl targets

        Returns:
            One PageResult per target, in target order
        """
        results: List[Optional[PageResult]] = [None] * len(targets)
        cursor = 0

        async def worker() -> None:
            nonlocal cursor
            while cursor < len(targets):
                index = cursor
                cursor += 1
                results[index] = await self.crawl_page(targets[index])

        workers = min(self.concurrency, len(targets))
        if workers:
            self.logger.info(f"Crawling {len(targets)} pages with {workers} workers")
            await asyncio.gather(*(worker() for _ in range(workers)))

        return [result for result in results if result is not None]

    async def crawl_page(self, target: DiscoveredURL) -> PageResult:
        """
        Fetch and extract a single page.

        Args:
            target: Crawl target

        Returns:
            A successful PageResult or a skipped one carrying a skip reason
        """
        url = target.url
        try:
            response = await self.fetcher.fetch(url)

            if not response.ok:
                self.logger.warning(f"Skipping {url}: HTTP {response.status}")
                return _skipped(
                    url,
                    f"Failed to fetch: {response.status} {response.reason}".rstrip(),
                    f"HTTP {response.status}",
                    f"http-{response.status}",
                    title="Skipped",
                    status_code=response.status,
                    lastmod=target.lastmod
                )

            content_type = response.content_type.lower()
            if not any(t in content_type for t in HTML_CONTENT_TYPES):
                self.logger.warning(f"Skipping {url}: non-HTML content type {content_type!r}")
                return _skipped(
                    url,
                    "No content extracted.",
                    "Non-HTML content type",
                    "content-type",
                    title="Skipped",
                    status_code=response.status,
                    lastmod=target.lastmod
                )

            try:
                self._check_size(url, len(response.body))
            except ContentTooLargeError as e:
                self.logger.warning(f"Skipping {url}: {e}")
                return _skipped(
                    url,
                    "No content extracted.",
                    "Content too large",
                    "too-large",
                    title="Skipped",
                    status_code=response.status,
                    lastmod=target.lastmod
                )

            extracted = self.extractor.extract(response.text, url)
            content = self._transform(extracted.content, url)

            self.logger.debug(f"Crawled {url} ({len(content)} chars)")
            return PageResult(
                url=url,
                title=extracted.title or url,
                content=content,
                success=True,
                lastmod=target.lastmod,
                language=extracted.language,
                status_code=response.status
            )

        except Exception as e:
            message = str(e) or type(e).__name__
            self.logger.warning(f"Failed to crawl {url}: {message}")
            return _skipped(
                url,
                f"(Fetch/parse error: {message})",
                message,
                "parse-error",
                title="Skipped",
                status_code=0,
                lastmod=target.lastmod
            )

    def crawl_files(self, files: Sequence[DiscoveredFile]) -> List[PageResult]:
        """Read local files into page results, in input order."""
        return [self.crawl_file(discovered) for discovered in files]

    def crawl_file(self, discovered: DiscoveredFile) -> PageResult:
        """
        Turn a discovered local file into a page.

        HTML files go through the extractor; everything else is read as text
        and titled by its first top-level heading or its file name.
        """
        path = Path(discovered.path)
        url = path.resolve().as_uri()
        lastmod = discovered.modified_at.isoformat()

        try:
            self._check_size(url, discovered.size_bytes)
        except ContentTooLargeError as e:
            self.logger.warning(f"Skipping {discovered.relative_path}: {e}")
            return _skipped(url, "No content extracted.", "Content too large", "too-large",
                            title=discovered.relative_path, lastmod=lastmod)

        try:
            text = path.read_text(encoding='utf-8', errors='replace')

            if discovered.extension.lower() in HTML_FILE_EXTENSIONS:
                extracted = self.extractor.extract(text, url)
                title, content, language = extracted.title, extracted.content, extracted.language
            else:
                match = MARKDOWN_TITLE_PATTERN.search(text)
                title = match.group(1) if match else os.path.splitext(path.name)[0]
                content = text.strip()
                language = None
                if self.extractor.cleaner is not None:
                    content = self.extractor.cleaner.clean(content)

            content = self._transform(content, url)

        except Exception as e:
            message = str(e) or type(e).__name__
            self.logger.warning(f"Failed to read {discovered.relative_path}: {message}")
            return _skipped(url, f"(Fetch/parse error: {message})", message, "parse-error",
                            title=discovered.relative_path, status_code=0, lastmod=lastmod)

        return PageResult(
            url=url,
            title=title,
            content=content,
            success=True,
            lastmod=lastmod,
            language=language
        )

    @staticmethod
    def _check_size(url: str, size: int) -> None:
        if size > MAX_RAW_PAGE_BYTES:
            raise ContentTooLargeError(
                f"Content too large ({size} bytes > {MAX_RAW_PAGE_BYTES})",
                url
            )

    def _transform(self, content: str, url: str) -> str:
        if self.content_transformer is None:
            return content
        return self.content_transformer(content, url)
