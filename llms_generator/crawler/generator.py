"""
Generation orchestrator.

Runs the whole pipeline for one set of options: sitemap resolution, URL
filtering, optional robots and link discovery, file system discovery,
crawling, content filtering, character budgets and document assembly.
"""

import copy
import time
from typing import List, Optional, Tuple

from .cleaner import CleaningConfig, ContentCleaner
from .discovery import LinkDiscoverer
from .extractor import ContentExtractor
from .fetcher import Fetcher
from .filesystem import FileSystemDiscoverer
from .sitemap import SitemapResolver
from .worker import CrawlWorkerPool
from ..analyzer.categorizer import ContentFilter
from ..document.assembler import apply_character_limits, assemble_document
from ..models import DiscoveredFile, DiscoveredURL, GenerationStats, PageResult, SitemapEntry, utcnow
from ..options import GeneratorOptions
from ..utils.constants import DEFAULT_STRIP_SELECTORS
from ..utils.log import get_logger
from ..utils.robots import RobotsRules
from ..utils.urls import filter_urls, matches_any_pattern, sort_key


class LLMSGenerator:
    """
    Generates an llms-full document for one site.

    A generator instance holds the statistics of its last run; separate
    instances never share state.
    """

    def __init__(self, options: GeneratorOptions, fetcher: Optional[Fetcher] = None):
        """
        Initialize the generator.

        Args:
            options: Generation options
            fetcher: Fetcher to use instead of one built from the options
        """
        self.options = options
        self.limits = options.effective_limits()
        self.fetcher = fetcher or Fetcher(
            timeout_ms=options.request_timeout_ms,
            retries=options.retries,
            backoff_ms=options.retry_backoff_ms,
            user_agent=options.user_agent,
            headers=options.custom_headers
        )
        self.logger = get_logger("generator")
        self._stats = GenerationStats()

    @property
    def stats(self) -> GenerationStats:
        """Read-only snapshot of the last run's statistics."""
        return copy.deepcopy(self._stats)

    def _build_extractor(self) -> ContentExtractor:
        opts = self.options
        cleaner = None
        if opts.enable_content_cleaning:
            cleaner = ContentCleaner(CleaningConfig(remove_images=opts.remove_images))
        return ContentExtractor(
            strip_selectors=DEFAULT_STRIP_SELECTORS + list(opts.strip_selectors),
            use_readability=opts.use_readability,
            multiple_methods=opts.enable_multiple_extraction_methods,
            cleaner=cleaner
        )

    async def generate(self) -> str:
        """
        Run the pipeline and return the document.

        Returns:
            The llms-full document text

        Raises:
            NetworkError: If the root sitemap cannot be fetched
        """
        opts = self.options
        max_pages = self.limits["max_pages"]
        stats = GenerationStats(started_at=utcnow())
        self._stats = stats
        start = time.monotonic()

        self.logger.info(f"Generating llms-full for {opts.site_url} (format: {opts.output_format})")

        async with self.fetcher as fetcher:
            targets = await self._collect_targets(fetcher, max_pages)
            files = self._discover_files(max(0, max_pages - len(targets)))

            pool = CrawlWorkerPool(
                fetcher,
                self._build_extractor(),
                concurrency=opts.concurrency,
                content_transformer=opts.content_transformer
            )
            pages = await pool.run(targets)
            pages.extend(pool.crawl_files(files))

        crawled = len(pages)
        pages = self._apply_content_filter(pages)
        pages = apply_character_limits(
            pages,
            self.limits["max_chars_per_page"],
            self.limits["max_total_chars"],
            stats
        )

        stats.total_pages = len(pages)
        stats.successful_pages = sum(1 for p in pages if p.success)
        stats.failed_pages = stats.total_pages - stats.successful_pages
        stats.skipped_pages = crawled - len(pages)
        stats.total_content_length = sum(p.content_length for p in pages)
        stats.total_original_length = sum(p.original_length or p.content_length for p in pages)
        stats.finished_at = utcnow()
        stats.duration_seconds = time.monotonic() - start

        if stats.global_limit_reached:
            self.logger.warning(
                f"Global character limit of {self.limits['max_total_chars']} reached; "
                f"{stats.skipped_pages} pages left out"
            )
        self.logger.info(
            f"Generated {stats.total_pages} pages "
            f"({stats.successful_pages} ok, {stats.failed_pages} failed) "
            f"in {stats.duration_seconds:.1f}s"
        )

        return assemble_document(pages, opts.header_title, opts.site_url, stats.finished_at)

    async def _collect_targets(self, fetcher: Fetcher, max_pages: int) -> List[DiscoveredURL]:
        """Resolve, filter, expand and order the URLs to crawl."""
        opts = self.options

        entries: List[SitemapEntry] = []
        if opts.use_sitemap:
            resolver = SitemapResolver(fetcher, opts.site_url)
            entries = await resolver.resolve(opts.sitemap_url)
            self.logger.info(f"Found {len(entries)} URLs in sitemap")

        entries = filter_urls(
            entries,
            opts.include_patterns,
            opts.exclude_patterns,
            max_pages,
            opts.site_url
        )

        robots = None
        if opts.respect_robots:
            robots = RobotsRules(opts.site_url, opts.user_agent)
            await robots.load(fetcher)
            allowed = [e for e in entries if robots.is_allowed(e.loc)]
            if len(allowed) != len(entries):
                self.logger.info(f"robots.txt excluded {len(entries) - len(allowed)} URLs")
            entries = allowed

        if opts.enable_recursive_discovery:
            request_delay_ms = opts.request_delay_ms
            if robots is not None and robots.crawl_delay:
                request_delay_ms = max(request_delay_ms, int(robots.crawl_delay * 1000))
            discoverer = LinkDiscoverer(
                fetcher,
                opts.site_url,
                max_depth=opts.max_recursive_depth,
                max_links_per_page=opts.max_links_per_page,
                concurrency=opts.concurrency,
                request_delay_ms=request_delay_ms,
                keep_query_params=opts.keep_query_params
            )
            discovered = await discoverer.discover(entries)
            targets = [d for d in discovered if d.depth == 0 or self._keep_discovered(d.url, robots)]
            self.logger.info(
                f"Recursive discovery found {len(targets) - len(entries)} additional URLs"
            )
        else:
            targets = [DiscoveredURL(url=e.loc, lastmod=e.lastmod) for e in entries]

        targets.sort(key=lambda t: sort_key(t.url, t.lastmod))
        return targets[:max_pages]

    def _keep_discovered(self, url: str, robots: Optional[RobotsRules]) -> bool:
        """Apply URL patterns and robots rules to a link-discovered URL."""
        opts = self.options
        if opts.include_patterns and not matches_any_pattern(url, opts.include_patterns):
            return False
        if opts.exclude_patterns and matches_any_pattern(url, opts.exclude_patterns):
            return False
        return robots is None or robots.is_allowed(url)

    def _discover_files(self, remaining: int) -> List[DiscoveredFile]:
        """Discover local files, sorted by relative path and capped."""
        opts = self.options
        if not opts.enable_file_system_discovery:
            return []

        result = FileSystemDiscoverer(
            opts.file_system_base_path,
            include_patterns=opts.file_include_patterns,
            exclude_patterns=opts.file_exclude_patterns,
            max_depth=opts.max_file_system_depth,
            follow_symlinks=opts.follow_symlinks
        ).discover()

        files = sorted(result.files, key=lambda f: f.relative_path)
        if len(files) > remaining:
            self.logger.info(f"Page limit leaves room for {remaining} of {len(files)} local files")
        return files[:remaining]

    def _apply_content_filter(self, pages: List[PageResult]) -> List[PageResult]:
        """Categorize, filter and cap pages when a content filter is configured."""
        config = self.options.content_filter_config()
        if config is None:
            return pages

        try:
            content_filter = ContentFilter(config)
        except ValueError as e:
            self.logger.warning(f"Content filtering disabled: {e}")
            return pages

        filtered = content_filter.apply_category_limits(content_filter.filter(pages))
        if config.group_by_category:
            counts = content_filter.category_counts(filtered)
            self.logger.info(
                "Pages per category: " + ", ".join(f"{k}={v}" for k, v in counts.items())
            )
        return list(filtered)


async def generate(
    options: GeneratorOptions,
    fetcher: Optional[Fetcher] = None
) -> Tuple[str, GenerationStats]:
    """
    Generate an llms-full document.

    Args:
        options: Generation options
        fetcher: Optional fetcher override

    Returns:
        (document text, statistics snapshot)
    """
    generator = LLMSGenerator(options, fetcher)
    document = await generator.generate()
    return document, generator.stats
