"""
Document assembler.

Applies character budgets to crawled pages and renders the llms-full text
document: banner, metadata header, table of contents and page sections.
"""

import dataclasses
import re
from datetime import datetime
from typing import List, Optional, Sequence

from .. import __version__
from ..models import GenerationStats, PageResult, utcnow
from ..utils.constants import GENERATOR_NAME


PAGE_SEPARATOR = "\n\n---\n\n"
HEADING_PATTERN = re.compile(r'^(#{1,5})\s', re.MULTILINE)


def truncation_marker(limit: int) -> str:
    return f"\n\n[TRUNCATED at {limit} chars]"


def truncate_page(page: PageResult, max_chars: int) -> PageResult:
    """
    Clamp one page to `max_chars` characters, marker included.

    Args:
        page: Page to clamp
        max_chars: Per-page character limit

    Returns:
        The page itself if it fits, otherwise a truncated copy with
        `truncated` set and `original_length` recorded
    """
    if len(page.content) <= max_chars:
        return page

    marker = truncation_marker(max_chars)
    if len(marker) >= max_chars:
        # No room for the marker
        content = page.content[:max(0, max_chars)]
    else:
        content = page.content[:max_chars - len(marker)] + marker
    return dataclasses.replace(
        page,
        content=content,
        truncated=True,
        original_length=len(page.content)
    )


def apply_character_limits(
    pages: Sequence[PageResult],
    max_chars_per_page: int,
    max_total_chars: int,
    stats: Optional[GenerationStats] = None
) -> List[PageResult]:
    """
    Apply per-page truncation and the global character budget.

    Pages are taken in order. The first page whose length would push the
    running total past `max_total_chars` stops inclusion; pages already
    included are kept whole.

    Args:
        pages: Pages in document order
        max_chars_per_page: Per-page character limit
        max_total_chars: Budget for the sum of included page lengths
        stats: Stats updated with truncation and global-limit counters

    Returns:
        Included pages
    """
    included: List[PageResult] = []
    total = 0

    for page in pages:
        page = truncate_page(page, max_chars_per_page)

        if total + page.content_length > max_total_chars:
            if stats is not None:
                stats.global_limit_reached = True
            break

        if page.truncated and stats is not None:
            stats.truncated_pages += 1

        total += page.content_length
        included.append(page)

    return included


def demote_headings(content: str) -> str:
    """Demote Markdown headings one level (H1 -> H2 ... H5 -> H6)."""
    return HEADING_PATTERN.sub(r'#\1 ', content)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC with milliseconds and a `Z` suffix."""
    return moment.strftime('%Y-%m-%dT%H:%M:%S.') + f"{moment.microsecond // 1000:03d}Z"


def render_header(
    header_title: str,
    site_url: str,
    page_count: int,
    generated_at: Optional[datetime] = None
) -> str:
    generated_at = generated_at or utcnow()
    return (
        f"<SYSTEM>This is the full textual snapshot of {header_title}</SYSTEM>\n\n"
        f"# llms-full v1\n"
        f"# site: {site_url}\n"
        f"# generated: {format_timestamp(generated_at)}\n"
        f"# generator: {GENERATOR_NAME} {__version__}\n"
        f"# pages: {page_count}"
    )


def render_toc(pages: Sequence[PageResult]) -> str:
    entries = []
    for index, page in enumerate(pages, start=1):
        title = page.title if page.success else f"(Skipped) {page.title}"
        entries.append(f"- {index} {page.url} — {title}")
    return "## Table of Contents\n" + "\n".join(entries) + "\n\n---"


def render_page(page: PageResult) -> str:
    if not page.success:
        reason = page.skip_reason or page.error or "unknown"
        return (
            f"### BEGIN SKIPPED\n"
            f"title: {page.title}\n"
            f"url: {page.url}\n"
            f"reason: {reason}\n"
            f"### END SKIPPED"
        )

    return (
        f"### BEGIN PAGE\n"
        f"title: {page.title}\n"
        f"url: {page.url}\n"
        f"### END PAGE\n\n"
        f"{demote_headings(page.content)}"
    )


def render_pages(pages: Sequence[PageResult]) -> str:
    return PAGE_SEPARATOR.join(render_page(page) for page in pages)


def assemble_document(
    pages: Sequence[PageResult],
    header_title: str,
    site_url: str,
    generated_at: Optional[datetime] = None
) -> str:
    """
    Render the complete llms-full document.

    Args:
        pages: Pages in final order (limits already applied)
        header_title: Project name for the system banner
        site_url: Site base URL
        generated_at: Generation time (defaults to now)

    Returns:
        The document text
    """
    header = render_header(header_title, site_url, len(pages), generated_at)
    return f"{header}\n\n{render_toc(pages)}\n\n## Pages\n{render_pages(pages)}"
