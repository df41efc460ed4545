"""
Content extractor for turning fetched HTML into Markdown.

Uses BeautifulSoup for DOM work, readability-lxml for main-content
detection and markdownify for HTML to Markdown conversion. In fallback mode
an ordered chain of extraction methods is tried until one yields enough text.
"""

import copy
import json
import re
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence

from bs4 import BeautifulSoup
from markdownify import markdownify, ATX
from readability import Document

from .cleaner import ContentCleaner
from ..utils.constants import DEFAULT_STRIP_SELECTORS, MIN_EXTRACTED_CHARS
from ..utils.errors import ParseError
from ..utils.log import get_logger


NO_CONTENT_PLACEHOLDER = "No content could be extracted from this page."

# Always removed before extraction
NON_CONTENT_TAGS = ['script', 'style', 'noscript', 'template']

SEMANTIC_SELECTORS = [
    'main',
    'article',
    '[role="main"]',
    '.content',
    '.post-content',
    '.entry-content',
    '.article-content',
    '.page-content',
]

CONTENT_SELECTORS = [
    '.markdown-body',
    '.prose',
    '.documentation',
    '.docs-content',
    '.wiki-content',
    '.readme',
    '.post-body',
    '.entry-body',
]

# Chrome removed before the raw-text fallback
RAW_TEXT_NOISE = 'nav, footer, aside, .sidebar, .navigation, .menu, .header, .footer'

BLANK_LINES_PATTERN = re.compile(r'\n{3,}')
WHITESPACE_PATTERN = re.compile(r'\s+')


@dataclass
class ExtractedContent:
    """Text extracted from one page."""
    title: str
    content: str
    language: Optional[str] = None
    method: str = ""


@dataclass
class PreparedPage:
    """A parsed page after unconditional preprocessing."""
    url: str
    soup: BeautifulSoup
    title: str
    json_ld: List[Any] = field(default_factory=list)

    @property
    def display_title(self) -> str:
        return self.title or self.url


def html_to_markdown(html: str) -> str:
    """
    Convert HTML to Markdown.

    Args:
        html: HTML fragment or document

    Returns:
        Trimmed Markdown with runs of blank lines collapsed
    """
    markdown = markdownify(
        html,
        heading_style=ATX,
        bullets='-',
        escape_asterisks=False,
        escape_underscores=False,
        escape_misc=False
    )
    return BLANK_LINES_PATTERN.sub('\n\n', markdown.strip())


def _visible_text(node) -> str:
    if node is None:
        return ''
    return node.get_text(' ', strip=True)


def _require_text(content: str, what: str) -> str:
    if len(content.strip()) <= MIN_EXTRACTED_CHARS:
        raise ParseError(f"Insufficient content from {what}")
    return content


def extract_with_readability(page: PreparedPage) -> ExtractedContent:
    """Main-content detection with readability."""
    try:
        document = Document(str(page.soup))
        summary = document.summary(html_partial=True)
        title = document.short_title()
    except Exception as e:
        raise ParseError(f"Readability failed to parse content: {e}", page.url, e) from e

    if not title or title == '[no-title]':
        title = page.display_title
    content = _require_text(html_to_markdown(summary), "readability")
    return ExtractedContent(title=title, content=content, method="readability")


def _extract_first_selector(page: PreparedPage, selectors: Sequence[str], method: str) -> ExtractedContent:
    for selector in selectors:
        element = page.soup.select_one(selector)
        if element is None:
            continue
        markdown = html_to_markdown(element.decode_contents())
        if len(markdown) > MIN_EXTRACTED_CHARS:
            return ExtractedContent(title=page.display_title, content=markdown, method=method)
    raise ParseError(f"No {method} content found", page.url)


def extract_with_semantic_selectors(page: PreparedPage) -> ExtractedContent:
    """First semantic container (main, article, ...) with enough text."""
    return _extract_first_selector(page, SEMANTIC_SELECTORS, "semantic")


def extract_with_content_selectors(page: PreparedPage) -> ExtractedContent:
    """First documentation/content class container with enough text."""
    return _extract_first_selector(page, CONTENT_SELECTORS, "content-selector")


def _meta_content(soup: BeautifulSoup, **attrs) -> Optional[str]:
    tag = soup.find('meta', attrs=attrs)
    if tag is None:
        return None
    value = (tag.get('content') or '').strip()
    return value or None


def extract_with_metadata(page: PreparedPage) -> ExtractedContent:
    """Meta description, Open Graph tags and JSON-LD descriptions."""
    soup = page.soup
    parts: List[str] = []

    description = _meta_content(soup, name='description')
    if description:
        parts.append(f"Description: {description}")

    og_title = _meta_content(soup, property='og:title')
    og_description = _meta_content(soup, property='og:description')
    if og_title and og_title != page.display_title:
        parts.append(f"Title: {og_title}")
    if og_description and og_description != description:
        parts.append(f"Summary: {og_description}")

    for item in page.json_ld:
        records = item if isinstance(item, list) else [item]
        for record in records:
            if not isinstance(record, dict):
                continue
            if record.get('description'):
                parts.append(f"Structured Description: {record['description']}")
            if record.get('text'):
                parts.append(f"Content: {record['text']}")

    content = _require_text('\n\n'.join(parts), "metadata")
    return ExtractedContent(title=page.display_title, content=content, method="metadata")


def extract_raw_text(page: PreparedPage) -> ExtractedContent:
    """Visible body text with navigation chrome removed."""
    soup = copy.copy(page.soup)
    for element in soup.select(RAW_TEXT_NOISE):
        element.decompose()

    root = soup.body or soup
    text = WHITESPACE_PATTERN.sub(' ', root.get_text(' ')).strip()
    content = _require_text(text, "raw text")
    return ExtractedContent(title=page.display_title, content=content, method="raw-text")


ExtractionMethod = Callable[[PreparedPage], ExtractedContent]

# Tried in order; the first method producing enough text wins
FALLBACK_METHODS: List[ExtractionMethod] = [
    extract_with_readability,
    extract_with_semantic_selectors,
    extract_with_content_selectors,
    extract_with_metadata,
    extract_raw_text,
]


class ContentExtractor:
    """
    Extracts Markdown content from HTML pages.

    Preprocessing always removes the configured strip selectors and
    script/style/noscript/template elements.
    """

    def __init__(
        self,
        strip_selectors: Optional[Sequence[str]] = None,
        use_readability: bool = True,
        multiple_methods: bool = False,
        cleaner: Optional[ContentCleaner] = None
    ):
        """
        Initialize the content extractor.

        Args:
            strip_selectors: CSS selectors to remove (defaults to common chrome)
            use_readability: Use readability for main-content detection
            multiple_methods: Use the fallback method chain
            cleaner: Optional cleaning pass applied to extracted text
        """
        self.strip_selectors = list(
            DEFAULT_STRIP_SELECTORS if strip_selectors is None else strip_selectors
        )
        self.use_readability = use_readability
        self.multiple_methods = multiple_methods
        self.cleaner = cleaner
        self.logger = get_logger("extractor")

    def extract(self, html: str, url: str) -> ExtractedContent:
        """
        Extract title, Markdown content and language from a page.

        Never raises for unusable content; the fallback chain degrades to a
        placeholder instead.

        Args:
            html: Raw page HTML
            url: Page URL

        Returns:
            ExtractedContent
        """
        page = self.prepare(html, url)
        language = self._language(page.soup)

        if self.multiple_methods:
            result = self._extract_with_fallbacks(page)
        else:
            result = self._extract_single(page)

        if self.cleaner is not None:
            result.content = self.cleaner.clean(result.content)

        result.language = language
        return result

    def prepare(self, html: str, url: str) -> PreparedPage:
        """Parse HTML and apply the unconditional preprocessing."""
        soup = BeautifulSoup(html, 'lxml')
        title = soup.title.get_text(strip=True) if soup.title else ''

        # JSON-LD is read before scripts are stripped
        json_ld = []
        for script in soup.find_all('script', attrs={'type': 'application/ld+json'}):
            try:
                json_ld.append(json.loads(script.string or script.get_text() or ''))
            except ValueError:
                self.logger.debug(f"Ignoring invalid JSON-LD on {url}")

        for selector in self.strip_selectors:
            try:
                elements = soup.select(selector)
            except Exception as e:
                self.logger.warning(f"Invalid strip selector {selector!r}: {e}")
                continue
            for element in elements:
                element.decompose()

        for element in soup.find_all(NON_CONTENT_TAGS):
            element.decompose()

        return PreparedPage(url=url, soup=soup, title=title, json_ld=json_ld)

    @staticmethod
    def _language(soup: BeautifulSoup) -> Optional[str]:
        root = soup.find('html')
        if root is None:
            return None
        return root.get('lang') or None

    def _extract_single(self, page: PreparedPage) -> ExtractedContent:
        """Readability (if enabled) or the whole body, converted to Markdown."""
        title = page.display_title
        body = page.soup.body or page.soup
        content_html = None

        if self.use_readability:
            try:
                document = Document(str(page.soup))
                content_html = document.summary(html_partial=True)
                short_title = document.short_title()
                if short_title and short_title != '[no-title]':
                    title = short_title
            except Exception as e:
                self.logger.debug(f"Readability failed for {page.url}: {e}")

        if not content_html:
            content_html = body.decode_contents()

        content = html_to_markdown(content_html)
        if not content:
            content = _visible_text(body)

        return ExtractedContent(title=title, content=content, method="single")

    def _extract_with_fallbacks(self, page: PreparedPage) -> ExtractedContent:
        """Try each fallback method in priority order."""
        for method in FALLBACK_METHODS:
            if method is extract_with_readability and not self.use_readability:
                continue
            try:
                result = method(page)
            except ParseError as e:
                self.logger.debug(f"{method.__name__} failed for {page.url}: {e}")
                continue
            except Exception as e:
                self.logger.debug(f"{method.__name__} failed for {page.url}: {type(e).__name__}: {e}")
                continue
            if len(result.content.strip()) > MIN_EXTRACTED_CHARS:
                self.logger.debug(f"Extracted {page.url} using {result.method}")
                return result

        self.logger.debug(f"All extraction methods failed for {page.url}")
        return ExtractedContent(title=page.display_title, content=NO_CONTENT_PLACEHOLDER, method="none")
