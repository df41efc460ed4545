"""
Content categorizer and filter.

Assigns each page to a documentation category, scores its relevance and
filters, orders and caps the page list by category.
"""

import re
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional, Pattern, Union

from ..config import snake_case
from ..models import CategorizedPageResult, ContentCategory, PageResult
from ..utils.log import get_logger


DEFAULT_CATEGORIES: List[ContentCategory] = [
    ContentCategory(
        id='api',
        name='API Documentation',
        description='API references, endpoints, and technical specifications',
        priority=10,
        url_patterns=['/api/', '/docs/api/', '/reference/', '/endpoints/'],
        content_patterns=['API', 'endpoint', 'REST', 'GraphQL', 'HTTP', 'request', 'response'],
        file_patterns=['**/api/**', '**/reference/**'],
        max_pages=50,
    ),
    ContentCategory(
        id='guides',
        name='Guides & Tutorials',
        description='Step-by-step guides and tutorials',
        priority=9,
        url_patterns=['/guides/', '/tutorials/', '/how-to/', '/getting-started/'],
        content_patterns=['tutorial', 'guide', 'step', 'how to', 'getting started', 'walkthrough'],
        file_patterns=['**/guides/**', '**/tutorials/**'],
        max_pages=30,
    ),
    ContentCategory(
        id='concepts',
        name='Concepts & Theory',
        description='Conceptual documentation and theoretical explanations',
        priority=8,
        url_patterns=['/concepts/', '/theory/', '/fundamentals/', '/overview/'],
        content_patterns=['concept', 'theory', 'fundamental', 'overview', 'introduction', 'architecture'],
        file_patterns=['**/concepts/**', '**/fundamentals/**'],
        max_pages=25,
    ),
    ContentCategory(
        id='examples',
        name='Examples & Code Samples',
        description='Code examples and sample implementations',
        priority=7,
        url_patterns=['/examples/', '/samples/', '/demos/', '/playground/'],
        content_patterns=['example', 'sample', 'demo', 'code', 'implementation', 'snippet'],
        file_patterns=['**/examples/**', '**/samples/**', '**/demos/**'],
        max_pages=20,
    ),
    ContentCategory(
        id='configuration',
        name='Configuration',
        description='Configuration options and setup instructions',
        priority=6,
        url_patterns=['/config/', '/configuration/', '/setup/', '/installation/'],
        content_patterns=['config', 'configuration', 'setup', 'install', 'environment', 'settings'],
        file_patterns=['**/config/**', '**/configuration/**'],
        max_pages=15,
    ),
    ContentCategory(
        id='troubleshooting',
        name='Troubleshooting & FAQ',
        description='Common issues, solutions, and frequently asked questions',
        priority=5,
        url_patterns=['/troubleshooting/', '/faq/', '/issues/', '/problems/'],
        content_patterns=['troubleshoot', 'FAQ', 'problem', 'issue', 'error', 'fix', 'solution'],
        file_patterns=['**/troubleshooting/**', '**/faq/**'],
        max_pages=15,
    ),
    ContentCategory(
        id='changelog',
        name='Changelog & Release Notes',
        description='Version history and release information',
        priority=4,
        url_patterns=['/changelog/', '/releases/', '/history/', '/versions/'],
        content_patterns=['changelog', 'release', 'version', 'history', 'update', 'breaking change'],
        file_patterns=['**/CHANGELOG.md', '**/HISTORY.md', '**/releases/**'],
        max_pages=10,
    ),
    ContentCategory(
        id='blog',
        name='Blog Posts',
        description='Blog posts and articles',
        priority=3,
        url_patterns=['/blog/', '/articles/', '/posts/', '/news/'],
        content_patterns=['blog', 'article', 'post', 'news', 'announcement'],
        file_patterns=['**/blog/**', '**/posts/**'],
        max_pages=10,
        # Blogs are noisy
        enabled=False,
    ),
    ContentCategory(
        id='general',
        name='General Documentation',
        description="General documentation that doesn't fit other categories",
        priority=2,
        url_patterns=['/docs/', '/documentation/'],
        content_patterns=[],
        file_patterns=['**/docs/**', '**/documentation/**'],
    ),
]


@dataclass
class ContentFilterConfig:
    """Category taxonomy and filtering rules."""
    categories: List[ContentCategory] = field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    default_category: str = 'general'
    group_by_category: bool = True
    min_content_length: Optional[int] = 100
    max_content_length: Optional[int] = 50000
    priority_keywords: List[str] = field(
        default_factory=lambda: ['documentation', 'guide', 'tutorial', 'API', 'reference']
    )
    exclude_keywords: List[str] = field(
        default_factory=lambda: ['404', 'not found', 'error', 'maintenance']
    )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ContentFilterConfig":
        """
        Build a config from a mapping, overriding the defaults key by key.

        Accepts snake_case or camelCase keys. Categories may be given as
        ContentCategory objects or plain dictionaries.
        """
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            name = snake_case(key)
            if name not in known:
                continue
            if name == 'categories':
                value = [_to_category(c) for c in value]
            kwargs[name] = value
        return cls(**kwargs)


DEFAULT_FILTER_CONFIG = ContentFilterConfig()


def _to_category(value: Union[ContentCategory, Mapping[str, Any]]) -> ContentCategory:
    if isinstance(value, ContentCategory):
        return value
    known = {f.name for f in fields(ContentCategory)}
    kwargs = {}
    for key, item in value.items():
        name = snake_case(key)
        if name in known:
            kwargs[name] = item
    return ContentCategory(**kwargs)


def _compile_content_pattern(pattern: str) -> Pattern:
    try:
        return re.compile(pattern.lower(), re.IGNORECASE)
    except re.error:
        # Invalid regexes are matched literally
        return re.compile(re.escape(pattern.lower()), re.IGNORECASE)


class ContentFilter:
    """
    Categorizes, filters and orders pages.

    Category scores are additive and unnormalized: +10 per URL pattern
    found in the URL and +2 per content pattern match in title and content.
    """

    def __init__(self, config: Optional[Union[ContentFilterConfig, Mapping[str, Any]]] = None):
        """
        Initialize the content filter.

        Args:
            config: Filter configuration, or a mapping of overrides

        Raises:
            ValueError: If the configuration has no categories
        """
        if config is None:
            config = ContentFilterConfig()
        elif not isinstance(config, ContentFilterConfig):
            config = ContentFilterConfig.from_dict(config)

        if not config.categories:
            raise ValueError("No categories available for content filtering")

        self.config = config
        self.logger = get_logger("categorizer")
        self._content_patterns: Dict[str, List[Pattern]] = {
            category.id: [_compile_content_pattern(p) for p in category.content_patterns]
            for category in config.categories
        }

    def categorize(self, page: PageResult) -> CategorizedPageResult:
        """
        Assign a category and relevance score to a page.

        Args:
            page: Page to categorize

        Returns:
            CategorizedPageResult carrying the page's fields
        """
        category = self._find_best_category(page)
        text = self._page_text(page)

        return CategorizedPageResult(
            **{f.name: getattr(page, f.name) for f in fields(PageResult)},
            category=category.id,
            category_priority=category.priority,
            relevance_score=self._relevance_score(page, text, category),
            matched_keywords=self._matched_keywords(text)
        )

    def filter(self, pages: List[PageResult]) -> List[CategorizedPageResult]:
        """
        Categorize pages, drop excluded ones and sort the rest.

        Sorting is stable on (category priority desc, relevance desc,
        content length desc).

        Args:
            pages: Pages to filter

        Returns:
            Included pages in priority order
        """
        categorized = [self.categorize(page) for page in pages]
        included = [page for page in categorized if self._should_include(page)]
        included.sort(key=lambda p: (-p.category_priority, -p.relevance_score, -p.content_length))

        self.logger.info(
            f"Content filter kept {len(included)} of {len(pages)} pages"
        )
        return included

    def group_by_category(
        self,
        pages: List[CategorizedPageResult]
    ) -> Dict[str, List[CategorizedPageResult]]:
        """Group pages by category id, keeping page order within groups."""
        grouped: Dict[str, List[CategorizedPageResult]] = {}
        for page in pages:
            grouped.setdefault(page.category, []).append(page)
        return grouped

    def apply_category_limits(
        self,
        pages: List[CategorizedPageResult]
    ) -> List[CategorizedPageResult]:
        """
        Truncate each category's pages to its max_pages.

        Categories appear in order of first occurrence; categories without
        a limit keep all their pages.
        """
        categories = {category.id: category for category in self.config.categories}
        result: List[CategorizedPageResult] = []

        for category_id, category_pages in self.group_by_category(pages).items():
            category = categories.get(category_id)
            limit = category.max_pages if category and category.max_pages is not None else None
            result.extend(category_pages if limit is None else category_pages[:limit])

        return result

    def category_counts(self, pages: List[CategorizedPageResult]) -> Dict[str, int]:
        """Number of pages per category id."""
        return {cid: len(items) for cid, items in self.group_by_category(pages).items()}

    @staticmethod
    def _page_text(page: PageResult) -> str:
        return f"{page.title} {page.content}".lower()

    def _find_best_category(self, page: PageResult) -> ContentCategory:
        categories = self.config.categories
        best = next(
            (c for c in categories if c.id == self.config.default_category),
            categories[0]
        )
        best_score = 0

        for category in categories:
            if not category.enabled:
                continue
            score = self._category_score(page, category)
            if score > best_score:
                best_score = score
                best = category

        return best

    def _category_score(self, page: PageResult, category: ContentCategory) -> int:
        score = 0
        url = page.url.lower()
        for pattern in category.url_patterns:
            if pattern.lower() in url:
                score += 10

        text = self._page_text(page)
        for regex in self._content_patterns.get(category.id, []):
            score += 2 * len(regex.findall(text))

        return score

    def _relevance_score(self, page: PageResult, text: str, category: ContentCategory) -> float:
        score = 0.5
        score += 0.1 * len(self._matched_keywords(text))
        if page.content_length > 1000:
            score += 0.1
        score += category.priority / 100
        return min(1.0, score)

    def _matched_keywords(self, text: str) -> List[str]:
        return [k for k in self.config.priority_keywords if k.lower() in text]

    def _should_include(self, page: CategorizedPageResult) -> bool:
        cfg = self.config
        if cfg.min_content_length and page.content_length < cfg.min_content_length:
            return False
        if cfg.max_content_length and page.content_length > cfg.max_content_length:
            return False

        text = self._page_text(page)
        if any(keyword.lower() in text for keyword in cfg.exclude_keywords):
            return False

        category = next((c for c in cfg.categories if c.id == page.category), None)
        return bool(category and category.enabled)
