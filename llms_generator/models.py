"""
Data model shared by the crawl, analysis and document stages.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SitemapEntry:
    """A URL listed in a sitemap."""
    loc: str
    lastmod: Optional[str] = None


@dataclass
class SitemapResult:
    """Result of parsing one sitemap document."""
    urls: List[SitemapEntry] = field(default_factory=list)
    is_index: bool = False
    child_sitemaps: List[str] = field(default_factory=list)


class DiscoveryMethod(Enum):
    """How a URL entered the discovery set."""
    SITEMAP = "sitemap"
    INTERNAL_LINK = "internal-link"
    EXTERNAL_LINK = "external-link"


@dataclass
class DiscoveredURL:
    """
    A URL in the discovery set.

    Depth 0 is a seed; each link-following hop adds exactly one.
    """
    url: str
    depth: int = 0
    discovery_method: DiscoveryMethod = DiscoveryMethod.SITEMAP
    parent_url: Optional[str] = None
    lastmod: Optional[str] = None


@dataclass(frozen=True)
class DiscoveredFile:
    """A local file selected by file system discovery."""
    path: str
    relative_path: str
    extension: str
    size_bytes: int
    modified_at: datetime
    depth: int
    is_symlink: bool = False


@dataclass
class FileDiscoveryStats:
    """Counters collected while walking a directory tree."""
    total_scanned: int = 0
    included: int = 0
    excluded: int = 0
    directories_traversed: int = 0
    duration_ms: float = 0.0


@dataclass
class FileSystemResult:
    """Files found by file system discovery plus walk statistics."""
    files: List[DiscoveredFile] = field(default_factory=list)
    stats: FileDiscoveryStats = field(default_factory=FileDiscoveryStats)

    @property
    def total_files(self) -> int:
        return len(self.files)


@dataclass
class PageResult:
    """
    Outcome of crawling a single page.

    `content_length` is derived from `content`, so it always reflects the
    current text. Failed pages carry a `skip_reason` and placeholder content.
    """
    url: str
    title: str
    content: str
    success: bool
    timestamp: datetime = field(default_factory=utcnow)
    error: Optional[str] = None
    lastmod: Optional[str] = None
    language: Optional[str] = None
    status_code: Optional[int] = None
    skip_reason: Optional[str] = None
    truncated: bool = False
    original_length: Optional[int] = None

    @property
    def content_length(self) -> int:
        return len(self.content)


@dataclass
class ContentCategory:
    """A named bucket with matching rules used to group and cap pages."""
    id: str
    name: str
    priority: int
    url_patterns: List[str] = field(default_factory=list)
    content_patterns: List[str] = field(default_factory=list)
    description: Optional[str] = None
    file_patterns: List[str] = field(default_factory=list)
    max_pages: Optional[int] = None
    enabled: bool = True


@dataclass
class CategorizedPageResult(PageResult):
    """A page result annotated with its category and relevance."""
    category: str = ""
    category_priority: int = 0
    relevance_score: float = 0.0
    matched_keywords: List[str] = field(default_factory=list)


@dataclass
class GenerationStats:
    """Aggregate counters for one generation run."""
    total_pages: int = 0
    successful_pages: int = 0
    failed_pages: int = 0
    skipped_pages: int = 0
    truncated_pages: int = 0
    total_content_length: int = 0
    total_original_length: int = 0
    started_at: datetime = field(default_factory=utcnow)
    finished_at: Optional[datetime] = None
    duration_seconds: float = 0.0
    global_limit_reached: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Plain dictionary view (datetimes as ISO strings)."""
        data = asdict(self)
        data['started_at'] = self.started_at.isoformat()
        data['finished_at'] = self.finished_at.isoformat() if self.finished_at else None
        return data
