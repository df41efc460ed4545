"""
Crawler module for the llms-full generator.

Contains components for sitemap resolution, link and file discovery,
fetching, content extraction and the generation pipeline.
"""

from .fetcher import Fetcher, FetchResponse
from .sitemap import SitemapResolver
from .discovery import LinkDiscoverer
from .filesystem import FileSystemDiscoverer
from .extractor import ContentExtractor, ExtractedContent
from .cleaner import ContentCleaner, CleaningConfig
from .worker import CrawlWorkerPool
from .generator import LLMSGenerator, generate

__all__ = [
    "Fetcher",
    "FetchResponse",
    "SitemapResolver",
    "LinkDiscoverer",
    "FileSystemDiscoverer",
    "ContentExtractor",
    "ExtractedContent",
    "ContentCleaner",
    "CleaningConfig",
    "CrawlWorkerPool",
    "LLMSGenerator",
    "generate",
]
