"""
Flask web application serving a generated llms-full document.

Provides a `/llms.txt` route that generates the document on demand and
keeps it in a TTL cache.
"""

import asyncio
import json
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from flask import Flask, Response, request

from ..crawler.generator import generate
from ..options import GeneratorOptions
from ..utils.log import get_logger


logger = get_logger("web")


class ContentCache:
    """
    In-memory cache of generated documents.

    Entries expire `ttl_minutes` after they were stored.
    """

    def __init__(self, ttl_minutes: float = 60):
        self.ttl = ttl_minutes * 60
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            content, stored_at = entry
            if time.time() - stored_at > self.ttl:
                del self._entries[key]
                return None
            return content

    def set(self, key: str, content: str) -> None:
        with self._lock:
            self._entries[key] = (content, time.time())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def default_cache_key(generator_options: Dict[str, Any]) -> str:
    """Cache key built from the options that decide which pages are crawled."""
    options = GeneratorOptions.from_dict(generator_options)
    key = {
        'site_url': options.site_url,
        'sitemap_url': options.sitemap_url,
        'max_pages': options.max_pages,
        'include_patterns': [getattr(p, 'pattern', p) for p in options.include_patterns],
        'exclude_patterns': [getattr(p, 'pattern', p) for p in options.exclude_patterns],
    }
    return json.dumps(key, sort_keys=True)


@dataclass
class RouteConfig:
    """Configuration of the /llms.txt route."""
    generator_options: Dict[str, Any] = field(default_factory=dict)
    cache_ttl: float = 60
    enable_cache: bool = True
    cache_key_generator: Callable[[Dict[str, Any]], str] = default_cache_key
    response_headers: Dict[str, str] = field(default_factory=dict)
    enable_revalidation: bool = False
    revalidation_secret: Optional[str] = None


def error_response(message: str) -> Response:
    body = (
        f"# Error\n\nFailed to generate LLMS content: {message}\n\n"
        f"Please check your configuration and try again."
    )
    return Response(
        body,
        status=500,
        headers={'Content-Type': 'text/plain; charset=utf-8', 'X-Error': 'true'}
    )


def create_app(config: Optional[RouteConfig] = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config: Route configuration (defaults read the site URL from the
            environment at request time)

    Returns:
        Flask application

    Raises:
        ValueError: If revalidation is enabled without a secret
    """
    config = config or RouteConfig()
    if config.enable_revalidation and not config.revalidation_secret:
        raise ValueError('revalidation_secret is required when enable_revalidation is true')

    app = Flask(__name__)
    app.content_cache = ContentCache(config.cache_ttl) if config.enable_cache else None

    @app.route('/llms.txt')
    def llms_txt():
        """Serve the llms-full document."""
        cache = app.content_cache
        try:
            if config.enable_revalidation and request.args.get('revalidate') == 'true':
                if request.args.get('secret') != config.revalidation_secret:
                    return Response('Unauthorized', status=401)
                if cache is not None:
                    cache.clear()
                    logger.info("Cache cleared by revalidation request")

            cache_key = config.cache_key_generator(config.generator_options) if cache is not None else ''

            content = cache.get(cache_key) if cache is not None else None
            if content is None:
                options = GeneratorOptions.from_dict(config.generator_options)
                content, stats = asyncio.run(generate(options))
                logger.info(
                    f"Generated {stats.total_pages} pages in {stats.duration_seconds:.1f}s"
                )
                if cache is not None:
                    cache.set(cache_key, content)

            headers = {
                'Content-Type': 'text/plain; charset=utf-8',
                'Cache-Control': (
                    f'public, max-age={int(config.cache_ttl * 60)}'
                    if config.enable_cache else 'no-cache'
                ),
                'X-Generated-At': time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime()),
                'X-Content-Length': str(len(content)),
            }
            headers.update(config.response_headers)
            return Response(content, headers=headers)

        except Exception as e:
            logger.error(f"Error generating LLMS content: {e}")
            return error_response(str(e) or type(e).__name__)

    return app


def run_app(
    host: str = '127.0.0.1',
    port: int = 5000,
    debug: bool = False,
    config: Optional[RouteConfig] = None
):
    """Run the Flask web application."""
    app = create_app(config)
    app.run(host=host, port=port, debug=debug)
