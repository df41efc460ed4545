"""
Robots.txt rules for crawl target filtering.

Loads robots.txt through the shared fetcher and answers allow/disallow
questions for crawl targets.
"""

import re
from typing import List, Optional, Tuple
from urllib.parse import urlparse

from .errors import GeneratorError
from .log import get_logger


class RobotsRules:
    """
    Parsed robots.txt rules for one site.

    Only groups addressed to `*` or to our user agent apply. The longest
    matching rule wins; on a tie Allow beats Disallow.
    """

    def __init__(self, site_url: str, user_agent: str = "*"):
        """
        Initialize the robots.txt rules.

        Args:
            site_url: Site base URL
            user_agent: User agent string to match groups against
        """
        parsed = urlparse(site_url)
        self.robots_url = f"{parsed.scheme}://{parsed.netloc}/robots.txt"
        # Product token only, e.g. "llms-full-generator" from "llms-full-generator/1.0.0"
        self.agent_token = user_agent.split('/')[0].strip().lower() or "*"
        self.logger = get_logger("robots")

        # (is_allow, path pattern)
        self.rules: List[Tuple[bool, str]] = []
        self.crawl_delay: Optional[float] = None
        self._loaded = False

    async def load(self, fetcher) -> bool:
        """
        Fetch and parse robots.txt.

        A missing robots.txt allows everything; any other failure leaves
        the rules unloaded, which also allows everything.

        Args:
            fetcher: An open Fetcher

        Returns:
            True if rules were loaded (or no robots.txt exists)
        """
        try:
            response = await fetcher.fetch(self.robots_url)
        except GeneratorError as e:
            self.logger.warning(f"Error fetching robots.txt: {e}")
            return False

        if response.status == 404:
            self._loaded = True
            self.logger.info("No robots.txt found - all URLs allowed")
            return True

        if not response.ok:
            self.logger.warning(f"Failed to load robots.txt: HTTP {response.status}")
            return False

        self.parse(response.text)
        self.logger.info(f"Loaded robots.txt from {self.robots_url} ({len(self.rules)} rules)")
        return True

    def parse(self, content: str) -> None:
        """
        Parse robots.txt content.

        Args:
            content: robots.txt file content
        """
        applies = False
        reading_agents = False

        for raw_line in content.splitlines():
            line = raw_line.split('#', 1)[0].strip()
            if not line or ':' not in line:
                continue

            directive, value = line.split(':', 1)
            directive = directive.strip().lower()
            value = value.strip()

            if directive == 'user-agent':
                if not reading_agents:
                    # A new group starts
                    applies = False
                    reading_agents = True
                agent = value.lower()
                if agent == '*' or agent == self.agent_token:
                    applies = True
                continue

            reading_agents = False

            if not applies:
                continue
            elif directive in ('allow', 'disallow') and value:
                self.rules.append((directive == 'allow', value))
            elif directive == 'crawl-delay':
                try:
                    self.crawl_delay = float(value)
                except ValueError:
                    self.logger.debug(f"Ignoring invalid crawl-delay: {value!r}")

        self._loaded = True

    def is_allowed(self, url: str) -> bool:
        """
        Check if a URL may be crawled.

        Args:
            url: URL to check

        Returns:
            True if allowed, False if disallowed
        """
        if not self._loaded:
            return True

        parsed = urlparse(url)
        path = parsed.path or '/'
        if parsed.query:
            path = f"{path}?{parsed.query}"

        best_length = -1
        allowed = True
        for is_allow, pattern in self.rules:
            if not self._matches(path, pattern):
                continue
            length = len(pattern)
            if length > best_length or (length == best_length and is_allow):
                best_length = length
                allowed = is_allow

        if not allowed:
            self.logger.debug(f"URL disallowed by robots.txt: {url}")
        return allowed

    @staticmethod
    def _matches(path: str, pattern: str) -> bool:
        """Match a path against a robots.txt pattern (`*` and trailing `$`)."""
        if '*' not in pattern and not pattern.endswith('$'):
            return path.startswith(pattern)

        anchored = pattern.endswith('$')
        body = pattern[:-1] if anchored else pattern
        regex = '.*'.join(re.escape(part) for part in body.split('*'))
        if anchored:
            regex += '$'
        return re.match(regex, path) is not None
