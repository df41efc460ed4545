"""
Glob pattern matching for file system discovery.

Compiles glob-like patterns into anchored regular expressions. Supported
wildcards:

    **/   zero or more whole directories
    **    anything, including "/"
    *     anything within a single path segment
    ?     one character other than "/"

Every other character matches literally. Callers evaluate exclude patterns
before include patterns.
"""

import re
from functools import lru_cache
from typing import Iterable, Pattern


@lru_cache(maxsize=256)
def compile_glob(pattern: str) -> Pattern:
    """
    Compile a glob pattern into an anchored regex.

    Args:
        pattern: Glob pattern using "/" as separator

    Returns:
        Compiled regular expression matching whole paths
    """
    pattern = pattern.replace('\\', '/')
    parts = []
    i = 0
    length = len(pattern)

    while i < length:
        char = pattern[i]
        if char == '*':
            if pattern.startswith('**', i):
                if pattern.startswith('**/', i):
                    parts.append('(?:.*/)?')
                    i += 3
                else:
                    parts.append('.*')
                    i += 2
                continue
            parts.append('[^/]*')
        elif char == '?':
            parts.append('[^/]')
        else:
            parts.append(re.escape(char))
        i += 1

    return re.compile('^' + ''.join(parts) + '$')


def matches_glob(path: str, pattern: str) -> bool:
    """
    Check a relative path against one glob pattern.

    Args:
        path: Relative path (either separator style)
        pattern: Glob pattern

    Returns:
        True if the whole path matches
    """
    return bool(compile_glob(pattern).match(path.replace('\\', '/')))


def matches_globs(path: str, patterns: Iterable[str]) -> bool:
    """
    Check a relative path against several glob patterns.

    Args:
        path: Relative path (either separator style)
        patterns: Glob patterns

    Returns:
        True if any pattern matches
    """
    return any(matches_glob(path, pattern) for pattern in patterns)
