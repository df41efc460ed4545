"""
File system discovery for local documentation trees.

Walks a base directory depth-first and selects files with glob patterns.
"""

import os
import time
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Set

from ..models import DiscoveredFile, FileDiscoveryStats, FileSystemResult
from ..utils.constants import (
    DEFAULT_FILE_INCLUDE_PATTERNS,
    DEFAULT_FILE_EXCLUDE_PATTERNS,
    DEFAULT_MAX_FILE_SYSTEM_DEPTH,
)
from ..utils.log import get_logger
from ..utils.patterns import matches_globs


class FileSystemDiscoverer:
    """
    Discovers local files matching include/exclude glob patterns.

    Exclude patterns always win over include patterns. Excluded
    directories are pruned without being read.
    """

    def __init__(
        self,
        base_path: str,
        include_patterns: Optional[Sequence[str]] = None,
        exclude_patterns: Optional[Sequence[str]] = None,
        max_depth: int = DEFAULT_MAX_FILE_SYSTEM_DEPTH,
        follow_symlinks: bool = False
    ):
        """
        Initialize the file system discoverer.

        Args:
            base_path: Directory to walk
            include_patterns: Globs a file must match
            exclude_patterns: Globs that reject files and prune directories
            max_depth: Maximum directory depth below base_path
            follow_symlinks: Whether to follow symbolic links
        """
        self.base_path = os.path.abspath(base_path)
        self.include_patterns = list(
            DEFAULT_FILE_INCLUDE_PATTERNS if include_patterns is None else include_patterns
        )
        self.exclude_patterns = list(
            DEFAULT_FILE_EXCLUDE_PATTERNS if exclude_patterns is None else exclude_patterns
        )
        self.max_depth = max_depth
        self.follow_symlinks = follow_symlinks
        self.logger = get_logger("filesystem")

    def discover(self) -> FileSystemResult:
        """
        Walk the base directory.

        Returns:
            FileSystemResult with matching files and walk statistics
        """
        start = time.monotonic()
        stats = FileDiscoveryStats()
        files: List[DiscoveredFile] = []

        self.logger.info(f"Starting file system discovery from: {self.base_path}")

        visited: Set[str] = {os.path.realpath(self.base_path)}
        self._scan_directory(self.base_path, 0, files, stats, visited)

        stats.duration_ms = (time.monotonic() - start) * 1000
        self.logger.info(
            f"File system discovery completed: {stats.included} included, "
            f"{stats.excluded} excluded, {stats.directories_traversed} directories"
        )
        return FileSystemResult(files=files, stats=stats)

    def _scan_directory(
        self,
        dir_path: str,
        depth: int,
        files: List[DiscoveredFile],
        stats: FileDiscoveryStats,
        visited: Set[str]
    ) -> None:
        """Recursively scan one directory."""
        if depth > self.max_depth:
            return

        try:
            with os.scandir(dir_path) as iterator:
                entries = sorted(iterator, key=lambda e: e.name)
        except OSError as e:
            self.logger.warning(f"Failed to scan directory {dir_path}: {e}")
            return

        stats.directories_traversed += 1

        for entry in entries:
            relative_path = os.path.relpath(entry.path, self.base_path)

            try:
                if entry.is_symlink():
                    if not self.follow_symlinks:
                        continue
                    self._scan_symlink(entry, relative_path, depth, files, stats, visited)
                elif entry.is_dir(follow_symlinks=False):
                    if self._is_excluded_dir(relative_path):
                        stats.excluded += 1
                        continue
                    real = os.path.realpath(entry.path)
                    if real in visited:
                        continue
                    visited.add(real)
                    self._scan_directory(entry.path, depth + 1, files, stats, visited)
                elif entry.is_file(follow_symlinks=False):
                    self._process_file(entry.path, relative_path, files, stats, False)
            except OSError as e:
                self.logger.warning(f"Failed to inspect {entry.path}: {e}")

    def _scan_symlink(
        self,
        entry: os.DirEntry,
        relative_path: str,
        depth: int,
        files: List[DiscoveredFile],
        stats: FileDiscoveryStats,
        visited: Set[str]
    ) -> None:
        """Follow a symbolic link to its target type."""
        real = os.path.realpath(entry.path)
        if not os.path.exists(real):
            # Broken link
            return

        if os.path.isdir(real):
            if self._is_excluded_dir(relative_path) or real in visited:
                return
            visited.add(real)
            self._scan_directory(entry.path, depth + 1, files, stats, visited)
        elif os.path.isfile(real):
            self._process_file(entry.path, relative_path, files, stats, True)

    def _is_excluded_dir(self, relative_path: str) -> bool:
        return matches_globs(relative_path.replace(os.sep, '/') + '/', self.exclude_patterns)

    def _process_file(
        self,
        full_path: str,
        relative_path: str,
        files: List[DiscoveredFile],
        stats: FileDiscoveryStats,
        is_symlink: bool
    ) -> None:
        """Apply patterns to one file and record it if selected."""
        stats.total_scanned += 1
        relative_posix = relative_path.replace(os.sep, '/')

        # Check exclude patterns first
        if matches_globs(relative_posix, self.exclude_patterns):
            stats.excluded += 1
            return

        if not matches_globs(relative_posix, self.include_patterns):
            stats.excluded += 1
            return

        try:
            stat = os.stat(full_path)
        except OSError as e:
            self.logger.warning(f"Failed to stat file {full_path}: {e}")
            stats.excluded += 1
            return

        files.append(DiscoveredFile(
            path=full_path,
            relative_path=relative_posix,
            extension=os.path.splitext(full_path)[1],
            size_bytes=stat.st_size,
            modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            depth=relative_posix.count('/'),
            is_symlink=is_symlink
        ))
        stats.included += 1
