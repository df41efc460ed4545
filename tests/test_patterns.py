"""Tests for the glob compiler."""

import pytest

from llms_generator.utils.patterns import compile_glob, matches_glob, matches_globs


@pytest.mark.parametrize("path, pattern, expected", [
    ("README.md", "**/*.md", True),
    ("docs/guide/intro.md", "**/*.md", True),
    ("docs/guide/intro.mdx", "**/*.md", False),
    ("docs/intro.md", "*.md", False),
    ("intro.md", "*.md", True),
    ("node_modules/pkg/readme.md", "**/node_modules/**", True),
    ("web/node_modules/pkg/readme.md", "**/node_modules/**", True),
    (".git/", "**/.*/**", True),
    ("docs/.cache/a.md", "**/.*/**", True),
    (".env.md", "**/.*/**", False),
    ("a1.txt", "a?.txt", True),
    ("a/.txt", "a?.txt", False),
    ("docs/v1.0/notes.txt", "docs/v1.0/*.txt", True),
    ("docs/v1x0/notes.txt", "docs/v1.0/*.txt", False),
])
def test_matches_glob(path, pattern, expected):
    assert matches_glob(path, pattern) is expected


def test_patterns_are_anchored():
    assert compile_glob("*.md").match("notes.md.bak") is None


def test_backslashes_are_normalized():
    assert matches_glob("docs\\intro.md", "docs/*.md")


def test_matches_globs_any():
    assert matches_globs("build/out.txt", ["**/*.md", "**/build/**"])
    assert not matches_globs("src/out.py", ["**/*.md", "**/build/**"])
