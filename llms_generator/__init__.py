"""
llms-full generator - crawl a website and build a single LLM-ready document.

This package discovers pages through sitemaps, link following and local file
trees, extracts clean Markdown from each page, and assembles the result into
one "llms-full" text document.
"""

__version__ = "1.0.0"
__author__ = "llms-full-generator contributors"
