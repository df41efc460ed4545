"""
Web module for the llms-full generator.

Provides a Flask route serving the generated document at /llms.txt.
"""

from .app import create_app, RouteConfig, ContentCache

__all__ = ["create_app", "RouteConfig", "ContentCache"]
