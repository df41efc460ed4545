"""
Document module: character budgets and llms-full rendering.
"""

from .assembler import apply_character_limits, assemble_document, demote_headings

__all__ = [
    "apply_character_limits",
    "assemble_document",
    "demote_headings",
]
