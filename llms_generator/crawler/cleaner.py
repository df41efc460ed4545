"""
Markdown cleaning pass.

Strips framework markup (front matter, MDX comments and components, import
statements) from extracted text while leaving Markdown tables untouched.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Pattern


FRONTMATTER_PATTERN = re.compile(r'\A\s*(---|\+\+\+)[ \t]*\r?\n[\s\S]*?\r?\n\1[ \t]*(?:\r?\n|\Z)')
JSX_COMMENT_PATTERN = re.compile(r'\{/\*[\s\S]*?\*/\}')
HTML_COMMENT_PATTERN = re.compile(r'<!--[\s\S]*?-->')
BR_PATTERN = re.compile(r'<br\s*/?>', re.IGNORECASE)
FAQ_ITEM_PATTERN = re.compile(r'<FAQItem\s+question="([^"]+)"\s*>([\s\S]*?)</FAQItem>')
FAQ_PATTERN = re.compile(r'<FAQ>([\s\S]*?)</FAQ>')
TAG_PATTERN = re.compile(r'</?[A-Za-z][\w.:-]*(?:\s[^<>]*)?/?>')
IMAGE_PATTERN = re.compile(r'!\[[^\]]*\]\([^)]*\)')
IMPORT_PATTERN = re.compile(
    r'^[ \t]*import\s+(?:.*?\s+from\s+)?[\'"][^\'"]*[\'"];?[ \t]*$',
    re.MULTILINE
)

# Two or more consecutive pipe-delimited lines form a table block
TABLE_PATTERN = re.compile(r'((?:^[ \t]*\|.*\|[ \t]*(?:\n|\Z)){2,})', re.MULTILINE)


@dataclass
class CleaningConfig:
    """Switches for the cleaning pass."""
    remove_frontmatter: bool = True
    remove_jsx_components: bool = True
    remove_imports: bool = True
    remove_html_comments: bool = True
    remove_images: bool = False
    custom_patterns: List[Pattern] = field(default_factory=list)


class ContentCleaner:
    """Cleans extracted Markdown according to a CleaningConfig."""

    def __init__(self, config: Optional[CleaningConfig] = None):
        self.config = config or CleaningConfig()

    def clean(self, content: str) -> str:
        """
        Clean Markdown content.

        Args:
            content: Extracted Markdown

        Returns:
            Cleaned Markdown with table blocks preserved verbatim
        """
        cfg = self.config
        cleaned = content.replace('\r\n', '\n')

        if cfg.remove_frontmatter:
            cleaned = FRONTMATTER_PATTERN.sub('', cleaned, count=1)

        if cfg.remove_html_comments:
            cleaned = JSX_COMMENT_PATTERN.sub('', cleaned)
            cleaned = HTML_COMMENT_PATTERN.sub('', cleaned)

        cleaned = BR_PATTERN.sub('\n', cleaned)

        cleaned = FAQ_ITEM_PATTERN.sub(
            lambda m: f"Question: {m.group(1)}\nAnswer: {m.group(2).strip()}\n",
            cleaned
        )
        cleaned = FAQ_PATTERN.sub(lambda m: m.group(1), cleaned)

        # Odd indexes of the split are table blocks
        segments = TABLE_PATTERN.split(cleaned)
        processed = []
        for index, segment in enumerate(segments):
            if index % 2 == 1:
                processed.append(segment)
            else:
                processed.append(self._clean_segment(segment))

        return self._collapse_blank_lines(''.join(processed))

    def _clean_segment(self, segment: str) -> str:
        cfg = self.config
        if cfg.remove_jsx_components:
            segment = TAG_PATTERN.sub('', segment)
        if cfg.remove_images:
            segment = IMAGE_PATTERN.sub('', segment)
        if cfg.remove_imports:
            segment = IMPORT_PATTERN.sub('', segment)
        for pattern in cfg.custom_patterns:
            segment = pattern.sub('', segment)
        return segment

    @staticmethod
    def _collapse_blank_lines(text: str) -> str:
        lines: List[str] = []
        previous_blank = False
        for line in text.split('\n'):
            blank = not line.strip()
            if blank and previous_blank:
                continue
            lines.append('' if blank else line)
            previous_blank = blank

        while lines and not lines[0]:
            lines.pop(0)
        while lines and not lines[-1]:
            lines.pop()
        return '\n'.join(lines)
