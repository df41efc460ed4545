"""Tests for the Markdown cleaning pass."""

import re

from llms_generator.crawler.cleaner import CleaningConfig, ContentCleaner


def clean(text, **config):
    return ContentCleaner(CleaningConfig(**config)).clean(text)


def test_removes_front_matter():
    text = "---\ntitle: Hello\ntags: [a]\n---\n# Hello\n\nBody"
    assert clean(text) == "# Hello\n\nBody"


def test_front_matter_only_at_start():
    text = "Intro\n\n---\nnot: front matter\n---\n"
    assert "not: front matter" in clean(text)


def test_removes_comments():
    text = "Before {/* hidden */} after\n<!-- note -->\nEnd"
    assert clean(text) == "Before  after\n\nEnd"


def test_br_becomes_newline():
    assert clean("one<br>two<br/>three") == "one\ntwo\nthree"


def test_faq_items_become_plain_text():
    text = '<FAQ>\n<FAQItem question="What is it?">\n  A generator.\n</FAQItem>\n</FAQ>'
    assert clean(text) == "Question: What is it?\nAnswer: A generator."


def test_strips_components_and_imports():
    text = (
        "import { Tabs } from '@theme/Tabs';\n"
        "import Layout from \"../layout\"\n"
        "\n"
        "<Tabs>\n<TabItem value=\"a\">Content A</TabItem>\n</Tabs>"
    )
    assert clean(text) == "Content A"


def test_tables_are_preserved_verbatim():
    table = "| Name | <b>Value</b> |\n|------|-------|\n| a    | <i>1</i>     |\n"
    text = f"Intro <Badge/>\n\n{table}\n<Note>after</Note>"
    result = clean(text)
    assert table.rstrip("\n") in result
    assert "<Badge/>" not in result
    assert "<Note>" not in result


def test_images_removed_only_when_enabled():
    text = "See ![diagram](img/d.png) here"
    assert "![diagram]" in clean(text)
    assert clean(text, remove_images=True) == "See  here"


def test_custom_patterns():
    text = "Keep this\nDRAFT: remove me\nand this"
    result = clean(text, custom_patterns=[re.compile(r"^DRAFT:.*$", re.MULTILINE)])
    assert result == "Keep this\n\nand this"


def test_collapses_blank_lines_and_trims():
    assert clean("\n\n\nA\n\n\n\nB\n\n") == "A\n\nB"


def test_switches_can_disable_steps():
    text = "---\na: b\n---\n<X>y</X>"
    result = clean(text, remove_frontmatter=False, remove_jsx_components=False)
    assert result == text
