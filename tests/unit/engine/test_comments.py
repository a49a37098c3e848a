"""
proptag — unit tests for the comment block locator

File: tests/unit/engine/test_comments.py

Purpose
- Verify first-block selection and the whitespace-only association rule
  between a block and the declaration that follows it.
"""

from __future__ import annotations

from proptag.engine.comments import find_blocks, first_block, following_block, preceding_block
from proptag.engine.languages import PYTHON_STYLE


def test_first_block_is_the_earliest_block_comment() -> None:
    text = "const x = 1;\n/* first */\n/* second */\n"

    block = first_block(text)

    assert block is not None
    assert block.text == "/* first */"
    assert block.start_offset == text.index("/* first */")
    assert block.end_offset == block.start_offset + len("/* first */")


def test_first_block_none_without_comments() -> None:
    assert first_block("function f() {}\n// line comment only\n") is None


def test_find_blocks_returns_document_order() -> None:
    text = "/* a */ x /* b\n spans */ y /* c */"

    assert [block.text for block in find_blocks(text)] == ["/* a */", "/* b\n spans */", "/* c */"]


def test_preceding_block_allows_whitespace_gap() -> None:
    text = "/* file */\n\n/* doc */\n\n   function f() {}\n"
    start = text.index("function")

    block = preceding_block(text, start)

    assert block is not None
    assert block.text == "/* doc */"


def test_preceding_block_forfeited_by_intervening_code() -> None:
    text = "/* doc */\nconst y = 2;\nfunction f() {}\n"

    assert preceding_block(text, text.index("function")) is None


def test_preceding_block_none_when_nothing_before() -> None:
    text = "function f() {}\n/* trailing */\n"

    assert preceding_block(text, 0) is None


def test_python_style_blocks_use_triple_quotes() -> None:
    text = '"""Module doc."""\n\n\ndef f():\n    \'\'\'Function doc.\'\'\'\n'

    blocks = find_blocks(text, PYTHON_STYLE)

    assert [block.text for block in blocks] == ['"""Module doc."""', "'''Function doc.'''"]


def test_following_block_requires_whitespace_only_gap() -> None:
    text = 'def f():\n    """Doc."""\n'
    header_end = text.index("\n") + 1

    block = following_block(text, header_end, PYTHON_STYLE)

    assert block is not None
    assert block.text == '"""Doc."""'
    assert following_block('def f():\n    x = 1\n    """Late."""\n', 9, PYTHON_STYLE) is None
