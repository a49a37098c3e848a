"""
proptag — unit tests for property block templates

File: tests/unit/engine/test_templates.py

Purpose
- Verify the rendered block layout and that every rendered block validates
  cleanly against the schema it came from.
"""

from __future__ import annotations

import pytest

from proptag.constants import MASTER_FORMULA, SCOPES
from proptag.engine.languages import C_STYLE, PYTHON_STYLE, CommentSyntax
from proptag.engine.properties import UnknownScopeError, build_snapshot, default_snapshot
from proptag.engine.tags import scan
from proptag.engine.templates import render_property_block, template_entries
from proptag.engine.validator import validate


def test_file_block_layout_for_c_style() -> None:
    rendered = render_property_block("file", default_snapshot())

    assert rendered == (
        "/*\n"
        f"{MASTER_FORMULA}\n"
        "[[OPEN:author]]\n"
        "Author of the file\n"
        "[[CLOSE:author]]\n"
        "\n"
        "[[OPEN:description]]\n"
        "Description of the file or function\n"
        "[[CLOSE:description]]\n"
        "*/\n"
    )


def test_python_block_uses_triple_quotes() -> None:
    rendered = render_property_block("function", default_snapshot(), PYTHON_STYLE)

    assert rendered.startswith(f'"""\n{MASTER_FORMULA}\n[[OPEN:description]]\n')
    assert rendered.endswith('[[CLOSE:example]]\n"""\n')


@pytest.mark.parametrize("scope", SCOPES)
@pytest.mark.parametrize("syntax", [C_STYLE, PYTHON_STYLE], ids=["c-style", "python"])
def test_rendered_block_validates_cleanly(scope: str, syntax: CommentSyntax) -> None:
    schema = build_snapshot(
        custom_properties={"complexity": {"required": True, "description": "Big O"}}
    )

    rendered = render_property_block(scope, schema, syntax)
    block_text = rendered.rstrip("\n")

    assert validate(scan(block_text), scope, schema, block_text=block_text) == ()
    assert list(scan(block_text)) == list(schema.resolve(scope))


def test_placeholders_cannot_break_the_block() -> None:
    schema = build_snapshot(
        custom_properties={
            "tricky": {"required": True, "description": "ends */ here [[OPEN:x]]"},
        }
    )

    entries = {item.name: item for item in template_entries("file", schema)}
    rendered = render_property_block("file", schema)

    assert entries["tricky"].placeholder == "ends * / here [ [OPEN:x] ]"
    assert rendered.count("*/") == 1
    assert "tricky" in scan(rendered)


def test_unknown_scope_is_rejected() -> None:
    with pytest.raises(UnknownScopeError):
        render_property_block("module", default_snapshot())
