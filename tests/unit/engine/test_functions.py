"""
proptag — unit tests for the function locator

File: tests/unit/engine/test_functions.py

Purpose
- Verify heuristic declaration recognition, ordering, synthetic names and
  comment block association for both language families.
"""

from __future__ import annotations

import pytest

from proptag.engine.functions import find_functions
from proptag.engine.languages import C_FAMILY, PYTHON, profile_by_name, profile_for_path

JS_SOURCE = """\
/* file */

export default async function* load(a) {}

const add = (a, b) => a + b;
let run = async function () {};
var ident = x => x;

class Box {
  static create(size) {
    if (size) {
      return new Box();
    }
    for (let i = 0; i < 2; i++) {}
  }
}

export default function () {}
"""


def test_js_declarations_are_found_in_source_order() -> None:
    names = [item.name for item in find_functions(JS_SOURCE, C_FAMILY)]

    line = JS_SOURCE.count("\n", 0, JS_SOURCE.index("export default function ()")) + 1
    assert names == ["load", "add", "run", "ident", "create", f"<anonymous@L{line}>"]


def test_start_offset_includes_modifiers_and_excludes_indentation() -> None:
    declarations = {item.name: item for item in find_functions(JS_SOURCE, C_FAMILY)}

    assert declarations["load"].start_offset == JS_SOURCE.index("export default async")
    assert declarations["create"].start_offset == JS_SOURCE.index("static create")
    assert declarations["create"].line == 10


def test_control_keywords_are_not_methods() -> None:
    names = {item.name for item in find_functions(JS_SOURCE, C_FAMILY)}

    assert names.isdisjoint({"if", "for", "while", "switch", "catch"})


def test_anonymous_declaration_is_marked_synthetic() -> None:
    last = find_functions(JS_SOURCE, C_FAMILY)[-1]

    assert last.synthetic_name is True
    assert last.name.startswith("<anonymous@L")


def test_declarations_inside_comments_are_ignored() -> None:
    text = "/*\nfunction ghost() {}\n*/\nfunction real() {}\n"

    assert [item.name for item in find_functions(text)] == ["real"]


def test_preceding_block_is_attached() -> None:
    text = "/* file */\nconst x = 1;\n/* doc */\nfunction f() {}\nfunction g() {}\n"

    declarations = find_functions(text)

    assert declarations[0].comment_block is not None
    assert declarations[0].comment_block.text == "/* doc */"
    assert declarations[1].comment_block is None


def test_first_block_can_serve_a_function() -> None:
    text = "/* shared */\nfunction only() {}\n"

    (declaration,) = find_functions(text)

    assert declaration.comment_block is not None
    assert declaration.comment_block.start_offset == 0


def test_typescript_method_with_return_type() -> None:
    text = "class A {\n  public async fetch(id: string): Promise<void> {\n  }\n}\n"

    assert [item.name for item in find_functions(text)] == ["fetch"]


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        ("def plain(a, b):\n    return a\n", ["plain"]),
        ("async def fetch(\n    url: str,\n) -> bytes:\n    ...\n", ["fetch"]),
        ("class A:\n    def method(self):\n        pass\n", ["method"]),
    ],
)
def test_python_declarations(source: str, expected: list[str]) -> None:
    assert [item.name for item in find_functions(source, PYTHON)] == expected


def test_python_docstring_is_preferred_over_preceding_block() -> None:
    text = '"""Module."""\n\n\ndef f(x=(1, 2)) -> int:\n    """Doc."""\n    return 1\n'

    (declaration,) = find_functions(text, PYTHON)

    assert declaration.body_offset == text.index('    """Doc."""')
    assert declaration.comment_block is not None
    assert declaration.comment_block.text == '"""Doc."""'


def test_python_function_without_docstring_falls_back_to_preceding_block() -> None:
    text = '"""Module."""\ndef f():\n    return 1\n'

    (declaration,) = find_functions(text, PYTHON)

    assert declaration.comment_block is not None
    assert declaration.comment_block.text == '"""Module."""'


def test_single_line_python_def_has_no_body_offset() -> None:
    (declaration,) = find_functions("def f(): return 1\n", PYTHON)

    assert declaration.body_offset is None
    assert declaration.comment_block is None


def test_nested_def_does_not_reuse_parent_docstring() -> None:
    text = (
        '"""Module."""\n\n\n'
        'def outer():\n    """Outer doc."""\n    def inner():\n        return 1\n    return inner\n'
    )

    outer, inner = find_functions(text, PYTHON)

    assert outer.comment_block is not None
    assert outer.comment_block.text == '"""Outer doc."""'
    assert inner.name == "inner"
    assert inner.comment_block is None


def test_one_line_method_under_function_docstring_gets_no_block() -> None:
    text = 'def make():\n    """Make doc."""\n    def method(self): return 1\n    return method\n'

    make, method = find_functions(text, PYTHON)

    assert make.comment_block is not None
    assert method.body_offset is None
    assert method.comment_block is None


@pytest.mark.parametrize(
    ("path", "profile_name"),
    [("src/app.tsx", "c-family"), ("pkg/mod.py", "python"), ("README", "c-family")],
)
def test_profile_for_path(path: str, profile_name: str) -> None:
    assert profile_for_path(path).name == profile_name


def test_profile_by_name_rejects_unknown_profiles() -> None:
    assert profile_by_name("python") is PYTHON
    with pytest.raises(ValueError, match="unknown language profile"):
        profile_by_name("cobol")
