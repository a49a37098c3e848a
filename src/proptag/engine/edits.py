"""
proptag — master formula insertion

File: src/proptag/engine/edits.py

Purpose
- Plan and apply the text insertions that put the master formula into the
  file-level block and every declaration block that lacks it.

Functional requirements
- A block that already carries the marker is left untouched.
- A document without any block gets a new file-level block at offset 0.
- A declaration without a block gets a new block: before the declaration for
  C family languages, as the first body statement (docstring) for Python.
- A block shared by the file scope and a declaration is edited once.
- Applying the plan to its own output plans nothing.
"""

from __future__ import annotations

from dataclasses import dataclass

from proptag.constants import MASTER_FORMULA
from proptag.engine.comments import CommentBlock, first_block
from proptag.engine.functions import FunctionDeclaration, find_functions
from proptag.engine.languages import C_FAMILY, LanguageProfile
from proptag.engine.tags import scan
from proptag.engine.validator import has_master_formula

_BODY_INDENT = "    "


@dataclass(frozen=True, slots=True)
class TextInsertion:
    offset: int
    text: str
    target: str


def plan_master_formula(
    text: str,
    profile: LanguageProfile = C_FAMILY,
) -> tuple[TextInsertion, ...]:
    """Return the insertions, in application order, that add missing formulas."""

    syntax = profile.comment
    insertions: list[TextInsertion] = []
    visited: set[int] = set()

    file_block = first_block(text, syntax)
    if file_block is None:
        insertions.append(
            TextInsertion(
                offset=0,
                text=f"{syntax.open_delimiter}\n{MASTER_FORMULA}\n{syntax.close_delimiter}\n\n",
                target="file",
            )
        )
    else:
        visited.add(file_block.start_offset)
        insertion = _insert_into_block(text, file_block, target="file")
        if insertion is not None:
            insertions.append(insertion)

    for declaration in find_functions(text, profile):
        block = declaration.comment_block
        if block is None:
            insertions.append(_new_declaration_block(text, declaration, profile))
            continue
        if block.start_offset in visited:
            continue
        visited.add(block.start_offset)
        insertion = _insert_into_block(text, block, target=declaration.name)
        if insertion is not None:
            insertions.append(insertion)

    # Stable sort: the file block stays ahead of a declaration block at the same offset.
    return tuple(sorted(insertions, key=lambda item: item.offset))


def apply_insertions(text: str, insertions: tuple[TextInsertion, ...]) -> str:
    parts: list[str] = []
    cursor = 0
    for insertion in sorted(insertions, key=lambda item: item.offset):
        parts.append(text[cursor : insertion.offset])
        parts.append(insertion.text)
        cursor = insertion.offset
    parts.append(text[cursor:])
    return "".join(parts)


def insert_master_formula(text: str, profile: LanguageProfile = C_FAMILY) -> tuple[str, int]:
    """Return the edited text and the number of insertions made."""

    insertions = plan_master_formula(text, profile)
    return apply_insertions(text, insertions), len(insertions)


def _insert_into_block(text: str, block: CommentBlock, *, target: str) -> TextInsertion | None:
    if has_master_formula(scan(block.text), block.text):
        return None

    indent = _line_indent(text, block.start_offset)
    newline = block.text.find("\n")
    if newline == -1:
        # Single-line block: open it up right after the delimiter.
        opener_end = block.start_offset + _opener_length(block)
        return TextInsertion(
            offset=opener_end,
            text=f"\n{indent}{MASTER_FORMULA}\n{indent}",
            target=target,
        )
    return TextInsertion(
        offset=block.start_offset + newline + 1,
        text=f"{indent}{MASTER_FORMULA}\n\n",
        target=target,
    )


def _new_declaration_block(
    text: str,
    declaration: FunctionDeclaration,
    profile: LanguageProfile,
) -> TextInsertion:
    syntax = profile.comment
    if declaration.body_offset is not None:
        indent = _body_indent(text, declaration, declaration.body_offset)
        return TextInsertion(
            offset=declaration.body_offset,
            text=(
                f"{indent}{syntax.open_delimiter}\n{indent}{MASTER_FORMULA}\n"
                f"{indent}{syntax.close_delimiter}\n"
            ),
            target=declaration.name,
        )

    indent = _line_indent(text, declaration.start_offset)
    return TextInsertion(
        offset=declaration.start_offset,
        text=(
            f"{syntax.open_delimiter}\n{indent}{MASTER_FORMULA}\n"
            f"{indent}{syntax.close_delimiter}\n\n{indent}"
        ),
        target=declaration.name,
    )


def _opener_length(block: CommentBlock) -> int:
    for opener in ('"""', "'''", "/*"):
        if block.text.startswith(opener):
            return len(opener)
    return 0


def _line_indent(text: str, offset: int) -> str:
    line_start = text.rfind("\n", 0, offset) + 1
    prefix = text[line_start:offset]
    return prefix if not prefix.strip() else ""


def _body_indent(text: str, declaration: FunctionDeclaration, body_offset: int) -> str:
    outer = _line_indent(text, declaration.start_offset)
    for line in text[body_offset:].splitlines():
        if not line.strip():
            continue
        candidate = line[: len(line) - len(line.lstrip())]
        if len(candidate) > len(outer):
            return candidate
        break
    return outer + _BODY_INDENT


__all__ = [
    "TextInsertion",
    "apply_insertions",
    "insert_master_formula",
    "plan_master_formula",
]
