"""Heuristic, cross-language function declaration locator."""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Sequence
from dataclasses import dataclass

from proptag.engine.comments import CommentBlock, find_blocks, following_block, preceding_block
from proptag.engine.languages import C_FAMILY, NON_DECLARATION_NAMES, LanguageProfile


@dataclass(frozen=True, slots=True)
class FunctionDeclaration:
    name: str
    start_offset: int
    line: int
    comment_block: CommentBlock | None = None
    synthetic_name: bool = False
    body_offset: int | None = None


def find_functions(
    text: str,
    profile: LanguageProfile = C_FAMILY,
) -> tuple[FunctionDeclaration, ...]:
    """Find function-like declarations and attach their comment block.

    Results are ordered by start offset. When several patterns match the same
    declaration, the first pattern in the profile wins. Matches inside a block
    comment are ignored. For profiles with a ``signature`` pattern the block
    following the header wins over the block preceding the declaration. A block
    already attached to an earlier declaration is never attached again.
    """

    blocks = find_blocks(text, profile.comment)
    found: dict[int, str | None] = {}
    for pattern in profile.declaration_patterns:
        for match in pattern.finditer(text):
            name = match.group("name")
            if name in NON_DECLARATION_NAMES:
                continue
            start = match.start("decl")
            if start in found or _inside_block(start, blocks):
                continue
            found[start] = name

    declarations: list[FunctionDeclaration] = []
    claimed: set[int] = set()
    for start in sorted(found):
        name = found[start]
        line = text.count("\n", 0, start) + 1
        body_offset = _body_offset(text, start, profile)
        block = None
        if body_offset is not None:
            block = _unclaimed(
                following_block(text, body_offset, profile.comment, blocks=blocks), claimed
            )
        if block is None:
            block = _unclaimed(
                preceding_block(text, start, profile.comment, blocks=blocks), claimed
            )
        if block is not None:
            claimed.add(block.start_offset)
        declarations.append(
            FunctionDeclaration(
                name=name or f"<anonymous@L{line}>",
                start_offset=start,
                line=line,
                comment_block=block,
                synthetic_name=not name,
                body_offset=body_offset,
            )
        )
    return tuple(declarations)


def _body_offset(text: str, start: int, profile: LanguageProfile) -> int | None:
    if profile.signature is None:
        return None
    match = profile.signature.match(text, start)
    if match is None:
        return None
    return match.end()


def _unclaimed(block: CommentBlock | None, claimed: set[int]) -> CommentBlock | None:
    if block is None or block.start_offset in claimed:
        return None
    return block


def _inside_block(offset: int, blocks: Sequence[CommentBlock]) -> bool:
    starts = [block.start_offset for block in blocks]
    position = bisect_right(starts, offset)
    if position == 0:
        return False
    return offset < blocks[position - 1].end_offset


__all__ = ["FunctionDeclaration", "find_functions"]
