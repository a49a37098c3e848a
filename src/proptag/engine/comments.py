"""Locate block comments: the file-level block and the block preceding a declaration."""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from collections.abc import Sequence
from dataclasses import dataclass

from proptag.engine.languages import C_STYLE, CommentSyntax


@dataclass(frozen=True, slots=True)
class CommentBlock:
    """A block comment; ``text`` includes its delimiters, offsets are absolute."""

    text: str
    start_offset: int
    end_offset: int


def find_blocks(text: str, syntax: CommentSyntax = C_STYLE) -> tuple[CommentBlock, ...]:
    return tuple(
        CommentBlock(text=match.group(0), start_offset=match.start(), end_offset=match.end())
        for match in syntax.pattern.finditer(text)
    )


def first_block(text: str, syntax: CommentSyntax = C_STYLE) -> CommentBlock | None:
    """Return the earliest block comment in ``text``, or ``None``."""

    match = syntax.pattern.search(text)
    if match is None:
        return None
    return CommentBlock(text=match.group(0), start_offset=match.start(), end_offset=match.end())


def preceding_block(
    text: str,
    function_start: int,
    syntax: CommentSyntax = C_STYLE,
    *,
    blocks: Sequence[CommentBlock] | None = None,
) -> CommentBlock | None:
    """Return the block ending right before ``function_start``.

    Only whitespace may sit between the end of the block and the declaration;
    any other token forfeits the association.
    """

    candidates = find_blocks(text, syntax) if blocks is None else blocks
    ends = [block.end_offset for block in candidates]
    position = bisect_right(ends, function_start)
    if position == 0:
        return None

    nearest = candidates[position - 1]
    gap = text[nearest.end_offset : function_start]
    if gap.strip():
        return None
    return nearest


def following_block(
    text: str,
    signature_end: int,
    syntax: CommentSyntax = C_STYLE,
    *,
    blocks: Sequence[CommentBlock] | None = None,
) -> CommentBlock | None:
    """Return the block that opens right after a declaration header (a docstring)."""

    candidates = find_blocks(text, syntax) if blocks is None else blocks
    starts = [block.start_offset for block in candidates]
    position = bisect_left(starts, signature_end)
    if position == len(candidates):
        return None

    nearest = candidates[position]
    if text[signature_end : nearest.start_offset].strip():
        return None
    return nearest


__all__ = ["CommentBlock", "find_blocks", "first_block", "following_block", "preceding_block"]
