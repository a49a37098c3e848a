"""
proptag — unit tests for diagnostic position mapping

File: tests/unit/engine/test_positions.py
"""

from __future__ import annotations

from proptag.engine.positions import OffsetIndex, to_diagnostic
from proptag.engine.properties import Severity
from proptag.engine.validator import Finding


def test_offset_index_is_one_based() -> None:
    index = OffsetIndex("ab\ncd\n\nef")

    assert index.position(0) == (1, 1)
    assert index.position(2) == (1, 3)
    assert index.position(3) == (2, 1)
    assert index.position(6) == (3, 1)
    assert index.position(7) == (4, 1)


def test_offset_index_clamps_out_of_range_offsets() -> None:
    index = OffsetIndex("abc")

    assert index.position(-5) == (1, 1)
    assert index.position(99) == (1, 4)


def test_to_diagnostic_adds_block_base_offset() -> None:
    text = "line one\n  /* block */\n"
    base = text.index("/*")
    finding = Finding(
        property_name="author",
        message="Missing required property: author",
        severity=Severity.ERROR,
        start_offset=3,
        end_offset=8,
    )

    diagnostic = to_diagnostic(
        finding, base_offset=base, index=OffsetIndex(text), scope="file"
    )

    assert (diagnostic.start_offset, diagnostic.end_offset) == (base + 3, base + 8)
    assert (diagnostic.line, diagnostic.column) == (2, 6)
    assert (diagnostic.end_line, diagnostic.end_column) == (2, 11)
    assert diagnostic.to_dict()["severity"] == "error"
    assert diagnostic.function_name is None
