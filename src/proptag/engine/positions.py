"""Translate block-relative findings into absolute document positions."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass

from proptag.engine.properties import Severity
from proptag.engine.validator import Finding


class OffsetIndex:
    """Offset to 1-based (line, column) conversion for one document."""

    __slots__ = ("_line_starts", "_length")

    def __init__(self, text: str) -> None:
        starts = [0]
        index = text.find("\n")
        while index != -1:
            starts.append(index + 1)
            index = text.find("\n", index + 1)
        self._line_starts = tuple(starts)
        self._length = len(text)

    def position(self, offset: int) -> tuple[int, int]:
        clamped = min(max(offset, 0), self._length)
        line_index = bisect_right(self._line_starts, clamped) - 1
        return line_index + 1, clamped - self._line_starts[line_index] + 1


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A finding placed in absolute document coordinates."""

    scope: str
    property_name: str
    message: str
    severity: Severity
    kind: str
    start_offset: int
    end_offset: int
    line: int
    column: int
    end_line: int
    end_column: int
    function_name: str | None = None

    def sort_key(self) -> tuple[int, int, str, str]:
        return (self.start_offset, self.end_offset, self.scope, self.property_name)

    def to_dict(self) -> dict[str, object]:
        return {
            "scope": self.scope,
            "property": self.property_name,
            "message": self.message,
            "severity": self.severity.value,
            "kind": self.kind,
            "start_offset": self.start_offset,
            "end_offset": self.end_offset,
            "line": self.line,
            "column": self.column,
            "end_line": self.end_line,
            "end_column": self.end_column,
            "function": self.function_name,
        }


def to_diagnostic(
    finding: Finding,
    *,
    base_offset: int,
    index: OffsetIndex,
    scope: str,
    function_name: str | None = None,
) -> Diagnostic:
    """Add ``base_offset`` (the block's absolute start) and convert to line/column."""

    start = base_offset + finding.start_offset
    end = base_offset + finding.end_offset
    line, column = index.position(start)
    end_line, end_column = index.position(end)
    return Diagnostic(
        scope=scope,
        property_name=finding.property_name,
        message=finding.message,
        severity=finding.severity,
        kind=finding.kind,
        start_offset=start,
        end_offset=end,
        line=line,
        column=column,
        end_line=end_line,
        end_column=end_column,
        function_name=function_name,
    )


__all__ = ["Diagnostic", "OffsetIndex", "to_diagnostic"]
