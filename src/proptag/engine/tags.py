"""
proptag — property tag scanner

File: src/proptag/engine/tags.py

Purpose
- Extract ``[[OPEN:<name>]] ... [[CLOSE:<name>]]`` pairs from one comment block
  into an ordered property mapping.

Functional requirements
- Never raise on malformed input; unmatched or mismatched open markers are
  recorded as ambiguities and never produce a property.
- Content drops exactly one leading and one trailing newline.
- A repeated tag name resolves to the last matched occurrence.

Non-functional requirements
- One linear marker pass, then one bounded forward walk per open marker.
- No module-level cursor state; every call owns its own scan position.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Final, Literal

from proptag.constants import CLOSE_MARKER_TEMPLATE, OPEN_MARKER_TEMPLATE, TAG_NAME_PATTERN

_MARKER_RE: Final[re.Pattern[str]] = re.compile(
    rf"\[\[(?P<kind>OPEN|CLOSE):(?P<name>{TAG_NAME_PATTERN})\]\]"
)

PropertyMapping = Mapping[str, "PropertyTag"]


@dataclass(frozen=True, slots=True)
class PropertyTag:
    """One matched open/close pair; offsets are relative to the scanned text."""

    name: str
    content: str
    start_offset: int
    end_offset: int


@dataclass(frozen=True, slots=True)
class TagMarker:
    kind: Literal["OPEN", "CLOSE"]
    name: str
    start_offset: int
    end_offset: int


@dataclass(frozen=True, slots=True)
class UnmatchedTag:
    """An open marker that never found its close marker."""

    name: str
    start_offset: int
    end_offset: int
    reason: str


@dataclass(frozen=True, slots=True)
class TagScan:
    properties: PropertyMapping
    unmatched: tuple[UnmatchedTag, ...]

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self.properties)


def find_markers(text: str) -> tuple[TagMarker, ...]:
    """Return every open/close marker in document order."""

    markers: list[TagMarker] = []
    for match in _MARKER_RE.finditer(text):
        kind: Literal["OPEN", "CLOSE"] = "OPEN" if match.group("kind") == "OPEN" else "CLOSE"
        markers.append(
            TagMarker(
                kind=kind,
                name=match.group("name"),
                start_offset=match.start(),
                end_offset=match.end(),
            )
        )
    return tuple(markers)


def scan_markers(text: str) -> TagScan:
    """Scan ``text`` and keep the unmatched open markers for reporting."""

    markers = find_markers(text)
    matched: dict[str, PropertyTag] = {}
    unmatched: list[UnmatchedTag] = []
    # Open markers seen so far that no close marker has answered yet.
    pending: dict[str, int] = {}

    for index, marker in enumerate(markers):
        if marker.kind != "OPEN":
            if pending.get(marker.name, 0) > 0:
                pending[marker.name] -= 1
            continue
        close, reason = _find_close(markers, index, pending)
        pending[marker.name] = pending.get(marker.name, 0) + 1
        if close is None:
            unmatched.append(
                UnmatchedTag(
                    name=marker.name,
                    start_offset=marker.start_offset,
                    end_offset=marker.end_offset,
                    reason=reason,
                )
            )
            continue

        tag = PropertyTag(
            name=marker.name,
            content=_trim_one_newline(text[marker.end_offset : close.start_offset]),
            start_offset=marker.start_offset,
            end_offset=close.end_offset,
        )
        # Reinsert so key order follows the winning occurrence.
        matched.pop(tag.name, None)
        matched[tag.name] = tag

    return TagScan(properties=MappingProxyType(matched), unmatched=tuple(unmatched))


def scan(text: str) -> PropertyMapping:
    """Parse ``text`` into a mapping of tag name to :class:`PropertyTag`."""

    return scan_markers(text).properties


def open_marker(name: str) -> str:
    return OPEN_MARKER_TEMPLATE.format(name=name)


def close_marker(name: str) -> str:
    return CLOSE_MARKER_TEMPLATE.format(name=name)


def _find_close(
    markers: tuple[TagMarker, ...],
    open_index: int,
    enclosing: Mapping[str, int],
) -> tuple[TagMarker | None, str]:
    opened = markers[open_index]
    nested: dict[str, int] = {}
    outer = dict(enclosing)

    for candidate in markers[open_index + 1 :]:
        if candidate.name == opened.name:
            if candidate.kind == "CLOSE":
                return candidate, ""
            return None, "reopened before close"

        if candidate.kind == "OPEN":
            nested[candidate.name] = nested.get(candidate.name, 0) + 1
            continue

        depth = nested.get(candidate.name, 0)
        if depth > 0:
            nested[candidate.name] = depth - 1
        elif outer.get(candidate.name, 0) > 0:
            # Closes a tag opened before this one; the two pairs interleave.
            outer[candidate.name] -= 1
        else:
            return None, f"mismatched close marker {candidate.name!r}"

    return None, "no close marker"


def _trim_one_newline(content: str) -> str:
    if content.startswith("\r\n"):
        content = content[2:]
    elif content.startswith("\n"):
        content = content[1:]

    if content.endswith("\r\n"):
        content = content[:-2]
    elif content.endswith("\n"):
        content = content[:-1]
    return content


__all__ = [
    "PropertyMapping",
    "PropertyTag",
    "TagMarker",
    "TagScan",
    "UnmatchedTag",
    "close_marker",
    "find_markers",
    "open_marker",
    "scan",
    "scan_markers",
]
