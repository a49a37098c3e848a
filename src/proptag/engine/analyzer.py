"""
proptag — single-document analysis

File: src/proptag/engine/analyzer.py

Purpose
- Run one document through the engine: locate blocks and declarations, scan
  tags, validate per scope and map findings to absolute positions.

Functional requirements
- The first block comment is the file-level block, whether or not a
  declaration follows it.
- A document without any block comment yields one missing-block finding for
  the file scope, plus one per declaration without a preceding block.
- Diagnostics are ordered: file scope first, then declarations in source order.

Non-functional requirements
- One schema snapshot per call; no state survives the call.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from proptag.constants import SCOPE_FILE, SCOPE_FUNCTION
from proptag.engine.comments import CommentBlock, first_block
from proptag.engine.functions import FunctionDeclaration, find_functions
from proptag.engine.languages import C_FAMILY, LanguageProfile
from proptag.engine.positions import Diagnostic, OffsetIndex, to_diagnostic
from proptag.engine.properties import SchemaSnapshot, Severity
from proptag.engine.tags import UnmatchedTag, scan_markers
from proptag.engine.validator import (
    Finding,
    missing_file_block,
    missing_function_block,
    validate,
)

_logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class DocumentReport:
    path: str
    language: str
    diagnostics: tuple[Diagnostic, ...]
    functions: tuple[FunctionDeclaration, ...]
    file_block: CommentBlock | None
    unmatched_tags: tuple[UnmatchedTag, ...] = ()
    schema_version: int = 0

    @property
    def error_count(self) -> int:
        return sum(1 for item in self.diagnostics if item.severity is Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for item in self.diagnostics if item.severity is Severity.WARNING)

    @property
    def info_count(self) -> int:
        return sum(1 for item in self.diagnostics if item.severity is Severity.INFO)

    def to_dict(self) -> dict[str, object]:
        return {
            "path": self.path,
            "language": self.language,
            "schema_version": self.schema_version,
            "functions": [
                {"name": item.name, "line": item.line, "has_block": item.comment_block is not None}
                for item in self.functions
            ],
            "diagnostics": [item.to_dict() for item in self.diagnostics],
            "unmatched_tags": [
                {"name": item.name, "start_offset": item.start_offset, "reason": item.reason}
                for item in self.unmatched_tags
            ],
        }


def analyze_text(
    text: str,
    *,
    schema: SchemaSnapshot,
    profile: LanguageProfile = C_FAMILY,
    path: str = "<text>",
) -> DocumentReport:
    """Analyze ``text`` and return its diagnostics in document coordinates."""

    index = OffsetIndex(text)
    diagnostics: list[Diagnostic] = []
    unmatched: list[UnmatchedTag] = []

    file_block = first_block(text, profile.comment)
    if file_block is None:
        diagnostics.append(
            to_diagnostic(missing_file_block(), base_offset=0, index=index, scope=SCOPE_FILE)
        )
    else:
        findings = _validate_block(file_block, SCOPE_FILE, schema, unmatched)
        diagnostics.extend(
            _place(findings, file_block.start_offset, index, scope=SCOPE_FILE, function_name=None)
        )

    functions = find_functions(text, profile)
    for declaration in functions:
        block = declaration.comment_block
        if block is None:
            finding = missing_function_block(declaration.name)
            diagnostics.extend(
                _place(
                    (finding,),
                    declaration.start_offset,
                    index,
                    scope=SCOPE_FUNCTION,
                    function_name=declaration.name,
                )
            )
            continue
        findings = _validate_block(block, SCOPE_FUNCTION, schema, unmatched)
        diagnostics.extend(
            _place(
                findings,
                block.start_offset,
                index,
                scope=SCOPE_FUNCTION,
                function_name=declaration.name,
            )
        )

    ambiguities = tuple({item.start_offset: item for item in unmatched}.values())
    for item in ambiguities:
        _logger.debug(
            "unmatched_property_tag",
            path=path,
            tag=item.name,
            offset=item.start_offset,
            reason=item.reason,
        )

    return DocumentReport(
        path=path,
        language=profile.name,
        diagnostics=tuple(diagnostics),
        functions=functions,
        file_block=file_block,
        unmatched_tags=ambiguities,
        schema_version=schema.version,
    )


def _validate_block(
    block: CommentBlock,
    scope: str,
    schema: SchemaSnapshot,
    unmatched: list[UnmatchedTag],
) -> tuple[Finding, ...]:
    result = scan_markers(block.text)
    for item in result.unmatched:
        # Report ambiguities in document coordinates.
        unmatched.append(
            UnmatchedTag(
                name=item.name,
                start_offset=block.start_offset + item.start_offset,
                end_offset=block.start_offset + item.end_offset,
                reason=item.reason,
            )
        )
    return validate(result.properties, scope, schema, block_text=block.text)


def _place(
    findings: Sequence[Finding],
    base_offset: int,
    index: OffsetIndex,
    *,
    scope: str,
    function_name: str | None,
) -> list[Diagnostic]:
    return [
        to_diagnostic(
            finding,
            base_offset=base_offset,
            index=index,
            scope=scope,
            function_name=function_name,
        )
        for finding in findings
    ]


__all__ = ["DocumentReport", "analyze_text"]
