"""Schema-driven validation of one comment block's property mapping."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from proptag.constants import MASTER_FORMULA, MASTER_FORMULA_TOKEN
from proptag.engine.properties import SchemaSnapshot, Severity
from proptag.engine.tags import PropertyMapping

KIND_MISSING_PROPERTY: Final[str] = "missing_property"
KIND_MISSING_MARKER: Final[str] = "missing_marker"
KIND_MISSING_BLOCK: Final[str] = "missing_block"

MISSING_MARKER_MESSAGE: Final[str] = f"Missing required {MASTER_FORMULA_TOKEN} marker"
MISSING_FILE_BLOCK_MESSAGE: Final[str] = (
    f"Missing file-level properties block (including {MASTER_FORMULA_TOKEN})"
)


@dataclass(frozen=True, slots=True)
class Finding:
    """Validation result with offsets relative to the start of the block text."""

    property_name: str
    message: str
    severity: Severity
    start_offset: int = 0
    end_offset: int = 0
    kind: str = KIND_MISSING_PROPERTY

    def to_dict(self) -> dict[str, object]:
        return {
            "property": self.property_name,
            "message": self.message,
            "severity": self.severity.value,
            "start_offset": self.start_offset,
            "end_offset": self.end_offset,
            "kind": self.kind,
        }


def has_master_formula(properties: PropertyMapping, block_text: str) -> bool:
    if MASTER_FORMULA_TOKEN in properties:
        return True
    return MASTER_FORMULA_TOKEN in block_text or MASTER_FORMULA in block_text


def validate(
    properties: PropertyMapping,
    scope: str,
    schema: SchemaSnapshot,
    *,
    block_text: str = "",
) -> tuple[Finding, ...]:
    """Validate ``properties`` against the definitions of ``scope``.

    The master formula rule runs first and cannot be configured. Required
    properties that are absent produce one finding each, in scope order.
    Tags the schema does not declare are never reported.
    """

    definitions = schema.resolve(scope)
    findings: list[Finding] = []

    if not has_master_formula(properties, block_text):
        findings.append(
            Finding(
                property_name=MASTER_FORMULA_TOKEN,
                message=MISSING_MARKER_MESSAGE,
                severity=Severity.ERROR,
                kind=KIND_MISSING_MARKER,
            )
        )

    for name, definition in definitions.items():
        if name == MASTER_FORMULA_TOKEN:
            continue
        if not definition.required or name in properties:
            continue
        findings.append(
            Finding(
                property_name=name,
                message=f"Missing required property: {name}",
                severity=definition.severity,
            )
        )

    return tuple(findings)


def missing_file_block() -> Finding:
    return Finding(
        property_name="",
        message=MISSING_FILE_BLOCK_MESSAGE,
        severity=Severity.ERROR,
        kind=KIND_MISSING_BLOCK,
    )


def missing_function_block(function_name: str) -> Finding:
    return Finding(
        property_name="",
        message=(
            f'Missing property block for function "{function_name}" '
            f"(including {MASTER_FORMULA_TOKEN})"
        ),
        severity=Severity.ERROR,
        kind=KIND_MISSING_BLOCK,
    )


__all__ = [
    "Finding",
    "KIND_MISSING_BLOCK",
    "KIND_MISSING_MARKER",
    "KIND_MISSING_PROPERTY",
    "MISSING_FILE_BLOCK_MESSAGE",
    "MISSING_MARKER_MESSAGE",
    "has_master_formula",
    "missing_file_block",
    "missing_function_block",
    "validate",
]
