"""Documentation property engine: tags, blocks, declarations, schema and validation."""

from proptag.engine.analyzer import DocumentReport, analyze_text
from proptag.engine.comments import (
    CommentBlock,
    find_blocks,
    first_block,
    following_block,
    preceding_block,
)
from proptag.engine.edits import TextInsertion, insert_master_formula, plan_master_formula
from proptag.engine.functions import FunctionDeclaration, find_functions
from proptag.engine.languages import (
    C_FAMILY,
    PYTHON,
    LanguageProfile,
    profile_by_name,
    profile_for_path,
)
from proptag.engine.positions import Diagnostic, OffsetIndex, to_diagnostic
from proptag.engine.properties import (
    PropertyDefinition,
    PropertySchema,
    SchemaIssue,
    SchemaSnapshot,
    Severity,
    UnknownScopeError,
    build_snapshot,
    default_snapshot,
)
from proptag.engine.tags import PropertyTag, TagScan, UnmatchedTag, scan, scan_markers
from proptag.engine.templates import PropertyTemplateError, render_property_block
from proptag.engine.validator import Finding, validate
from proptag.engine.workspace import (
    FileAnalysisFailure,
    LintSettings,
    WorkspaceResult,
    check_paths,
    check_workspace,
)

__all__ = [
    "C_FAMILY",
    "CommentBlock",
    "Diagnostic",
    "DocumentReport",
    "FileAnalysisFailure",
    "Finding",
    "FunctionDeclaration",
    "LanguageProfile",
    "LintSettings",
    "OffsetIndex",
    "PYTHON",
    "PropertyDefinition",
    "PropertySchema",
    "PropertyTag",
    "PropertyTemplateError",
    "SchemaIssue",
    "SchemaSnapshot",
    "Severity",
    "TagScan",
    "TextInsertion",
    "UnknownScopeError",
    "UnmatchedTag",
    "WorkspaceResult",
    "analyze_text",
    "build_snapshot",
    "check_paths",
    "check_workspace",
    "default_snapshot",
    "find_blocks",
    "find_functions",
    "first_block",
    "following_block",
    "insert_master_formula",
    "plan_master_formula",
    "preceding_block",
    "profile_by_name",
    "profile_for_path",
    "render_property_block",
    "scan",
    "scan_markers",
    "to_diagnostic",
    "validate",
]
