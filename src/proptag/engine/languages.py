"""Comment delimiters and declaration patterns per language family."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePath
from typing import Final


@dataclass(frozen=True, slots=True)
class CommentSyntax:
    """Block comment delimiters for one language family."""

    name: str
    pattern: re.Pattern[str]
    open_delimiter: str
    close_delimiter: str


@dataclass(frozen=True, slots=True)
class LanguageProfile:
    """Comment syntax and declaration patterns for a language family.

    When ``signature`` is set, a declaration's block is the one that follows
    its signature (a docstring) and the preceding block is the fallback.
    """

    name: str
    comment: CommentSyntax
    declaration_patterns: tuple[re.Pattern[str], ...]
    suffixes: tuple[str, ...]
    signature: re.Pattern[str] | None = None


C_STYLE: Final[CommentSyntax] = CommentSyntax(
    name="c-style",
    pattern=re.compile(r"/\*.*?\*/", re.DOTALL),
    open_delimiter="/*",
    close_delimiter="*/",
)

PYTHON_STYLE: Final[CommentSyntax] = CommentSyntax(
    name="python",
    pattern=re.compile(r"(?P<quote>\"\"\"|''')(?:.*?)(?P=quote)", re.DOTALL),
    open_delimiter='"""',
    close_delimiter='"""',
)

# Every declaration pattern exposes a ``decl`` group starting at the first
# token of the declaration and an optional ``name`` group.
_JS_FUNCTION_RE = re.compile(
    r"^[ \t]*(?P<decl>(?:export[ \t]+)?(?:default[ \t]+)?(?:async[ \t]+)?function\b"
    r"[ \t]*\*?[ \t]*(?P<name>[A-Za-z_$][\w$]*)?[ \t]*\()",
    re.MULTILINE,
)
_JS_BOUND_FUNCTION_RE = re.compile(
    r"^[ \t]*(?P<decl>(?:export[ \t]+)?(?:const|let|var)[ \t]+(?P<name>[A-Za-z_$][\w$]*)"
    r"[ \t]*(?::[^=\n]+)?=[ \t]*(?:async[ \t]+)?"
    r"(?:function\b|\([^)\n]*\)[ \t]*(?::[^=\n]+)?=>|[A-Za-z_$][\w$]*[ \t]*=>))",
    re.MULTILINE,
)
_JS_METHOD_RE = re.compile(
    r"^[ \t]*(?P<decl>(?:(?:public|private|protected|static|async|override|readonly|get|set)"
    r"[ \t]+)*\*?(?P<name>[A-Za-z_$][\w$]*)[ \t]*(?:<[^>\n]*>)?[ \t]*\([^)\n]*\)"
    r"[ \t]*(?::[^{\n]+)?\{)",
    re.MULTILINE,
)
_PY_DEF_RE = re.compile(
    r"^[ \t]*(?P<decl>(?:async[ \t]+)?def[ \t]+(?P<name>[A-Za-z_]\w*)[ \t]*\()",
    re.MULTILINE,
)
# Full ``def`` header through the newline after the colon; parameter lists may
# span lines and nest one level of parentheses.
_PY_SIGNATURE_RE = re.compile(
    r"(?:async[ \t]+)?def[ \t]+[A-Za-z_]\w*[ \t]*\((?:[^()]|\([^()]*\))*\)"
    r"[ \t]*(?:->[^:\n]*)?:[ \t]*(?:#[^\n]*)?\r?\n"
)

# Words that look like ``name(args) {`` but open control blocks.
NON_DECLARATION_NAMES: Final[frozenset[str]] = frozenset(
    {
        "catch",
        "do",
        "else",
        "for",
        "function",
        "if",
        "return",
        "switch",
        "try",
        "while",
        "with",
    }
)

C_FAMILY: Final[LanguageProfile] = LanguageProfile(
    name="c-family",
    comment=C_STYLE,
    declaration_patterns=(_JS_FUNCTION_RE, _JS_BOUND_FUNCTION_RE, _JS_METHOD_RE),
    suffixes=(
        ".js",
        ".jsx",
        ".mjs",
        ".cjs",
        ".ts",
        ".tsx",
        ".java",
        ".c",
        ".h",
        ".cc",
        ".cpp",
        ".hpp",
        ".cs",
        ".go",
        ".rs",
        ".swift",
        ".kt",
        ".php",
    ),
)

PYTHON: Final[LanguageProfile] = LanguageProfile(
    name="python",
    comment=PYTHON_STYLE,
    declaration_patterns=(_PY_DEF_RE,),
    suffixes=(".py", ".pyi"),
    signature=_PY_SIGNATURE_RE,
)

PROFILES: Final[tuple[LanguageProfile, ...]] = (PYTHON, C_FAMILY)


def profile_for_suffix(suffix: str) -> LanguageProfile:
    """Return the profile for a file suffix, falling back to the C family."""

    lowered = suffix.lower()
    for profile in PROFILES:
        if lowered in profile.suffixes:
            return profile
    return C_FAMILY


def profile_for_path(path: str | PurePath) -> LanguageProfile:
    return profile_for_suffix(PurePath(path).suffix)


def profile_by_name(name: str) -> LanguageProfile:
    for profile in PROFILES:
        if profile.name == name:
            return profile
    known = ", ".join(profile.name for profile in PROFILES)
    raise ValueError(f"unknown language profile {name!r}; expected one of: {known}")


__all__ = [
    "C_FAMILY",
    "C_STYLE",
    "CommentSyntax",
    "LanguageProfile",
    "NON_DECLARATION_NAMES",
    "PROFILES",
    "PYTHON",
    "PYTHON_STYLE",
    "profile_by_name",
    "profile_for_path",
    "profile_for_suffix",
]
