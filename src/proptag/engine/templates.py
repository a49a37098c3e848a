"""
proptag — property block templates

File: src/proptag/engine/templates.py

Purpose
- Render an empty property block for a scope from the resolved schema, in the
  comment syntax of the target language.

Functional requirements
- The block starts with the master formula line, then one open/close pair per
  property of the scope, in scope order.
- A rendered block validates with zero findings against the schema it was
  rendered from.

Non-functional requirements
- Deterministic output for the same schema snapshot and syntax.
- Placeholder text can never terminate the comment or inject markers.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from importlib import resources

from jinja2 import Environment, StrictUndefined, Template

from proptag.constants import MASTER_FORMULA
from proptag.engine.languages import C_STYLE, CommentSyntax
from proptag.engine.properties import SchemaSnapshot
from proptag.engine.tags import close_marker, open_marker

TEMPLATE_NAME = "property_block.j2"


class PropertyTemplateError(RuntimeError):
    """Raised when the packaged block template cannot be loaded."""


@dataclass(frozen=True, slots=True)
class TemplateEntry:
    name: str
    open_marker: str
    close_marker: str
    placeholder: str


def template_entries(
    scope: str,
    schema: SchemaSnapshot,
    syntax: CommentSyntax = C_STYLE,
) -> tuple[TemplateEntry, ...]:
    return tuple(
        TemplateEntry(
            name=name,
            open_marker=open_marker(name),
            close_marker=close_marker(name),
            placeholder=_sanitize(definition.description or name, syntax),
        )
        for name, definition in schema.resolve(scope).items()
    )


def render_property_block(
    scope: str,
    schema: SchemaSnapshot,
    syntax: CommentSyntax = C_STYLE,
) -> str:
    """Render the property block for ``scope``, ending with a newline."""

    template = _load_template()
    rendered = template.render(
        open_delimiter=syntax.open_delimiter,
        close_delimiter=syntax.close_delimiter,
        formula=MASTER_FORMULA,
        properties=template_entries(scope, schema, syntax),
    )
    return rendered.replace("\r\n", "\n")


@lru_cache(maxsize=1)
def _load_template() -> Template:
    try:
        source = resources.files("proptag").joinpath("templates", TEMPLATE_NAME).read_text(
            encoding="utf-8"
        )
    except OSError as exc:
        raise PropertyTemplateError(f"property block template not available: {exc}") from exc

    environment = Environment(
        undefined=StrictUndefined,
        autoescape=False,
        trim_blocks=False,
        lstrip_blocks=False,
        newline_sequence="\n",
        keep_trailing_newline=True,
    )
    return environment.from_string(source)


def _sanitize(text: str, syntax: CommentSyntax) -> str:
    cleaned = text.replace("[[", "[ [").replace("]]", "] ]")
    return cleaned.replace(syntax.close_delimiter, " ".join(syntax.close_delimiter))


__all__ = [
    "PropertyTemplateError",
    "TEMPLATE_NAME",
    "TemplateEntry",
    "render_property_block",
    "template_entries",
]
