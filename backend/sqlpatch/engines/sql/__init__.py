"""
SQL patch engine: template parsing, value coercion, substitution, assembly.

Exports: SQLTemplateEngine, parse_template, strip_metadata,
render_mass, assemble, coerce.
"""

from sqlpatch.engines.sql.assembler import assemble
from sqlpatch.engines.sql.filters import coerce
from sqlpatch.engines.sql.mass import render_mass
from sqlpatch.engines.sql.parser import (
    TemplateParseError,
    parse_template,
    strip_metadata,
)
from sqlpatch.engines.sql.template_engine import SQLTemplateEngine

__all__ = [
    "SQLTemplateEngine",
    "TemplateParseError",
    "assemble",
    "coerce",
    "parse_template",
    "render_mass",
    "strip_metadata",
]
