"""
Engines: SQL patch engine and the PatchGenerator that drives it.
"""

from sqlpatch.engines.executor import PatchGenerator
from sqlpatch.engines.sql import SQLTemplateEngine, parse_template

__all__ = [
    "PatchGenerator",
    "SQLTemplateEngine",
    "parse_template",
]
