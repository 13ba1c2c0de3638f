"""
``{{name}}`` placeholder handling.

Substitution is a single pass over the template: replaced text is never
scanned again, and placeholders with no literal are left verbatim.
"""

import re
from collections.abc import Mapping

_PLACEHOLDER_RE = re.compile(r"\{\{([^{}]+)\}\}")


def substitute(template: str, literals: Mapping[str, str]) -> str:
    """Replace every ``{{name}}`` whose name is a key of *literals*."""

    def _replace(m: re.Match[str]) -> str:
        return literals.get(m.group(1), m.group(0))

    return _PLACEHOLDER_RE.sub(_replace, template)
