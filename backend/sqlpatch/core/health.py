"""
Health-check helpers for liveness and readiness probes.

Liveness:  is the process alive and not deadlocked?  (cheap, no I/O)
Readiness: can it serve traffic?  (templates loaded + output directory writable)
"""

import logging
import os

from sqlpatch.core.registry import QueryRegistry
from sqlpatch.core.storage import ArtifactStore

logger = logging.getLogger(__name__)


def check_templates(registry: QueryRegistry | None) -> bool:
    """At least one query template was loaded."""
    return registry is not None and len(registry) > 0


def check_output_dir(store: ArtifactStore | None) -> bool:
    """Output directory exists and is writable."""
    if store is None:
        return False
    try:
        return store.directory.is_dir() and os.access(store.directory, os.W_OK)
    except OSError:
        logger.warning("Output directory check failed", exc_info=True)
        return False


def liveness_check() -> tuple[bool, list[str]]:
    """
    Lightweight liveness probe; just confirms the Python process is responsive.
    Return format matches readiness_check for consistency.
    """
    return (True, [])


def readiness_check(
    registry: QueryRegistry | None, store: ArtifactStore | None
) -> tuple[bool, list[str]]:
    """
    Returns (ok, list of failure names). ok is False if any check fails.
    """
    failures: list[str] = []
    if not check_templates(registry):
        failures.append("templates")
    if not check_output_dir(store):
        failures.append("output_dir")
    return (not failures, failures)
