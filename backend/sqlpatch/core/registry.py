"""
Query registry: parsed templates keyed by query id.

Built once at start-up (see ``sqlpatch.main`` lifespan) and read-only
afterwards. A template that fails to parse, or whose id is already taken, is
logged and left out; the rest of the registry still loads.
"""

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from types import MappingProxyType

from sqlpatch.engines.sql.parser import TemplateParseError, parse_template
from sqlpatch.models import QueryDefinition

_LOG = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".sql"


class QueryNotFoundError(LookupError):
    """Raised when no template is registered under the requested id."""

    def __init__(self, query_id: str) -> None:
        super().__init__(f"Query not found: {query_id}")
        self.query_id = query_id


class QueryRegistry:
    """Immutable id -> QueryDefinition store, in load order."""

    def __init__(self, queries: Iterable[QueryDefinition] = ()) -> None:
        by_id: dict[str, QueryDefinition] = {}
        for query in queries:
            if query.id in by_id:
                _LOG.warning(
                    "Duplicate query id '%s' in %s (already loaded from %s), skipping",
                    query.id,
                    query.source_ref,
                    by_id[query.id].source_ref,
                )
                continue
            by_id[query.id] = query
        self._queries = MappingProxyType(by_id)

    @classmethod
    def from_sources(cls, sources: Iterable[tuple[str, str]]) -> "QueryRegistry":
        """Parse every (source_ref, text) pair; invalid templates are skipped."""
        return cls(_parse_all(sources))

    @classmethod
    def from_directory(cls, directory: Path | str) -> "QueryRegistry":
        """Load every ``*.sql`` file of *directory*, sorted by file name."""
        path = Path(directory)
        if not path.is_dir():
            _LOG.warning("Template directory %s does not exist, no query loaded", path)
            return cls()
        files = sorted(p for p in path.iterdir() if p.suffix == TEMPLATE_SUFFIX and p.is_file())
        registry = cls.from_sources(_read_sources(files))
        _LOG.info("Loaded %d query template(s) from %s", len(registry), path)
        return registry

    def find(self, query_id: str) -> QueryDefinition | None:
        return self._queries.get(query_id)

    def get(self, query_id: str) -> QueryDefinition:
        query = self._queries.get(query_id)
        if query is None:
            raise QueryNotFoundError(query_id)
        return query

    def __contains__(self, query_id: object) -> bool:
        return query_id in self._queries

    def __iter__(self) -> Iterator[QueryDefinition]:
        return iter(self._queries.values())

    def __len__(self) -> int:
        return len(self._queries)


def _read_sources(files: Iterable[Path]) -> Iterator[tuple[str, str]]:
    for f in files:
        try:
            yield f.name, f.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            _LOG.warning("Cannot read template %s: %s", f, e)


def _parse_all(sources: Iterable[tuple[str, str]]) -> Iterator[QueryDefinition]:
    for source_ref, text in sources:
        try:
            yield parse_template(text, source_ref)
        except TemplateParseError as e:
            _LOG.warning("Error parsing %s: %s", source_ref, e)
