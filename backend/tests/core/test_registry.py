"""Unit tests for core.registry: load-once store, skip-and-log on bad templates."""

import logging
from pathlib import Path

import pytest

from sqlpatch.core.config import settings
from sqlpatch.core.registry import QueryNotFoundError, QueryRegistry
from tests.utils import templates


def test_bad_template_skipped_others_loaded(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="sqlpatch.core.registry"):
        registry = QueryRegistry.from_sources(
            [
                ("a.sql", templates.UPDATE_PERSON),
                ("no-id.sql", templates.NO_ID),
                ("empty-id.sql", templates.EMPTY_ID),
                ("b.sql", templates.MINIMAL),
            ]
        )
    assert len(registry) == 2
    assert "update-person-name" in registry
    assert "minimal-query" in registry
    assert "no-id.sql" in caplog.text
    assert "empty-id.sql" in caplog.text


def test_duplicate_id_first_wins(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="sqlpatch.core.registry"):
        registry = QueryRegistry.from_sources(
            [("first.sql", templates.MINIMAL), ("second.sql", templates.MINIMAL)]
        )
    assert len(registry) == 1
    assert registry.get("minimal-query").source_ref == "first.sql"
    assert "Duplicate query id" in caplog.text


def test_get_and_find() -> None:
    registry = QueryRegistry.from_sources([("a.sql", templates.UPDATE_PERSON)])
    assert registry.get("update-person-name").name == "Update a person's name"
    assert registry.find("missing") is None
    with pytest.raises(QueryNotFoundError) as exc:
        registry.get("missing")
    assert exc.value.query_id == "missing"


def test_from_directory(templates_dir: Path) -> None:
    (templates_dir / "notes.txt").write_text("-- @id: ignored\n", encoding="utf-8")
    registry = QueryRegistry.from_directory(templates_dir)
    assert [q.id for q in registry] == [
        "activate-contrats",
        "close-contrat",
        "update-person-name",
    ]
    assert registry.get("close-contrat").source_ref == "close-contrat.sql"


def test_missing_directory(tmp_path: Path) -> None:
    assert len(QueryRegistry.from_directory(tmp_path / "nope")) == 0


def test_bundled_templates_load() -> None:
    registry = QueryRegistry.from_directory(settings.TEMPLATES_DIR)
    assert "update-person-name" in registry
    assert "activate-contrats" in registry


def test_read_only() -> None:
    registry = QueryRegistry.from_sources([("a.sql", templates.MINIMAL)])
    with pytest.raises(TypeError):
        registry._queries["x"] = registry.get("minimal-query")  # type: ignore[index]
    with pytest.raises(Exception):
        registry.get("minimal-query").id = "other"  # type: ignore[misc]
