"""Unit tests for engines.sql.template_engine: unitary substitution and IN batching."""

import re

import pytest

from sqlpatch.engines.sql import SQLTemplateEngine
from sqlpatch.engines.sql.placeholders import substitute
from sqlpatch.engines.sql.template_engine import chunked
from sqlpatch.models import ExecutionModeEnum
from tests.utils import templates
from tests.utils.templates import make_query

_BATCH_RE = re.compile(r"^-- Batch (\d+)/(\d+) \((\d+) values\)$", re.MULTILINE)


def _ids(n: int) -> list[str]:
    return [f"ID{i}" for i in range(n)]


class TestPlaceholders:
    def test_unmatched_left_verbatim(self):
        assert substitute("{{a}} {{x}}", {"a": "1"}) == "1 {{x}}"

    def test_replaced_text_not_rescanned(self):
        assert substitute("{{a}} {{b}}", {"a": "{{b}}", "b": "2"}) == "{{b}} 2"


class TestUnitary:
    def test_every_parameter_replaced(self):
        q = make_query(templates.COMPLETE)
        sql = SQLTemplateEngine().render(q, q.sql, {"id": "7", "name": "O'Brien"})
        assert sql == "UPDATE T SET NAME = 'O''Brien' WHERE ID = 7;"
        assert "{{" not in sql

    def test_absent_parameter_renders_null(self):
        q = make_query(templates.COMPLETE)
        sql = SQLTemplateEngine().render(q, q.sql, {"id": "7"})
        assert sql == "UPDATE T SET NAME = NULL WHERE ID = 7;"

    def test_all_occurrences_replaced(self):
        q = make_query("-- @id: q\n-- @param: a|text|A\nSELECT {{a}}, {{a}} FROM DUAL;")
        assert SQLTemplateEngine().render(q, q.sql, {"a": "x"}) == "SELECT 'x', 'x' FROM DUAL;"

    def test_undeclared_placeholder_kept(self):
        q = make_query("-- @id: q\n-- @param: a|text|A\nSELECT {{a}}, {{other}} FROM DUAL;")
        assert SQLTemplateEngine().render(q, q.sql, {"a": "x", "other": "y"}) == (
            "SELECT 'x', {{other}} FROM DUAL;"
        )

    def test_value_containing_placeholder_not_expanded(self):
        q = make_query(templates.COMPLETE)
        sql = SQLTemplateEngine().render(q, q.sql, {"id": "1", "name": "{{id}}"})
        assert sql == "UPDATE T SET NAME = '{{id}}' WHERE ID = 1;"

    def test_small_list_single_statement(self):
        q = make_query(templates.FILE_PARAM)
        sql = SQLTemplateEngine().render(q, q.sql, {"ids": ["1", "2"]})
        assert sql == "SELECT * FROM T WHERE ID IN ('1', '2');"

    def test_idempotent(self):
        q = make_query(templates.MIXED_PARAMS)
        values = {"id": "1", "name": "n", "file_ids": _ids(1500)}
        e = SQLTemplateEngine()
        assert e.render(q, q.sql, values) == e.render(q, q.sql, values)

    def test_default_mode_is_unitaire(self):
        q = make_query(templates.COMPLETE)
        e = SQLTemplateEngine()
        assert e.render(q, q.sql, {"id": "1"}) == e.render(
            q, q.sql, {"id": "1"}, ExecutionModeEnum.UNITAIRE
        )


class TestBatching:
    def test_999_values_no_batch(self):
        q = make_query(templates.FILE_PARAM)
        sql = SQLTemplateEngine().render(q, q.sql, {"ids": _ids(999)})
        assert "-- Batch" not in sql
        assert sql.count("SELECT") == 1
        assert sql.count("'ID") == 999

    def test_1000_values_two_chunks(self):
        q = make_query(templates.FILE_PARAM)
        sql = SQLTemplateEngine().render(q, q.sql, {"ids": _ids(1000)})
        markers = _BATCH_RE.findall(sql)
        assert markers == [("1", "2", "999"), ("2", "2", "1")]
        assert sql.count("SELECT") == 2

    def test_chunks_order_preserving(self):
        q = make_query(templates.FILE_PARAM)
        values = _ids(2500)
        sql = SQLTemplateEngine().render(q, q.sql, {"ids": values})
        statements = sql.split("\n\n")
        assert len(statements) == 3
        assert _BATCH_RE.findall(sql) == [("1", "3", "999"), ("2", "3", "999"), ("3", "3", "502")]
        assert "'ID0'" in statements[0] and "'ID998'" in statements[0]
        assert "'ID999'" in statements[1] and "'ID998'" not in statements[1]
        assert statements[2].endswith("'ID2499');")

    def test_chunk_layout(self):
        q = make_query(templates.FILE_PARAM)
        sql = SQLTemplateEngine(in_clause_max_size=2).render(q, q.sql, {"ids": ["a", "b", "c"]})
        assert sql == (
            "-- Batch 1/2 (2 values)\n"
            "SELECT * FROM T WHERE ID IN ('a', 'b');\n"
            "\n"
            "-- Batch 2/2 (1 values)\n"
            "SELECT * FROM T WHERE ID IN ('c');"
        )

    def test_other_parameters_in_every_chunk(self):
        q = make_query(templates.MIXED_PARAMS)
        sql = SQLTemplateEngine(in_clause_max_size=2).render(
            q, q.sql, {"id": "5", "name": "x", "file_ids": ["a", "b", "c"]}
        )
        for statement in sql.split("\n\n"):
            assert "NAME = 'x' WHERE ID = 5" in statement
        assert "{{" not in sql

    def test_null_entries_filtered_before_counting(self):
        q = make_query(templates.FILE_PARAM)
        sql = SQLTemplateEngine(in_clause_max_size=2).render(
            q, q.sql, {"ids": ["a", "", "null", "b"]}
        )
        assert "-- Batch" not in sql
        assert sql == "SELECT * FROM T WHERE ID IN ('a', 'b');"


class TestChunked:
    def test_sizes(self):
        assert [len(c) for c in chunked(list(range(1000)), 999)] == [999, 1]

    def test_empty(self):
        assert chunked([], 3) == []

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            chunked([1], 0)
