"""Unit tests for engines.sql.parser: metadata directives, parameters, body stripping."""

import pytest

from sqlpatch.engines.sql import (
    TemplateParseError,
    parse_template,
    strip_metadata,
)
from sqlpatch.models import ParamTypeEnum
from tests.utils import templates


class TestParseTemplate:
    def test_all_metadata(self):
        q = parse_template(templates.COMPLETE, "test-complete.sql")
        assert q.id == "test-complete"
        assert q.name == "Test Complet"
        assert q.description == "Complete test description with every field"
        assert q.tags == ("tag1", "tag2", "tag3")
        assert len(q.parameters) == 2
        assert q.source_ref == "test-complete.sql"

    def test_file_parameter(self):
        q = parse_template(templates.FILE_PARAM, "test-file-param.sql")
        assert len(q.parameters) == 1
        p = q.parameters[0]
        assert p.name == "ids"
        assert p.type == ParamTypeEnum.TEXT
        assert p.label == "Liste des IDs"
        assert p.required is True
        assert p.is_file is True

    def test_optional_metadata_absent(self):
        q = parse_template(templates.MINIMAL, "test-minimal.sql")
        assert q.id == "minimal-query"
        assert q.name is None
        assert q.description is None
        assert q.tags is None
        assert q.parameters == ()
        assert q.display_name == "minimal-query"

    def test_mixed_parameters_keep_file_order(self):
        q = parse_template(templates.MIXED_PARAMS, "test-mixed-params.sql")
        assert [p.name for p in q.parameters] == ["id", "file_ids", "name"]
        assert [p.is_file for p in q.parameters] == [False, True, False]
        assert [p.name for p in q.scalar_parameters] == ["id", "name"]
        assert [p.name for p in q.file_parameters] == ["file_ids"]

    def test_required_defaults_to_false(self):
        q = parse_template(templates.MIXED_PARAMS, "x.sql")
        assert q.parameters[2].required is False

    def test_required_is_case_insensitive(self):
        text = "-- @id: q\n-- @param: a|text|A|TRUE\n-- @param: b|text|B|yes\nSELECT 1;"
        q = parse_template(text, "x.sql")
        assert q.parameters[0].required is True
        assert q.parameters[1].required is False

    def test_invalid_parameter_lines_are_skipped(self):
        q = parse_template(templates.INVALID_PARAM, "test-invalid-param.sql")
        assert [p.name for p in q.parameters] == ["valid", "valid2"]

    def test_parameter_fields_trimmed(self):
        q = parse_template("-- @id: q\n-- @param:  a | date | Label A | true \nSELECT 1;", "x.sql")
        p = q.parameters[0]
        assert (p.name, p.type, p.label, p.required) == ("a", ParamTypeEnum.DATE, "Label A", True)

    def test_value_keeps_colons_after_first(self):
        q = parse_template("-- @id: q\n-- @description: a: b: c\nSELECT 1;", "x.sql")
        assert q.description == "a: b: c"

    def test_unknown_keys_ignored(self):
        q = parse_template("-- @id: q\n-- @author: someone\n-- @version: 2\nSELECT 1;", "x.sql")
        assert q.id == "q"
        assert q.sql == "SELECT 1;"

    def test_tags_trimmed_and_empty_dropped(self):
        q = parse_template("-- @id: q\n-- @tags:  a , b,, c \nSELECT 1;", "x.sql")
        assert q.tags == ("a", "b", "c")

    def test_indented_directives(self):
        q = parse_template("   -- @id: q\n\t-- @name: N\nSELECT 1;", "x.sql")
        assert q.id == "q"
        assert q.name == "N"

    def test_real_world_example(self):
        q = parse_template(templates.UPDATE_PERSON, "update-person-name.sql")
        assert q.id == "update-person-name"
        assert q.tags == ("person", "update")
        person_id, name = q.parameters
        assert person_id.name == "person_id"
        assert person_id.label == "Person ID"
        assert person_id.required is True
        assert person_id.is_file is False
        assert name.label == "Name"


class TestParamTypes:
    @pytest.mark.parametrize(
        "declared, expected",
        [
            ("text", ParamTypeEnum.TEXT),
            ("number", ParamTypeEnum.NUMBER),
            ("integer", ParamTypeEnum.INTEGER),
            ("DATE", ParamTypeEnum.DATE),
            ("file", ParamTypeEnum.FILE),
            ("", ParamTypeEnum.TEXT),
            ("varchar", ParamTypeEnum.RAW),
        ],
    )
    def test_declared_type_resolved_at_parse_time(self, declared, expected):
        q = parse_template(f"-- @id: q\n-- @param: a|{declared}|A\nSELECT 1;", "x.sql")
        assert q.parameters[0].type == expected


class TestMissingId:
    def test_missing_id_raises(self):
        with pytest.raises(TemplateParseError) as exc:
            parse_template(templates.NO_ID, "test-no-id.sql")
        assert "test-no-id.sql" in str(exc.value)
        assert "-- @id:" in str(exc.value)

    def test_empty_id_raises(self):
        with pytest.raises(TemplateParseError) as exc:
            parse_template(templates.EMPTY_ID, "test-empty-id.sql")
        assert "-- @id:" in str(exc.value)

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_template("SELECT 1;", "plain.sql")


class TestStripMetadata:
    def test_leading_block_removed(self):
        q = parse_template(templates.UPDATE_PERSON, "x.sql")
        assert q.sql.startswith("UPDATE PERSON")
        assert "-- @" not in q.sql

    def test_blank_lines_inside_body_kept(self):
        text = "-- @id: q\n\n\nSELECT 1;\n\n\nSELECT 2;\n"
        assert strip_metadata(text) == "SELECT 1;\n\n\nSELECT 2;"

    def test_later_directives_kept_verbatim(self):
        text = "-- @id: q\nSELECT 1;\n-- @note: stays\nSELECT 2;"
        assert strip_metadata(text) == "SELECT 1;\n-- @note: stays\nSELECT 2;"

    def test_regular_comment_stops_stripping(self):
        text = "-- @id: q\n-- plain comment\nSELECT 1;"
        assert strip_metadata(text) == "-- plain comment\nSELECT 1;"

    def test_only_metadata(self):
        assert strip_metadata("-- @id: q\n\n-- @name: n\n") == ""

    def test_empty(self):
        assert strip_metadata("") == ""
