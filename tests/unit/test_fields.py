"""
Tests for field declarations and form schema loading.
"""

import json

import pytest

from formcore.errors import ErrorCode, SchemaError
from formcore.fields import FieldDeclaration, FieldKind, FormSchema, InputType, load_schema


class TestFieldKind:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("email", FieldKind.EMAIL),
            ("cpf", FieldKind.NATIONAL_ID_PERSON),
            ("CNPJ", FieldKind.NATIONAL_ID_ENTITY),
            ("telefone", FieldKind.PHONE),
            ("phone", FieldKind.PHONE),
            ("cep", FieldKind.POSTAL_CODE),
            ("", FieldKind.NONE),
            (None, FieldKind.NONE),
        ],
    )
    def test_parse(self, raw, expected):
        assert FieldKind.parse(raw) is expected

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown validation type"):
            FieldKind.parse("iban")


class TestInputType:
    def test_parse(self):
        assert InputType.parse(None) is InputType.TEXT
        assert InputType.parse("string") is InputType.TEXT
        assert InputType.parse("date") is InputType.DATE
        assert InputType.parse("int") is InputType.INTEGER


class TestFieldDeclaration:
    def test_from_dict(self):
        declaration = FieldDeclaration.from_dict(
            {"name": "cpf", "mask": "999.999.999-99", "required": True, "validation": {"type": "cpf"}}
        )
        assert declaration.kind is FieldKind.NATIONAL_ID_PERSON
        assert declaration.required
        assert declaration.mask_pattern == "999.999.999-99"
        assert declaration.input_type is InputType.TEXT

    def test_display_label_falls_back_to_name(self):
        assert FieldDeclaration(name="birth_date").display_label == "Birth date"
        assert FieldDeclaration(name="x", label="Custom").display_label == "Custom"

    def test_regex_rules_are_ignored(self):
        declaration = FieldDeclaration.from_dict(
            {"name": "code", "validation": {"regex_rules": [{"pattern": "^A", "message": "Must start with A"}]}}
        )
        assert declaration.kind is FieldKind.NONE


class TestFormSchema:
    def test_from_dict(self, schema):
        assert schema.table_name == "customers"
        assert schema.primary_key.name == "id"
        assert [f.name for f in schema.visible_fields] == ["name", "email", "cpf", "phone", "cep", "birth_date"]
        assert schema.get("birth_date").input_type is InputType.DATE
        assert schema.get("missing") is None

    def test_duplicate_names_are_rejected(self):
        with pytest.raises(SchemaError, match="Duplicate field name"):
            FormSchema.from_dict({"fields": [{"name": "a"}, {"name": "a"}]})

    def test_more_than_one_primary_key_is_rejected(self):
        with pytest.raises(SchemaError):
            FormSchema.from_dict({"fields": [{"name": "a", "primary_key": True}, {"name": "b", "primary_key": True}]})

    def test_document_shape_is_validated(self):
        with pytest.raises(SchemaError) as exc_info:
            FormSchema.from_dict({"fields": [{"label": "no name"}]})
        assert exc_info.value.code is ErrorCode.SCHEMA_INVALID

    def test_unknown_validation_type_is_a_schema_error(self):
        with pytest.raises(SchemaError):
            FormSchema.from_dict({"fields": [{"name": "a", "validation": {"type": "iban"}}]})


class TestLoadSchema:
    def test_load_from_file(self, tmp_path, schema_data):
        path = tmp_path / "customers.json"
        path.write_text(json.dumps(schema_data), encoding="utf-8")

        loaded = load_schema(path)
        assert loaded.table_name == "customers"
        assert len(loaded.fields) == 7

    def test_missing_file(self, tmp_path):
        with pytest.raises(SchemaError, match="Cannot read form schema"):
            load_schema(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SchemaError, match="not valid JSON"):
            load_schema(path)
