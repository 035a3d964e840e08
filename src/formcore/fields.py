"""
Field declarations and form schema loading.

A form schema is a JSON document listing the fields of one record type.
Each field declares its name, storage type, whether it is required, an
optional validation kind and an optional declarative mask pattern.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import jsonschema

from .config import FORM_SCHEMA_JSON_SCHEMA
from .errors import SchemaError

logger = logging.getLogger(__name__)


class FieldKind(Enum):
    """Value kinds with a dedicated format validator."""

    NONE = "none"
    EMAIL = "email"
    NATIONAL_ID_PERSON = "national_id_person"
    NATIONAL_ID_ENTITY = "national_id_entity"
    PHONE = "phone"
    POSTAL_CODE = "postal_code"

    @classmethod
    def parse(cls, raw: str | None) -> FieldKind:
        """
        Parse a validation type string from a schema file.

        Accepts both the canonical names and the short names used by
        existing schema files (cpf, cnpj, telefone, cep).

        Raises:
            ValueError: If the string names no known kind
        """
        key = (raw or "").strip().lower()
        if not key:
            return cls.NONE
        try:
            return _KIND_ALIASES[key]
        except KeyError:
            raise ValueError(f"Unknown validation type: {raw!r}") from None


_KIND_ALIASES: dict[str, FieldKind] = {
    "none": FieldKind.NONE,
    "email": FieldKind.EMAIL,
    "cpf": FieldKind.NATIONAL_ID_PERSON,
    "national_id_person": FieldKind.NATIONAL_ID_PERSON,
    "cnpj": FieldKind.NATIONAL_ID_ENTITY,
    "national_id_entity": FieldKind.NATIONAL_ID_ENTITY,
    "telefone": FieldKind.PHONE,
    "phone": FieldKind.PHONE,
    "cep": FieldKind.POSTAL_CODE,
    "postal_code": FieldKind.POSTAL_CODE,
}


class InputType(Enum):
    """Storage type of a field, as declared in the schema."""

    TEXT = "text"
    DATE = "date"
    INTEGER = "int"
    DECIMAL = "float"

    @classmethod
    def parse(cls, raw: str | None) -> InputType:
        """Parse a schema type string; 'string' and missing values mean text."""
        key = (raw or "string").strip().lower()
        if key in ("string", "text"):
            return cls.TEXT
        return cls(key)


@dataclass(frozen=True)
class FieldDeclaration:
    """A named input of the form and its validation/masking attributes."""

    name: str
    label: str = ""
    kind: FieldKind = FieldKind.NONE
    required: bool = False
    mask_pattern: str = ""
    input_type: InputType = InputType.TEXT
    primary_key: bool = False

    @property
    def display_label(self) -> str:
        """Label shown next to the input; derived from the name when absent."""
        return self.label or self.name.replace("_", " ").capitalize()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FieldDeclaration:
        """Build a declaration from one entry of a schema's 'fields' list."""
        validation = data.get("validation") or {}
        if validation.get("regex_rules"):
            logger.debug(f"Ignoring regex rules declared for field '{data['name']}'")

        return cls(
            name=data["name"],
            label=data.get("label", ""),
            kind=FieldKind.parse(validation.get("type")),
            required=bool(data.get("required", False)),
            mask_pattern=data.get("mask", "") or "",
            input_type=InputType.parse(data.get("type")),
            primary_key=bool(data.get("primary_key", False)),
        )


@dataclass(frozen=True)
class FormSchema:
    """Ordered field declarations of one record type."""

    table_name: str
    fields: tuple[FieldDeclaration, ...]

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for declaration in self.fields:
            if declaration.name in seen:
                raise SchemaError(f"Duplicate field name '{declaration.name}' in form schema")
            seen.add(declaration.name)

        if len([f for f in self.fields if f.primary_key]) > 1:
            raise SchemaError("A form schema may declare at most one primary key field")

    def __iter__(self) -> Iterator[FieldDeclaration]:
        return iter(self.fields)

    @property
    def primary_key(self) -> FieldDeclaration | None:
        """The hidden identifier field, if the schema declares one."""
        return next((f for f in self.fields if f.primary_key), None)

    @property
    def visible_fields(self) -> tuple[FieldDeclaration, ...]:
        """Declarations rendered as user inputs, in declaration order."""
        return tuple(f for f in self.fields if not f.primary_key)

    def get(self, name: str) -> FieldDeclaration | None:
        """Look up a declaration by field name."""
        return next((f for f in self.fields if f.name == name), None)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FormSchema:
        """
        Build a FormSchema from a decoded schema document.

        Raises:
            SchemaError: If the document does not match the schema format
        """
        try:
            jsonschema.validate(data, FORM_SCHEMA_JSON_SCHEMA)
        except jsonschema.ValidationError as e:
            raise SchemaError(f"Invalid form schema: {e.message}", technical_message=str(e)) from e

        try:
            fields = tuple(FieldDeclaration.from_dict(entry) for entry in data["fields"])
        except ValueError as e:
            raise SchemaError(f"Invalid form schema: {e}") from e

        return cls(table_name=data.get("table_name", ""), fields=fields)


def load_schema(path: str | Path) -> FormSchema:
    """
    Read and validate a form schema file.

    Args:
        path: Path to the JSON schema file

    Returns:
        The parsed FormSchema

    Raises:
        SchemaError: If the file cannot be read, parsed or validated
    """
    schema_path = Path(path)
    try:
        data = json.loads(schema_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise SchemaError(f"Cannot read form schema: {schema_path}", technical_message=str(e), path=str(path)) from e
    except json.JSONDecodeError as e:
        raise SchemaError(
            f"Form schema is not valid JSON: {schema_path}", technical_message=str(e), path=str(path)
        ) from e

    schema = FormSchema.from_dict(data)
    logger.info(f"Loaded form schema '{schema.table_name}' with {len(schema.fields)} fields from {schema_path}")
    return schema
