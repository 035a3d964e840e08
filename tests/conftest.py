"""
Shared fixtures for the record form tests.
"""

import os

# Set offscreen platform to prevent display errors on headless systems
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtCore import QStandardPaths

from formcore.config import FormConfig
from formcore.fields import FormSchema

# Keep log files and settings written during tests out of the user's profile
QStandardPaths.setTestModeEnabled(True)

SAMPLE_SCHEMA = {
    "table_name": "customers",
    "fields": [
        {"name": "id", "type": "int", "primary_key": True},
        {"name": "name", "type": "string", "label": "Full name", "required": True},
        {"name": "email", "type": "string", "validation": {"type": "email"}},
        {"name": "cpf", "type": "string", "mask": "999.999.999-99", "validation": {"type": "cpf"}},
        {"name": "phone", "type": "string", "mask": "(99) 99999-9999", "validation": {"type": "telefone"}},
        {"name": "cep", "type": "string", "mask": "99999-999", "validation": {"type": "cep"}},
        {"name": "birth_date", "type": "date"},
    ],
}


@pytest.fixture
def schema_data():
    """A fresh copy of the sample schema document."""
    return {"table_name": SAMPLE_SCHEMA["table_name"], "fields": [dict(f) for f in SAMPLE_SCHEMA["fields"]]}


@pytest.fixture
def schema(schema_data):
    return FormSchema.from_dict(schema_data)


@pytest.fixture
def form_config():
    return FormConfig(base_url="http://records.test", create_action="/customers/create", update_path="/customers/update")
