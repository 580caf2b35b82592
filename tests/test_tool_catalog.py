"""
Tests for the static tool catalog and its agreement with the handler registry.
"""

import pytest

from handlers import HANDLER_REGISTRY, get_handler, list_all_handlers
from tools import get_core_tool_catalog

CATALOG_ORDER = [
    "create_collection", "create_record", "list_records", "update_record", "delete_record",
    "list_auth_methods", "authenticate_user", "authenticate_with_oauth2", "authenticate_with_otp",
    "auth_refresh", "request_verification", "confirm_verification", "request_password_reset",
    "confirm_password_reset", "request_email_change", "confirm_email_change", "impersonate_user",
    "create_user", "get_collection_schema", "backup_database", "import_data",
    "migrate_collection", "query_collection", "manage_indexes",
]

CATALOG = {tool.name: tool for tool in get_core_tool_catalog()}


def test_catalog_order():
    assert [tool.name for tool in get_core_tool_catalog()] == CATALOG_ORDER


def test_catalog_is_stable():
    assert get_core_tool_catalog() == get_core_tool_catalog()


def test_every_tool_has_a_handler():
    assert list_all_handlers() == CATALOG_ORDER
    assert get_handler("drop_database") is None


@pytest.mark.parametrize("name", CATALOG_ORDER)
def test_schema_shape(name):
    schema = CATALOG[name].inputSchema

    assert CATALOG[name].description
    assert schema["type"] == "object"
    assert set(schema["required"]) <= set(schema["properties"])


@pytest.mark.parametrize("name", CATALOG_ORDER)
def test_required_fields_match_argument_model(name):
    _, args_model = HANDLER_REGISTRY[name]
    model_required = {
        field.alias or field_name
        for field_name, field in args_model.model_fields.items()
        if field.is_required()
    }

    assert model_required == set(CATALOG[name].inputSchema["required"])


@pytest.mark.parametrize("name", CATALOG_ORDER)
def test_schema_properties_are_accepted_by_model(name):
    _, args_model = HANDLER_REGISTRY[name]
    accepted = {field.alias or field_name for field_name, field in args_model.model_fields.items()}

    assert set(CATALOG[name].inputSchema["properties"]) <= accepted


def test_auth_tools_default_to_users():
    for name in CATALOG_ORDER[5:18]:
        assert CATALOG[name].inputSchema["properties"]["collection"]["default"] == "users"
