"""
MCP Tools Package

Tool definitions (name, description, JSON input schema) grouped by area:
- Collections: create, schema, migration, indexes
- Records: CRUD and filtered queries with aggregates
- Auth: sign-in flows and account lifecycle
- Backup: export and import
"""

from .collection_tools import create_collection, get_collection_schema, migrate_collection, manage_indexes
from .record_tools import create_record, list_records, update_record, delete_record, query_collection
from .auth_tools import (
    list_auth_methods,
    authenticate_user,
    authenticate_with_oauth2,
    authenticate_with_otp,
    auth_refresh,
    request_verification,
    confirm_verification,
    request_password_reset,
    confirm_password_reset,
    request_email_change,
    confirm_email_change,
    impersonate_user,
    create_user,
)
from .backup_tools import backup_database, import_data


def get_core_tool_catalog():
    """
    Get all MCP tools, in catalog order.

    Static: the catalog does not depend on configuration or session state,
    so it can be listed before any authentication.
    """
    return [
        create_collection(),
        create_record(),
        list_records(),
        update_record(),
        delete_record(),
        list_auth_methods(),
        authenticate_user(),
        authenticate_with_oauth2(),
        authenticate_with_otp(),
        auth_refresh(),
        request_verification(),
        confirm_verification(),
        request_password_reset(),
        confirm_password_reset(),
        request_email_change(),
        confirm_email_change(),
        impersonate_user(),
        create_user(),
        get_collection_schema(),
        backup_database(),
        import_data(),
        migrate_collection(),
        query_collection(),
        manage_indexes(),
    ]


__all__ = ['get_core_tool_catalog']
