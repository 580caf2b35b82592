"""
Handler Registry - Maps tool names to handler functions

This module provides a centralized registry that routes tool calls to their
respective handler functions. Handlers are organized by category matching
the tools/ directory structure.

Architecture:
- Each handler module exports async functions: handle_<tool_name>(client, args)
- `args` is the tool's typed arguments model (see models.py), built by the
  dispatcher before the handler runs
- Registry maps tool names to (handler_function, arguments_model) tuples

Usage:
    from handlers import get_handler

    handler_info = get_handler(tool_name)
    if handler_info:
        handler, args_model = handler_info
        result = await handler(client, args_model.model_validate(arguments))
"""

from typing import Optional, Tuple

import models

# Import all handler modules
from . import auth_handlers
from . import backup_handlers
from . import collection_handlers
from . import index_handlers
from . import migration_handlers
from . import query_handlers
from . import record_handlers


# Handler registry: {tool_name: (handler_function, arguments_model)}
HANDLER_REGISTRY = {
    # Collections and records
    "create_collection": (collection_handlers.handle_create_collection, models.CreateCollectionArgs),
    "create_record": (record_handlers.handle_create_record, models.CreateRecordArgs),
    "list_records": (record_handlers.handle_list_records, models.ListRecordsArgs),
    "update_record": (record_handlers.handle_update_record, models.UpdateRecordArgs),
    "delete_record": (record_handlers.handle_delete_record, models.DeleteRecordArgs),

    # Auth flows
    "list_auth_methods": (auth_handlers.handle_list_auth_methods, models.ListAuthMethodsArgs),
    "authenticate_user": (auth_handlers.handle_authenticate_user, models.AuthenticateUserArgs),
    "authenticate_with_oauth2": (auth_handlers.handle_authenticate_with_oauth2, models.AuthenticateWithOAuth2Args),
    "authenticate_with_otp": (auth_handlers.handle_authenticate_with_otp, models.AuthenticateWithOtpArgs),
    "auth_refresh": (auth_handlers.handle_auth_refresh, models.AuthRefreshArgs),
    "request_verification": (auth_handlers.handle_request_verification, models.RequestVerificationArgs),
    "confirm_verification": (auth_handlers.handle_confirm_verification, models.ConfirmVerificationArgs),
    "request_password_reset": (auth_handlers.handle_request_password_reset, models.RequestPasswordResetArgs),
    "confirm_password_reset": (auth_handlers.handle_confirm_password_reset, models.ConfirmPasswordResetArgs),
    "request_email_change": (auth_handlers.handle_request_email_change, models.RequestEmailChangeArgs),
    "confirm_email_change": (auth_handlers.handle_confirm_email_change, models.ConfirmEmailChangeArgs),
    "impersonate_user": (auth_handlers.handle_impersonate_user, models.ImpersonateUserArgs),
    "create_user": (auth_handlers.handle_create_user, models.CreateUserArgs),

    # Schema, backup, import
    "get_collection_schema": (collection_handlers.handle_get_collection_schema, models.GetCollectionSchemaArgs),
    "backup_database": (backup_handlers.handle_backup_database, models.BackupDatabaseArgs),
    "import_data": (record_handlers.handle_import_data, models.ImportDataArgs),

    # Compound tools
    "migrate_collection": (migration_handlers.handle_migrate_collection, models.MigrateCollectionArgs),
    "query_collection": (query_handlers.handle_query_collection, models.QueryCollectionArgs),
    "manage_indexes": (index_handlers.handle_manage_indexes, models.ManageIndexesArgs),
}


def get_handler(tool_name: str) -> Optional[Tuple]:
    """
    Get handler information for a tool.

    Args:
        tool_name: Name of the tool

    Returns:
        Tuple of (handler_function, arguments_model) or None if not found
    """
    return HANDLER_REGISTRY.get(tool_name)


def list_all_handlers() -> list[str]:
    """Get list of all registered tool names"""
    return list(HANDLER_REGISTRY.keys())


__all__ = [
    'HANDLER_REGISTRY',
    'get_handler',
    'list_all_handlers',
]
