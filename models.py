"""
Typed tool arguments
Using Pydantic for validation and default filling

Every tool in the catalog has one arguments model here. The dispatcher builds
the model from the raw MCP arguments mapping and hands the typed value to the
handler, so handlers never read from an untyped dict.

Models accept the camelCase names used in the tool schemas (perPage,
newSchema, ...) as aliases, and snake_case names as well.
"""

import json
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


DEFAULT_AUTH_COLLECTION = "users"


def _parse_json_string(value: Any) -> Any:
    """MCP clients sometimes send objects/arrays as JSON strings."""
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.startswith(("{", "[")):
            try:
                return json.loads(stripped)
            except json.JSONDecodeError:
                return value
    return value


# ============================================================================
# Shared descriptors
# ============================================================================

class FieldDescriptor(BaseModel):
    """One collection field: {name, type, required, options}"""
    model_config = ConfigDict(extra="allow")

    name: str
    type: str
    required: bool = False
    options: Optional[dict[str, Any]] = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class IndexDescriptor(BaseModel):
    """One collection index: {name, fields, unique}"""
    model_config = ConfigDict(extra="allow")

    name: str = Field(min_length=1)
    fields: list[str] = Field(default_factory=list)
    unique: bool = False

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ToolArguments(BaseModel):
    """Base for all tool argument models."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def drop_null_arguments(cls, data: Any) -> Any:
        # An explicit null means "not given" so defaults still apply
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class AuthCollectionArguments(ToolArguments):
    collection: str = DEFAULT_AUTH_COLLECTION


# ============================================================================
# Collections and records
# ============================================================================

class CreateCollectionArgs(ToolArguments):
    name: str = Field(min_length=1)
    fields: list[FieldDescriptor] = Field(alias="schema")
    type: Literal["base", "auth", "view"] = "base"

    @field_validator("fields", mode="before")
    @classmethod
    def parse_json_argument(cls, value):
        return _parse_json_string(value)


class CreateRecordArgs(ToolArguments):
    collection: str
    data: dict[str, Any]

    @field_validator("data", mode="before")
    @classmethod
    def parse_json_argument(cls, value):
        return _parse_json_string(value)


class ListRecordsArgs(ToolArguments):
    collection: str
    filter: Optional[str] = None
    sort: Optional[str] = None
    page: int = Field(1, ge=1)
    per_page: int = Field(50, alias="perPage", ge=1)
    expand: Optional[str] = None


class UpdateRecordArgs(ToolArguments):
    collection: str
    id: str
    data: dict[str, Any]

    @field_validator("data", mode="before")
    @classmethod
    def parse_json_argument(cls, value):
        return _parse_json_string(value)


class DeleteRecordArgs(ToolArguments):
    collection: str
    id: str


class GetCollectionSchemaArgs(ToolArguments):
    collection: str


# ============================================================================
# Auth flows
# ============================================================================

class ListAuthMethodsArgs(AuthCollectionArguments):
    pass


class AuthenticateUserArgs(AuthCollectionArguments):
    # Optional here: with isAdmin=true they fall back to configured credentials
    email: Optional[str] = None
    password: Optional[str] = None
    is_admin: bool = Field(False, alias="isAdmin")


class AuthenticateWithOAuth2Args(AuthCollectionArguments):
    provider: str
    code: str
    code_verifier: str = Field(alias="codeVerifier")
    redirect_url: str = Field(alias="redirectUrl")


class AuthenticateWithOtpArgs(AuthCollectionArguments):
    email: str
    otp_id: Optional[str] = Field(None, alias="otpId")
    password: Optional[str] = None


class AuthRefreshArgs(AuthCollectionArguments):
    pass


class RequestVerificationArgs(AuthCollectionArguments):
    email: str


class ConfirmVerificationArgs(AuthCollectionArguments):
    token: str


class RequestPasswordResetArgs(AuthCollectionArguments):
    email: str


class ConfirmPasswordResetArgs(AuthCollectionArguments):
    token: str
    password: str
    password_confirm: str = Field(alias="passwordConfirm")


class RequestEmailChangeArgs(AuthCollectionArguments):
    new_email: str = Field(alias="newEmail")


class ConfirmEmailChangeArgs(AuthCollectionArguments):
    token: str
    password: str


class ImpersonateUserArgs(AuthCollectionArguments):
    user_id: str = Field(alias="userId")
    duration: int = Field(0, ge=0)


class CreateUserArgs(AuthCollectionArguments):
    email: str
    password: str
    password_confirm: str = Field(alias="passwordConfirm")
    name: Optional[str] = None


# ============================================================================
# Backup, import, migration, query, indexes
# ============================================================================

class BackupDatabaseArgs(ToolArguments):
    format: Literal["json", "csv"] = "json"


class ImportDataArgs(ToolArguments):
    collection: str
    data: list[dict[str, Any]]
    mode: Literal["create", "update", "upsert"] = "create"

    @field_validator("data", mode="before")
    @classmethod
    def parse_json_argument(cls, value):
        return _parse_json_string(value)


class MigrateCollectionArgs(ToolArguments):
    collection: str
    new_schema: list[FieldDescriptor] = Field(alias="newSchema")
    data_transforms: dict[str, str] = Field(default_factory=dict, alias="dataTransforms")

    @field_validator("new_schema", "data_transforms", mode="before")
    @classmethod
    def parse_json_argument(cls, value):
        return _parse_json_string(value)


class QueryCollectionArgs(ToolArguments):
    collection: str
    filter: Optional[str] = None
    sort: Optional[str] = None
    aggregate: Optional[dict[str, str]] = None
    expand: Optional[str] = None

    @field_validator("aggregate", mode="before")
    @classmethod
    def parse_json_argument(cls, value):
        return _parse_json_string(value)


class ManageIndexesArgs(ToolArguments):
    collection: str
    action: str
    # Shape depends on the action, so it is checked by the handler
    index: Optional[dict[str, Any]] = None

    @field_validator("index", mode="before")
    @classmethod
    def parse_json_argument(cls, value):
        return _parse_json_string(value)
