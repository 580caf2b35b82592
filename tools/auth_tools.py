"""
Auth MCP Tools
Sign-in flows and account lifecycle for PocketBase auth collections.
Every tool targets the "users" collection unless `collection` says otherwise.
"""

from mcp import types


def _collection_property() -> dict:
    return {
        "type": "string",
        "description": "Collection name (default: users)",
        "default": "users"
    }


def _auth_tool(name: str, description: str, properties: dict, required: list[str]) -> types.Tool:
    return types.Tool(
        name=name,
        description=description,
        inputSchema={
            "type": "object",
            "properties": {**properties, "collection": _collection_property()},
            "required": required
        }
    )


def list_auth_methods() -> types.Tool:
    return _auth_tool("list_auth_methods", "List all available authentication methods", {}, [])


def authenticate_user() -> types.Tool:
    return _auth_tool(
        "authenticate_user",
        "Authenticate a user with email and password. With isAdmin=true, signs in as a superuser and falls back to the server's configured admin credentials when email/password are omitted.",
        {
            "email": {"type": "string", "description": "User email"},
            "password": {"type": "string", "description": "User password"},
            "isAdmin": {
                "type": "boolean",
                "description": "Whether to authenticate as an admin (uses _superusers collection)",
                "default": False
            }
        },
        []
    )


def authenticate_with_oauth2() -> types.Tool:
    return _auth_tool(
        "authenticate_with_oauth2",
        "Authenticate a user with OAuth2",
        {
            "provider": {"type": "string", "description": "OAuth2 provider name (e.g., google, facebook, github)"},
            "code": {"type": "string", "description": "The authorization code returned from the OAuth2 provider"},
            "codeVerifier": {"type": "string", "description": "PKCE code verifier"},
            "redirectUrl": {"type": "string", "description": "The redirect URL used in the OAuth2 flow"}
        },
        ["provider", "code", "codeVerifier", "redirectUrl"]
    )


def authenticate_with_otp() -> types.Tool:
    return _auth_tool(
        "authenticate_with_otp",
        "Authenticate a user with a one-time password. Call with email only to send the OTP (returns otpId), then call again with otpId and the received password to sign in.",
        {
            "email": {"type": "string", "description": "User email"},
            "otpId": {"type": "string", "description": "OTP id returned by the first call"},
            "password": {"type": "string", "description": "One-time password received by email"}
        },
        ["email"]
    )


def auth_refresh() -> types.Tool:
    return _auth_tool("auth_refresh", "Refresh authentication token", {}, [])


def request_verification() -> types.Tool:
    return _auth_tool(
        "request_verification",
        "Request email verification",
        {"email": {"type": "string", "description": "User email"}},
        ["email"]
    )


def confirm_verification() -> types.Tool:
    return _auth_tool(
        "confirm_verification",
        "Confirm email verification with token",
        {"token": {"type": "string", "description": "Verification token"}},
        ["token"]
    )


def request_password_reset() -> types.Tool:
    return _auth_tool(
        "request_password_reset",
        "Request password reset",
        {"email": {"type": "string", "description": "User email"}},
        ["email"]
    )


def confirm_password_reset() -> types.Tool:
    return _auth_tool(
        "confirm_password_reset",
        "Confirm password reset with token",
        {
            "token": {"type": "string", "description": "Reset token"},
            "password": {"type": "string", "description": "New password"},
            "passwordConfirm": {"type": "string", "description": "Confirm new password"}
        },
        ["token", "password", "passwordConfirm"]
    )


def request_email_change() -> types.Tool:
    return _auth_tool(
        "request_email_change",
        "Request email change",
        {"newEmail": {"type": "string", "description": "New email address"}},
        ["newEmail"]
    )


def confirm_email_change() -> types.Tool:
    return _auth_tool(
        "confirm_email_change",
        "Confirm email change with token",
        {
            "token": {"type": "string", "description": "Email change token"},
            "password": {"type": "string", "description": "Current password for confirmation"}
        },
        ["token", "password"]
    )


def impersonate_user() -> types.Tool:
    return _auth_tool(
        "impersonate_user",
        "Impersonate another user (admin only). Returns a token for that user; the current session is unchanged.",
        {
            "userId": {"type": "string", "description": "ID of the user to impersonate"},
            "duration": {
                "type": "number",
                "description": "Token duration in seconds (default: 0, the collection's default duration)",
                "default": 0
            }
        },
        ["userId"]
    )


def create_user() -> types.Tool:
    return _auth_tool(
        "create_user",
        "Create a new user account",
        {
            "email": {"type": "string", "description": "User email"},
            "password": {"type": "string", "description": "User password"},
            "passwordConfirm": {"type": "string", "description": "Password confirmation"},
            "name": {"type": "string", "description": "User name"}
        },
        ["email", "password", "passwordConfirm"]
    )
