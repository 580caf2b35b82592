"""
Auth flow handlers

Each handler targets the auth collection named in its arguments ("users" by
default). Successful sign-ins (password, OAuth2, OTP, refresh) replace the
client's session token, so later tool calls run as the signed-in record.
"""

import logging

from mcp import types

from client import PocketBaseClient
from config import SUPERUSERS_COLLECTION
from errors import invalid_params
from handlers.common import backend_errors, json_text, success_text
from models import (
    AuthenticateUserArgs,
    AuthenticateWithOAuth2Args,
    AuthenticateWithOtpArgs,
    AuthRefreshArgs,
    ConfirmEmailChangeArgs,
    ConfirmPasswordResetArgs,
    ConfirmVerificationArgs,
    CreateUserArgs,
    ImpersonateUserArgs,
    ListAuthMethodsArgs,
    RequestEmailChangeArgs,
    RequestPasswordResetArgs,
    RequestVerificationArgs,
)

logger = logging.getLogger(__name__)


@backend_errors("Failed to list auth methods")
async def handle_list_auth_methods(client: PocketBaseClient, args: ListAuthMethodsArgs) -> list[types.TextContent]:
    result = await client.collection(args.collection).list_auth_methods()
    return json_text(result)


@backend_errors("Authentication failed")
async def handle_authenticate_user(client: PocketBaseClient, args: AuthenticateUserArgs) -> list[types.TextContent]:
    """
    Password sign-in.

    With isAdmin=true the superusers collection is used instead of
    `collection`, and a missing email/password falls back to the configured
    admin credentials.
    """
    collection = SUPERUSERS_COLLECTION if args.is_admin else args.collection
    email = args.email
    password = args.password

    if args.is_admin:
        email = email or client.config.admin_email
        password = password or client.config.admin_password

    if not email or not password:
        raise invalid_params("Email and password are required for authentication")

    auth_data = await client.collection(collection).auth_with_password(email, password)
    logger.info(f"✅ Signed in as {email} ({collection})")
    return json_text(auth_data)


@backend_errors("OAuth2 authentication failed")
async def handle_authenticate_with_oauth2(client: PocketBaseClient, args: AuthenticateWithOAuth2Args) -> list[types.TextContent]:
    auth_data = await client.collection(args.collection).auth_with_oauth2(
        args.provider,
        args.code,
        args.code_verifier,
        args.redirect_url,
    )
    return json_text(auth_data)


@backend_errors("OTP authentication failed")
async def handle_authenticate_with_otp(client: PocketBaseClient, args: AuthenticateWithOtpArgs) -> list[types.TextContent]:
    """
    Two-step OTP sign-in.

    Without otpId/password: send a one-time password to `email` and return
    {"otpId": ...}. With both: exchange them for an auth token.
    """
    records = client.collection(args.collection)

    if args.otp_id and args.password:
        auth_data = await records.auth_with_otp(args.otp_id, args.password)
        return json_text(auth_data)

    result = await records.request_otp(args.email)
    logger.info(f"📧 OTP requested for {args.email}")
    return json_text(result)


@backend_errors("Auth refresh failed")
async def handle_auth_refresh(client: PocketBaseClient, args: AuthRefreshArgs) -> list[types.TextContent]:
    auth_data = await client.collection(args.collection).auth_refresh()
    return json_text(auth_data)


@backend_errors("Verification request failed")
async def handle_request_verification(client: PocketBaseClient, args: RequestVerificationArgs) -> list[types.TextContent]:
    result = await client.collection(args.collection).request_verification(args.email)
    return success_text(result)


@backend_errors("Verification confirmation failed")
async def handle_confirm_verification(client: PocketBaseClient, args: ConfirmVerificationArgs) -> list[types.TextContent]:
    result = await client.collection(args.collection).confirm_verification(args.token)
    return success_text(result)


@backend_errors("Password reset request failed")
async def handle_request_password_reset(client: PocketBaseClient, args: RequestPasswordResetArgs) -> list[types.TextContent]:
    result = await client.collection(args.collection).request_password_reset(args.email)
    return success_text(result)


@backend_errors("Password reset confirmation failed")
async def handle_confirm_password_reset(client: PocketBaseClient, args: ConfirmPasswordResetArgs) -> list[types.TextContent]:
    result = await client.collection(args.collection).confirm_password_reset(
        args.token,
        args.password,
        args.password_confirm,
    )
    return success_text(result)


@backend_errors("Email change request failed")
async def handle_request_email_change(client: PocketBaseClient, args: RequestEmailChangeArgs) -> list[types.TextContent]:
    result = await client.collection(args.collection).request_email_change(args.new_email)
    return success_text(result)


@backend_errors("Email change confirmation failed")
async def handle_confirm_email_change(client: PocketBaseClient, args: ConfirmEmailChangeArgs) -> list[types.TextContent]:
    result = await client.collection(args.collection).confirm_email_change(args.token, args.password)
    return success_text(result)


@backend_errors("User impersonation failed")
async def handle_impersonate_user(client: PocketBaseClient, args: ImpersonateUserArgs) -> list[types.TextContent]:
    """
    Issue a token for another user. Requires a superuser session.
    """
    auth_data = await client.collection(args.collection).impersonate(args.user_id, args.duration)
    logger.info(f"🎭 Issued impersonation token for {args.user_id} ({args.collection})")
    return json_text(auth_data)


@backend_errors("Failed to create user")
async def handle_create_user(client: PocketBaseClient, args: CreateUserArgs) -> list[types.TextContent]:
    data = {
        "email": args.email,
        "password": args.password,
        "passwordConfirm": args.password_confirm,
    }
    if args.name is not None:
        data["name"] = args.name

    result = await client.collection(args.collection).create(data)
    return json_text(result)
