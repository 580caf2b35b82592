"""
PocketBase client - async access to the PocketBase REST API using httpx

Owns the HTTP connection and the authenticated session (AuthStore).
Handlers receive one PocketBaseClient instance from the dispatcher; nothing
else in the server talks to the network.
"""

import base64
import json
import logging
import time
from typing import Any, Optional
from urllib.parse import quote

import httpx

from config import PocketBaseConfig
from utils.error_messages import enhance_error_message

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Something went wrong while processing your request."


class ClientResponseError(Exception):
    """
    Raised for every failed PocketBase request.

    status is the HTTP status code, or 0 when the request never got a
    response (connection refused, timeout, ...).
    """

    def __init__(
        self,
        url: str = "",
        status: int = 0,
        response: Optional[dict] = None,
        original_error: Optional[BaseException] = None,
    ):
        self.url = url
        self.status = status
        self.response = response or {}
        self.original_error = original_error

        fallback = str(original_error) if original_error else DEFAULT_ERROR_MESSAGE
        super().__init__(enhance_error_message(self.response, fallback=fallback) or fallback)

    @property
    def data(self) -> dict:
        """Per-field validation errors reported by PocketBase"""
        return self.response.get("data") or {}


class AuthStore:
    """Holds the token and auth record of the current session."""

    def __init__(self):
        self.token: str = ""
        self.record: Optional[dict] = None

    def save(self, token: str, record: Optional[dict] = None):
        self.token = token or ""
        self.record = record

    def clear(self):
        self.token = ""
        self.record = None

    @property
    def is_valid(self) -> bool:
        """True when a token is held and its JWT 'exp' claim is in the future."""
        if not self.token:
            return False
        payload = _decode_jwt_payload(self.token)
        exp = payload.get("exp")
        if exp is None:
            return True
        return exp > time.time()

    @property
    def is_superuser(self) -> bool:
        if not self.record:
            return False
        return self.record.get("collectionName") == "_superusers"


def _decode_jwt_payload(token: str) -> dict:
    """Read the (unverified) payload segment of a JWT; {} if it is not one."""
    parts = token.split(".")
    if len(parts) != 3:
        return {}
    segment = parts[1] + "=" * (-len(parts[1]) % 4)
    try:
        return json.loads(base64.urlsafe_b64decode(segment))
    except (ValueError, UnicodeDecodeError):
        return {}


def _query_params(page: Optional[int] = None, per_page: Optional[int] = None, **query) -> dict:
    """Build list query parameters, dropping empty values."""
    params = {}
    if page is not None:
        params["page"] = page
    if per_page is not None:
        params["perPage"] = per_page
    for key, value in query.items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        params[key] = value
    return params


class CrudService:
    """List/get/create/update/delete against one REST resource path."""

    def __init__(self, client: "PocketBaseClient", base_path: str):
        self.client = client
        self.base_path = base_path

    def _item_path(self, id_or_name: str) -> str:
        return f"{self.base_path}/{quote(str(id_or_name), safe='')}"

    async def get_list(self, page: int = 1, per_page: int = 30, **query) -> dict:
        """
        Fetch one page.

        Returns the PocketBase list envelope:
        {"page", "perPage", "totalItems", "totalPages", "items"}
        """
        return await self.client.send(
            "GET", self.base_path, params=_query_params(page, per_page, **query)
        )

    async def get_full_list(self, batch: int = 500, **query) -> list[dict]:
        """Fetch every item, requesting `batch` items per page."""
        if batch <= 0:
            raise ValueError("batch must be greater than 0")

        items: list[dict] = []
        page = 1
        while True:
            result = await self.get_list(page, batch, skipTotal=True, **query)
            page_items = result.get("items") or []
            items.extend(page_items)
            if len(page_items) < batch:
                break
            page += 1
        return items

    async def get_one(self, id_or_name: str, **query) -> dict:
        if not id_or_name:
            raise ClientResponseError(
                url=self.client.build_url(self.base_path),
                status=404,
                response={"code": 404, "message": "Missing required record id.", "data": {}},
            )
        return await self.client.send("GET", self._item_path(id_or_name), params=_query_params(**query))

    async def create(self, data: dict, **query) -> dict:
        return await self.client.send("POST", self.base_path, params=_query_params(**query), body=data)

    async def update(self, id_or_name: str, data: dict, **query) -> dict:
        return await self.client.send(
            "PATCH", self._item_path(id_or_name), params=_query_params(**query), body=data
        )

    async def delete(self, id_or_name: str) -> bool:
        await self.client.send("DELETE", self._item_path(id_or_name))
        return True


class CollectionService(CrudService):
    """Collection administration (/api/collections). Requires superuser auth."""

    def __init__(self, client: "PocketBaseClient"):
        super().__init__(client, "/api/collections")


class RecordService(CrudService):
    """Record CRUD and auth flows scoped to one collection."""

    def __init__(self, client: "PocketBaseClient", collection_name: str):
        self.collection_name = collection_name
        self.collection_path = f"/api/collections/{quote(collection_name, safe='')}"
        super().__init__(client, f"{self.collection_path}/records")

    def _auth_response(self, data: dict) -> dict:
        """Store the token/record of a successful auth call in the session."""
        token = data.get("token", "")
        record = data.get("record")
        self.client.auth_store.save(token, record)
        logger.info(f"🔑 Authenticated against '{self.collection_name}'")
        return data

    async def list_auth_methods(self) -> dict:
        return await self.client.send("GET", f"{self.collection_path}/auth-methods")

    async def auth_with_password(self, identity: str, password: str) -> dict:
        data = await self.client.send(
            "POST",
            f"{self.collection_path}/auth-with-password",
            body={"identity": identity, "password": password},
        )
        return self._auth_response(data)

    async def auth_with_oauth2(
        self,
        provider: str,
        code: str,
        code_verifier: str,
        redirect_url: str,
        create_data: Optional[dict] = None,
    ) -> dict:
        body = {
            "provider": provider,
            "code": code,
            "codeVerifier": code_verifier,
            "redirectURL": redirect_url,
        }
        if create_data:
            body["createData"] = create_data
        data = await self.client.send("POST", f"{self.collection_path}/auth-with-oauth2", body=body)
        return self._auth_response(data)

    async def request_otp(self, email: str) -> dict:
        """Send a one-time password to `email`. Returns {"otpId": ...}."""
        return await self.client.send("POST", f"{self.collection_path}/request-otp", body={"email": email})

    async def auth_with_otp(self, otp_id: str, password: str) -> dict:
        data = await self.client.send(
            "POST",
            f"{self.collection_path}/auth-with-otp",
            body={"otpId": otp_id, "password": password},
        )
        return self._auth_response(data)

    async def auth_refresh(self) -> dict:
        data = await self.client.send("POST", f"{self.collection_path}/auth-refresh")
        return self._auth_response(data)

    async def request_verification(self, email: str) -> bool:
        await self.client.send("POST", f"{self.collection_path}/request-verification", body={"email": email})
        return True

    async def confirm_verification(self, token: str) -> bool:
        await self.client.send("POST", f"{self.collection_path}/confirm-verification", body={"token": token})
        return True

    async def request_password_reset(self, email: str) -> bool:
        await self.client.send("POST", f"{self.collection_path}/request-password-reset", body={"email": email})
        return True

    async def confirm_password_reset(self, token: str, password: str, password_confirm: str) -> bool:
        await self.client.send(
            "POST",
            f"{self.collection_path}/confirm-password-reset",
            body={"token": token, "password": password, "passwordConfirm": password_confirm},
        )
        return True

    async def request_email_change(self, new_email: str) -> bool:
        await self.client.send(
            "POST", f"{self.collection_path}/request-email-change", body={"newEmail": new_email}
        )
        return True

    async def confirm_email_change(self, token: str, password: str) -> bool:
        await self.client.send(
            "POST",
            f"{self.collection_path}/confirm-email-change",
            body={"token": token, "password": password},
        )
        return True

    async def impersonate(self, record_id: str, duration: int = 0) -> dict:
        """
        Issue a token for another auth record (superuser only).

        The current session is left untouched; the returned token belongs
        to the impersonated record.
        """
        return await self.client.send(
            "POST",
            f"{self.collection_path}/impersonate/{quote(record_id, safe='')}",
            body={"duration": duration},
        )


class PocketBaseClient:
    """
    Async PocketBase client.

    Usage:
        client = PocketBaseClient(config)
        await client.collection("users").auth_with_password(email, password)
        posts = await client.collection("posts").get_list(1, 20, filter="published = true")
        await client.close()
    """

    def __init__(self, config: PocketBaseConfig, http_client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self.auth_store = AuthStore()
        self._http = http_client or httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout,
        )
        self.collections = CollectionService(self)

    def collection(self, name: str) -> RecordService:
        """Get a record service bound to one collection."""
        return RecordService(self, name)

    def build_url(self, path: str) -> str:
        return f"{self.config.base_url}/{path.lstrip('/')}"

    async def send(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        body: Optional[Any] = None,
    ) -> Any:
        """
        Send a request and return the decoded JSON body.

        Empty (204) responses return None.

        Raises:
            ClientResponseError: On any HTTP error status or transport failure
        """
        headers = {}
        if self.auth_store.token:
            headers["Authorization"] = self.auth_store.token

        url = self.build_url(path)
        try:
            response = await self._http.request(method, path, params=params or None, json=body, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"❌ PocketBase request failed: {method} {url}: {e}")
            raise ClientResponseError(url=url, status=0, original_error=e) from e

        data: Any = None
        if response.content:
            try:
                data = response.json()
            except ValueError:
                data = {"message": response.text}

        if response.status_code >= 400:
            logger.debug(f"PocketBase {method} {url} -> {response.status_code}")
            raise ClientResponseError(
                url=str(response.url),
                status=response.status_code,
                response=data if isinstance(data, dict) else {"message": str(data)},
            )

        return data

    async def close(self):
        """Close the underlying HTTP connection pool"""
        await self._http.aclose()
        logger.info("PocketBase client closed")

    async def __aenter__(self) -> "PocketBaseClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
