"""
In-memory stand-in for PocketBaseClient.

Implements the same surface handlers use (collections service, per-collection
record services with auth flows, config, auth_store) backed by dicts, records
every call in `calls`, and can be told to fail specific operations:

    pb = FakePocketBase()
    pb.add_collection("posts", records=[{"id": "p1", "title": "Hi"}])
    pb.fail("records.create", collection="posts", after=1)   # 2nd create fails
"""

import copy
import itertools
from typing import Any, Optional

from client import AuthStore, ClientResponseError
from config import PocketBaseConfig

FAKE_URL = "http://pocketbase.test"


def not_found(path: str) -> ClientResponseError:
    return ClientResponseError(
        url=f"{FAKE_URL}{path}",
        status=404,
        response={"status": 404, "message": "The requested resource wasn't found.", "data": {}},
    )


def bad_request(path: str, message: str, data: Optional[dict] = None) -> ClientResponseError:
    return ClientResponseError(
        url=f"{FAKE_URL}{path}",
        status=400,
        response={"status": 400, "message": message, "data": data or {}},
    )


class FakeCollectionService:
    def __init__(self, pb: "FakePocketBase"):
        self.pb = pb

    async def create(self, data: dict) -> dict:
        self.pb._record_call("collections.create", None, data)
        name = data.get("name")
        if self.pb.find_collection(name):
            raise bad_request(
                "/api/collections",
                "Failed to create collection.",
                {"name": {"code": "validation_collection_name_exists", "message": "Collection name must be unique (case insensitive)."}},
            )
        collection = {
            "id": f"col_{next(self.pb._ids)}",
            "type": "base",
            "fields": [],
            "indexes": [],
            **copy.deepcopy(data),
        }
        self.pb._collections[collection["id"]] = collection
        self.pb._records[name] = []
        return copy.deepcopy(collection)

    async def get_one(self, id_or_name: str) -> dict:
        self.pb._record_call("collections.get_one", id_or_name, None)
        return copy.deepcopy(self.pb._require_collection(id_or_name))

    async def get_list(self, page: int = 1, per_page: int = 30, **query) -> dict:
        self.pb._record_call("collections.get_list", None, {"page": page, "per_page": per_page, **query})
        items = list(self.pb._collections.values())
        return self.pb._page(items, page, per_page)

    async def get_full_list(self, batch: int = 500, **query) -> list[dict]:
        self.pb._record_call("collections.get_full_list", None, query)
        return copy.deepcopy(list(self.pb._collections.values()))

    async def update(self, id_or_name: str, data: dict) -> dict:
        self.pb._record_call("collections.update", id_or_name, data)
        collection = self.pb._require_collection(id_or_name)
        old_name = collection["name"]
        new_name = data.get("name", old_name)
        if new_name != old_name:
            if self.pb.find_collection(new_name):
                raise bad_request(f"/api/collections/{id_or_name}", "Failed to update collection.")
            self.pb._records[new_name] = self.pb._records.pop(old_name, [])
        collection.update(copy.deepcopy(data))
        return copy.deepcopy(collection)

    async def delete(self, id_or_name: str) -> bool:
        self.pb._record_call("collections.delete", id_or_name, None)
        collection = self.pb._require_collection(id_or_name)
        del self.pb._collections[collection["id"]]
        self.pb._records.pop(collection["name"], None)
        return True


class FakeRecordService:
    def __init__(self, pb: "FakePocketBase", collection_name: str):
        self.pb = pb
        self.collection_name = collection_name

    def _call(self, operation: str, payload: Any = None):
        self.pb._record_call(f"records.{operation}", self.collection_name, payload)

    def _items(self) -> list[dict]:
        if self.collection_name not in self.pb._records:
            raise not_found(f"/api/collections/{self.collection_name}/records")
        return self.pb._records[self.collection_name]

    def _find(self, record_id: str) -> dict:
        for record in self._items():
            if record.get("id") == record_id:
                return record
        raise not_found(f"/api/collections/{self.collection_name}/records/{record_id}")

    # CRUD

    async def create(self, data: dict) -> dict:
        self._call("create", data)
        items = self._items()
        record = copy.deepcopy(data)
        record.setdefault("id", f"rec_{next(self.pb._ids)}")
        if any(existing.get("id") == record["id"] for existing in items):
            raise bad_request(
                f"/api/collections/{self.collection_name}/records",
                "Failed to create record.",
                {"id": {"code": "validation_not_unique", "message": "Value must be unique."}},
            )
        record["collectionName"] = self.collection_name
        items.append(record)
        return copy.deepcopy(record)

    async def get_list(self, page: int = 1, per_page: int = 30, **query) -> dict:
        self._call("get_list", {"page": page, "per_page": per_page, **query})
        return self.pb._page(self._items(), page, per_page)

    async def get_full_list(self, batch: int = 500, **query) -> list[dict]:
        self._call("get_full_list", query)
        return copy.deepcopy(self._items())

    async def get_one(self, record_id: str, **query) -> dict:
        self._call("get_one", record_id)
        return copy.deepcopy(self._find(record_id))

    async def update(self, record_id: str, data: dict) -> dict:
        self._call("update", {"id": record_id, **data})
        record = self._find(record_id)
        record.update(copy.deepcopy(data))
        return copy.deepcopy(record)

    async def delete(self, record_id: str) -> bool:
        self._call("delete", record_id)
        items = self._items()
        items.remove(self._find(record_id))
        return True

    # Auth flows

    def _auth(self, record: dict) -> dict:
        token = f"token-{self.collection_name}-{record.get('id')}"
        self.pb.auth_store.save(token, record)
        return {"token": token, "record": copy.deepcopy(record)}

    async def list_auth_methods(self) -> dict:
        self._call("list_auth_methods")
        return copy.deepcopy(self.pb.auth_methods)

    async def auth_with_password(self, identity: str, password: str) -> dict:
        self._call("auth_with_password", {"identity": identity, "password": password})
        if self.pb.passwords.get((self.collection_name, identity)) != password:
            raise bad_request(
                f"/api/collections/{self.collection_name}/auth-with-password",
                "Failed to authenticate.",
            )
        return self._auth({"id": f"id-{identity}", "email": identity, "collectionName": self.collection_name})

    async def auth_with_oauth2(self, provider, code, code_verifier, redirect_url, create_data=None) -> dict:
        self._call("auth_with_oauth2", {
            "provider": provider, "code": code,
            "codeVerifier": code_verifier, "redirectURL": redirect_url,
        })
        return self._auth({"id": f"oauth-{provider}", "collectionName": self.collection_name})

    async def request_otp(self, email: str) -> dict:
        self._call("request_otp", {"email": email})
        return {"otpId": f"otp-{email}"}

    async def auth_with_otp(self, otp_id: str, password: str) -> dict:
        self._call("auth_with_otp", {"otpId": otp_id, "password": password})
        return self._auth({"id": f"otp-user-{otp_id}", "collectionName": self.collection_name})

    async def auth_refresh(self) -> dict:
        self._call("auth_refresh")
        if not self.pb.auth_store.token:
            raise ClientResponseError(
                url=f"{FAKE_URL}/api/collections/{self.collection_name}/auth-refresh",
                status=401,
                response={"message": "The request requires valid record authorization token."},
            )
        return self._auth(self.pb.auth_store.record or {})

    async def request_verification(self, email: str) -> bool:
        self._call("request_verification", {"email": email})
        return True

    async def confirm_verification(self, token: str) -> bool:
        self._call("confirm_verification", {"token": token})
        return True

    async def request_password_reset(self, email: str) -> bool:
        self._call("request_password_reset", {"email": email})
        return True

    async def confirm_password_reset(self, token: str, password: str, password_confirm: str) -> bool:
        self._call("confirm_password_reset", {"token": token, "password": password, "passwordConfirm": password_confirm})
        return True

    async def request_email_change(self, new_email: str) -> bool:
        self._call("request_email_change", {"newEmail": new_email})
        return True

    async def confirm_email_change(self, token: str, password: str) -> bool:
        self._call("confirm_email_change", {"token": token, "password": password})
        return True

    async def impersonate(self, record_id: str, duration: int = 0) -> dict:
        self._call("impersonate", {"id": record_id, "duration": duration})
        return {"token": f"impersonated-{record_id}", "record": {"id": record_id}}


class FakePocketBase:
    """Drop-in replacement for PocketBaseClient in handler/dispatcher tests."""

    def __init__(self, config: Optional[PocketBaseConfig] = None):
        self.config = config or PocketBaseConfig(url=FAKE_URL)
        self.auth_store = AuthStore()
        self.calls: list[tuple[str, Optional[str], Any]] = []
        self.passwords: dict[tuple[str, str], str] = {}
        self.auth_methods: dict = {"password": {"enabled": True, "identityFields": ["email"]}}

        self._ids = itertools.count(1)
        self._collections: dict[str, dict] = {}
        self._records: dict[str, list[dict]] = {}
        self._failures: list[dict] = []

        self.collections = FakeCollectionService(self)

    def collection(self, name: str) -> FakeRecordService:
        return FakeRecordService(self, name)

    async def close(self):
        pass

    # Test setup helpers

    def add_collection(
        self,
        name: str,
        fields: Optional[list] = None,
        records: Optional[list[dict]] = None,
        indexes: Optional[list] = None,
        type: str = "base",
    ) -> dict:
        collection = {
            "id": f"col_{next(self._ids)}",
            "name": name,
            "type": type,
            "fields": copy.deepcopy(fields or []),
            "indexes": copy.deepcopy(indexes or []),
        }
        self._collections[collection["id"]] = collection
        self._records[name] = [
            {**copy.deepcopy(record), "collectionName": name} for record in (records or [])
        ]
        return copy.deepcopy(collection)

    def add_user(self, email: str, password: str, collection: str = "users"):
        self.passwords[(collection, email)] = password

    def fail(
        self,
        operation: str,
        error: Optional[Exception] = None,
        collection: Optional[str] = None,
        after: int = 0,
    ):
        """
        Make `operation` (e.g. "records.create", "collections.delete") raise.

        collection: only match calls targeting this collection/id
        after: number of matching calls that still succeed before failing
        """
        self._failures.append({
            "operation": operation,
            "collection": collection,
            "remaining": after,
            "error": error or ClientResponseError(
                url=FAKE_URL,
                status=500,
                response={"message": f"Injected failure in {operation}"},
            ),
        })

    # Inspection helpers

    def find_collection(self, id_or_name: Optional[str]) -> Optional[dict]:
        for collection in self._collections.values():
            if id_or_name in (collection["id"], collection["name"]):
                return collection
        return None

    def collection_names(self) -> list[str]:
        return [collection["name"] for collection in self._collections.values()]

    def records_of(self, name: str) -> list[dict]:
        return copy.deepcopy(self._records.get(name, []))

    def calls_to(self, operation: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == operation]

    @property
    def remote_calls(self) -> int:
        return len(self.calls)

    # Internals

    def _record_call(self, operation: str, target: Optional[str], payload: Any):
        self.calls.append((operation, target, copy.deepcopy(payload)))
        for failure in self._failures:
            if failure["operation"] != operation:
                continue
            if failure["collection"] is not None and failure["collection"] != target:
                continue
            if failure["remaining"] > 0:
                failure["remaining"] -= 1
                continue
            raise failure["error"]

    def _require_collection(self, id_or_name: str) -> dict:
        collection = self.find_collection(id_or_name)
        if collection is None:
            raise not_found(f"/api/collections/{id_or_name}")
        return collection

    @staticmethod
    def _page(items: list[dict], page: int, per_page: int) -> dict:
        start = (page - 1) * per_page
        selected = items[start:start + per_page]
        total = len(items)
        return {
            "page": page,
            "perPage": per_page,
            "totalItems": total,
            "totalPages": (total + per_page - 1) // per_page if per_page else 0,
            "items": copy.deepcopy(selected),
        }
