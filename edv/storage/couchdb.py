"""CouchDB storage backend.

Each store is a CouchDB database; each stored value is a CouchDB document

    {"_id": "<key>", "value": "<stored JSON text>", "indexed": [{"name": ..., "value": ...}]}

Queries are evaluated server-side with Mango ``_find`` over ``indexed``.
HTTP errors other than the ones mapped to storage kinds are raised as
``httpx.HTTPStatusError``.
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from edv.errors import ErrorKind, StorageError
from edv.models.query import Query
from edv.storage.base import Attributes, EDVProvider, EDVStore

logger = logging.getLogger(__name__)

EDV_INDEX_NAME = "EDV_EncryptedIndexesAttributeNames"
QUERY_PAGE_SIZE = 1000
MAX_CONFLICT_RETRIES = 10


class CouchDBEDVStore(EDVStore):
    """Handle to one CouchDB database."""

    def __init__(self, name: str, db_name: str, client: httpx.AsyncClient) -> None:
        super().__init__(name)
        self._db = db_name
        self._client = client

    def _doc_path(self, key: str) -> str:
        return f"/{self._db}/{quote(key, safe='')}"

    async def _fetch(self, key: str) -> Optional[dict[str, Any]]:
        response = await self._client.get(self._doc_path(key))
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json()

    async def _write(
        self, key: str, value: bytes, attributes: Attributes, overwrite: bool
    ) -> None:
        body: dict[str, Any] = {
            "value": value.decode("utf-8"),
            "indexed": [{"name": name, "value": attr_value} for name, attr_value in attributes],
        }
        if not overwrite:
            # Without a _rev CouchDB only accepts the PUT if the document is new
            response = await self._client.put(self._doc_path(key), json=body)
            if response.status_code == 409:
                raise StorageError(ErrorKind.DUPLICATE_VALUE, details={"key": key})
            response.raise_for_status()
            return

        for _ in range(MAX_CONFLICT_RETRIES):
            existing = await self._fetch(key)
            if existing is not None:
                body["_rev"] = existing["_rev"]
            else:
                body.pop("_rev", None)
            response = await self._client.put(self._doc_path(key), json=body)
            if response.status_code != 409:
                break
            logger.debug(f"Revision conflict writing '{key}' in '{self._db}', retrying")
        response.raise_for_status()

    async def get(self, key: str) -> bytes:
        doc = await self._fetch(key)
        if doc is None:
            raise StorageError(ErrorKind.VALUE_NOT_FOUND, details={"key": key})
        return doc["value"].encode("utf-8")

    async def get_all(self) -> list[bytes]:
        response = await self._client.get(
            f"/{self._db}/_all_docs", params={"include_docs": "true"}
        )
        response.raise_for_status()
        return [
            row["doc"]["value"].encode("utf-8")
            for row in response.json().get("rows", [])
            if not row["id"].startswith("_design/")
        ]

    async def delete(self, key: str) -> None:
        for _ in range(MAX_CONFLICT_RETRIES):
            doc = await self._fetch(key)
            if doc is None:
                return
            response = await self._client.delete(self._doc_path(key), params={"rev": doc["_rev"]})
            if response.status_code == 404:
                return
            if response.status_code != 409:
                break
            # Someone else changed or deleted it first; look again
        response.raise_for_status()

    async def create_edv_index(self) -> None:
        response = await self._client.post(
            f"/{self._db}/_index",
            json={
                "index": {"fields": ["indexed"]},
                "ddoc": EDV_INDEX_NAME,
                "name": EDV_INDEX_NAME,
                "type": "json",
            },
        )
        response.raise_for_status()

    async def create_encrypted_doc_id_index(self) -> None:
        # Document ids are CouchDB _ids, which the primary index already covers
        return None

    async def create_reference_id_index(self) -> None:
        # Reference id pointers are keyed by _id as well
        return None

    async def query(self, query: Query) -> list[str]:
        selector = {
            "$and": [
                {"indexed": {"$elemMatch": {"name": name, "value": {"$in": sorted(values)}}}}
                for name, values in sorted(query.constraints().items())
            ]
        }
        ids: list[str] = []
        bookmark: Optional[str] = None
        while True:
            body: dict[str, Any] = {"selector": selector, "fields": ["_id"], "limit": QUERY_PAGE_SIZE}
            if bookmark:
                body["bookmark"] = bookmark
            response = await self._client.post(f"/{self._db}/_find", json=body)
            response.raise_for_status()
            page = response.json()
            docs = page.get("docs", [])
            ids.extend(doc["_id"] for doc in docs)
            bookmark = page.get("bookmark")
            if len(docs) < QUERY_PAGE_SIZE or not bookmark:
                break
        return sorted(ids)


class CouchDBEDVProvider(EDVProvider):
    """Provider of CouchDB databases reached over HTTP."""

    def __init__(
        self,
        url: str,
        prefix: str = "",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(prefix.lower())
        self._url = url
        self._client = httpx.AsyncClient(base_url=url, timeout=timeout, transport=transport)

    def _db_name(self, name: str) -> str:
        """CouchDB database names must be lowercase and start with a letter."""
        return self._qualified("v" + name.encode("utf-8").hex())

    async def create_store(self, name: str) -> None:
        db_name = self._db_name(name)
        response = await self._client.put(f"/{db_name}")
        if response.status_code == 412:
            raise StorageError(ErrorKind.DUPLICATE_STORE, details={"store": name})
        response.raise_for_status()
        logger.debug(f"Created CouchDB database '{db_name}' for store '{name}'")

    async def open_store(self, name: str) -> CouchDBEDVStore:
        db_name = self._db_name(name)
        response = await self._client.head(f"/{db_name}")
        if response.status_code == 404:
            raise StorageError(ErrorKind.STORE_NOT_FOUND, details={"store": name})
        response.raise_for_status()
        return CouchDBEDVStore(name, db_name, self._client)

    async def delete_store(self, name: str) -> None:
        response = await self._client.delete(f"/{self._db_name(name)}")
        if response.status_code == 404:
            return
        response.raise_for_status()

    async def close(self) -> None:
        await self._client.aclose()

    def __repr__(self) -> str:
        return f"CouchDBEDVProvider(url={self._url!r})"
