"""In-memory storage backend.

Data lives in process-local dicts and is lost on restart. Intended for
development and testing. Indexing and querying are not supported: vaults
still work, but queries fail with QUERYING_NOT_SUPPORTED.
"""

import logging
from typing import Optional, Sequence

from edv.errors import ErrorKind, StorageError
from edv.models.document import EncryptedDocument
from edv.models.query import Query
from edv.storage.base import Attributes, EDVProvider, EDVStore
from edv.storage.rwlock import AsyncRWLock

logger = logging.getLogger(__name__)


class _Namespace:
    """Contents of one named store plus the lock shared by all its handles."""

    def __init__(self) -> None:
        self.items: dict[str, bytes] = {}
        self.lock = AsyncRWLock()


class MemEDVStore(EDVStore):
    """Handle to one in-memory store."""

    def __init__(self, name: str, namespace: _Namespace) -> None:
        super().__init__(name)
        self._ns = namespace

    async def _write(
        self, key: str, value: bytes, attributes: Attributes, overwrite: bool
    ) -> None:
        async with self._ns.lock.write():
            if not overwrite and key in self._ns.items:
                raise StorageError(ErrorKind.DUPLICATE_VALUE, details={"key": key})
            self._ns.items[key] = value

    async def get(self, key: str) -> bytes:
        async with self._ns.lock.read():
            try:
                return self._ns.items[key]
            except KeyError:
                raise StorageError(ErrorKind.VALUE_NOT_FOUND, details={"key": key}) from None

    async def get_all(self) -> list[bytes]:
        async with self._ns.lock.read():
            return list(self._ns.items.values())

    async def delete(self, key: str) -> None:
        async with self._ns.lock.write():
            self._ns.items.pop(key, None)

    async def upsert_bulk(self, documents: Optional[Sequence[EncryptedDocument]]) -> None:
        """All-or-nothing: the whole batch is applied under one write lock."""
        if documents is None:
            raise StorageError(ErrorKind.MISSING_DOCUMENTS)
        encoded = [(document.id, document.to_bytes()) for document in documents]
        async with self._ns.lock.write():
            self._ns.items.update(encoded)

    async def create_edv_index(self) -> None:
        raise StorageError(ErrorKind.INDEXING_NOT_SUPPORTED)

    async def create_encrypted_doc_id_index(self) -> None:
        raise StorageError(ErrorKind.INDEXING_NOT_SUPPORTED)

    async def create_reference_id_index(self) -> None:
        raise StorageError(ErrorKind.INDEXING_NOT_SUPPORTED)

    async def query(self, query: Query) -> list[str]:
        raise StorageError(ErrorKind.QUERYING_NOT_SUPPORTED, "querying is not supported by memstore")

    def __len__(self) -> int:
        return len(self._ns.items)


class MemEDVProvider(EDVProvider):
    """Provider of in-memory stores."""

    def __init__(self, prefix: str = "") -> None:
        super().__init__(prefix)
        self._namespaces: dict[str, _Namespace] = {}
        self._lock = AsyncRWLock()

    async def create_store(self, name: str) -> None:
        qualified = self._qualified(name)
        async with self._lock.write():
            if qualified in self._namespaces:
                raise StorageError(ErrorKind.DUPLICATE_STORE, details={"store": name})
            self._namespaces[qualified] = _Namespace()
        logger.debug(f"Created in-memory store '{qualified}'")

    async def open_store(self, name: str) -> MemEDVStore:
        async with self._lock.read():
            namespace = self._namespaces.get(self._qualified(name))
        if namespace is None:
            raise StorageError(ErrorKind.STORE_NOT_FOUND, details={"store": name})
        return MemEDVStore(name, namespace)

    async def delete_store(self, name: str) -> None:
        async with self._lock.write():
            self._namespaces.pop(self._qualified(name), None)

    async def close(self) -> None:
        async with self._lock.write():
            self._namespaces.clear()

    def __repr__(self) -> str:
        return f"MemEDVProvider(stores={len(self._namespaces)})"
