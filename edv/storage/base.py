"""Abstract storage backend contract.

An ``EDVProvider`` owns named stores (one per vault plus internal ones); an
``EDVStore`` is a handle bound to one store. Backends subclass both and
implement the abstract primitives; document-level operations are built on
top of them here so every backend shares the same semantics.

All failures are raised as ``StorageError`` with one of the storage
``ErrorKind`` values. Backends that cannot index or query raise
``INDEXING_NOT_SUPPORTED`` / ``QUERYING_NOT_SUPPORTED`` rather than silently
doing nothing.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from edv.errors import ErrorKind, StorageError
from edv.models.document import EncryptedDocument
from edv.models.query import Query

Attributes = Sequence[tuple[str, str]]


class EDVStore(ABC):
    """Handle bound to one named store.

    Subclasses must implement:
    - _write: store bytes under a key, optionally only if the key is absent
    - get, get_all, delete
    - the index hooks and query (or raise the "not supported" kinds)
    """

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    async def _write(
        self, key: str, value: bytes, attributes: Attributes, overwrite: bool
    ) -> None:
        """Store value under key with its indexed attributes.

        When overwrite is False the check and the write must be atomic, and an
        existing key raises DUPLICATE_VALUE.
        """

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """Fetch the stored bytes. Raises VALUE_NOT_FOUND if absent."""

    @abstractmethod
    async def get_all(self) -> list[bytes]:
        """Fetch every stored value. Order is backend-defined."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a key. Deleting an absent key succeeds."""

    @abstractmethod
    async def create_edv_index(self) -> None:
        """Create the index over document attributes."""

    @abstractmethod
    async def create_encrypted_doc_id_index(self) -> None:
        """Create the index over document ids."""

    @abstractmethod
    async def create_reference_id_index(self) -> None:
        """Create the index over vault reference ids (registry store)."""

    @abstractmethod
    async def query(self, query: Query) -> list[str]:
        """Return the sorted ids of documents matching the query."""

    async def put(self, document: EncryptedDocument) -> None:
        """Insert or overwrite a document at key = document id."""
        await self._write(document.id, document.to_bytes(), document.attribute_pairs(), True)

    async def insert(self, document: EncryptedDocument) -> None:
        """Insert a document. Raises DUPLICATE_VALUE if the id is taken."""
        await self._write(document.id, document.to_bytes(), document.attribute_pairs(), False)

    async def update(self, document: EncryptedDocument) -> None:
        await self.put(document)

    async def upsert_bulk(self, documents: Optional[Sequence[EncryptedDocument]]) -> None:
        """Put every document in order.

        None is rejected with MISSING_DOCUMENTS; an empty sequence is a no-op.
        The default is best-effort: documents before a failure stay written.
        """
        if documents is None:
            raise StorageError(ErrorKind.MISSING_DOCUMENTS)
        for document in documents:
            await self.put(document)

    async def put_value(self, key: str, value: bytes) -> None:
        """Store raw bytes that carry no indexed attributes."""
        await self._write(key, value, (), True)

    async def insert_value(self, key: str, value: bytes) -> None:
        """Store raw bytes. Raises DUPLICATE_VALUE if the key is taken."""
        await self._write(key, value, (), False)


class EDVProvider(ABC):
    """Factory and owner of named stores for one storage engine."""

    def __init__(self, prefix: str = "") -> None:
        self._prefix = prefix

    @abstractmethod
    async def create_store(self, name: str) -> None:
        """Create an empty store. Raises DUPLICATE_STORE if it exists."""

    @abstractmethod
    async def open_store(self, name: str) -> EDVStore:
        """Return a handle to an existing store. Raises STORE_NOT_FOUND."""

    @abstractmethod
    async def delete_store(self, name: str) -> None:
        """Remove a store and its contents. Absent stores are ignored."""

    async def load(self) -> None:
        """Load durable state at startup."""

    async def close(self) -> None:
        """Release connections and file handles."""

    def _qualified(self, name: str) -> str:
        """Apply the configured namespace prefix to a store name."""
        return f"{self._prefix}_{name}" if self._prefix else name
