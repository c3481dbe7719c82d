"""Durable file-backed storage backend.

Each store is one JSON file under the data directory:

    {
      "_meta": {"name": "<store name>", "indexes": ["EDV", ...]},
      "items": {"<key>": {"value": "<stored JSON text>", "attributes": [[name, value], ...]}}
    }

Files are rewritten atomically after every write. An inverted attribute
index is kept in memory; queries use it once the EDV index has been created
for the store and fall back to a full scan otherwise.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

from edv.errors import ErrorKind, StorageError
from edv.models.document import EncryptedDocument
from edv.models.query import Query
from edv.storage.base import Attributes, EDVProvider, EDVStore
from edv.storage.file_io_utils import atomic_write_json, list_store_files, load_json, store_path
from edv.storage.query import AttributeIndex, scan
from edv.storage.rwlock import AsyncRWLock

logger = logging.getLogger(__name__)

EDV_INDEX = "EDV"
DOCUMENT_ID_INDEX = "EncryptedDocumentID"
REFERENCE_ID_INDEX = "ReferenceID"


class _Entry:
    __slots__ = ("value", "attributes")

    def __init__(self, value: bytes, attributes: Attributes) -> None:
        self.value = value
        self.attributes = tuple(attributes)


class _FileNamespace:
    """In-memory image of one store file plus the lock shared by its handles."""

    def __init__(self, name: str, path: Path) -> None:
        self.name = name
        self.path = path
        self.entries: dict[str, _Entry] = {}
        self.indexes: set[str] = set()
        self.attribute_index = AttributeIndex()
        self.lock = AsyncRWLock()

    @classmethod
    def from_file(cls, path: Path) -> "_FileNamespace":
        raw_data = load_json(path)
        meta = raw_data.get("_meta", {})
        namespace = cls(meta["name"], path)
        namespace.indexes = set(meta.get("indexes", []))
        for key, item in raw_data.get("items", {}).items():
            entry = _Entry(item["value"].encode("utf-8"), [tuple(p) for p in item.get("attributes", [])])
            namespace.entries[key] = entry
            namespace.attribute_index.add(key, entry.attributes)
        return namespace

    def save(self) -> None:
        data = {
            "_meta": {"name": self.name, "indexes": sorted(self.indexes)},
            "items": {
                key: {
                    "value": entry.value.decode("utf-8"),
                    "attributes": [list(pair) for pair in entry.attributes],
                }
                for key, entry in self.entries.items()
            },
        }
        atomic_write_json(self.path, data)

    def apply(self, changes: dict[str, Optional[_Entry]]) -> None:
        """Apply {key: entry or None (delete)} and persist; roll back if the write fails."""
        previous = {key: self.entries.get(key) for key in changes}
        self._set(changes)
        try:
            self.save()
        except Exception:
            self._set(previous)
            raise

    def _set(self, changes: dict[str, Optional[_Entry]]) -> None:
        for key, entry in changes.items():
            if entry is None:
                self.entries.pop(key, None)
                self.attribute_index.remove(key)
            else:
                self.entries[key] = entry
                self.attribute_index.add(key, entry.attributes)


class FileEDVStore(EDVStore):
    """Handle to one file-backed store."""

    def __init__(self, name: str, namespace: _FileNamespace) -> None:
        super().__init__(name)
        self._ns = namespace

    async def _write(
        self, key: str, value: bytes, attributes: Attributes, overwrite: bool
    ) -> None:
        async with self._ns.lock.write():
            if not overwrite and key in self._ns.entries:
                raise StorageError(ErrorKind.DUPLICATE_VALUE, details={"key": key})
            self._ns.apply({key: _Entry(value, attributes)})

    async def get(self, key: str) -> bytes:
        async with self._ns.lock.read():
            entry = self._ns.entries.get(key)
        if entry is None:
            raise StorageError(ErrorKind.VALUE_NOT_FOUND, details={"key": key})
        return entry.value

    async def get_all(self) -> list[bytes]:
        async with self._ns.lock.read():
            return [entry.value for entry in self._ns.entries.values()]

    async def delete(self, key: str) -> None:
        async with self._ns.lock.write():
            if key in self._ns.entries:
                self._ns.apply({key: None})

    async def upsert_bulk(self, documents: Optional[Sequence[EncryptedDocument]]) -> None:
        """All-or-nothing: one write lock and one file write for the whole batch."""
        if documents is None:
            raise StorageError(ErrorKind.MISSING_DOCUMENTS)
        if not documents:
            return
        changes = {
            document.id: _Entry(document.to_bytes(), document.attribute_pairs())
            for document in documents
        }
        async with self._ns.lock.write():
            self._ns.apply(changes)

    async def create_edv_index(self) -> None:
        await self._add_index(EDV_INDEX)

    async def create_encrypted_doc_id_index(self) -> None:
        await self._add_index(DOCUMENT_ID_INDEX)

    async def create_reference_id_index(self) -> None:
        await self._add_index(REFERENCE_ID_INDEX)

    async def query(self, query: Query) -> list[str]:
        constraints = query.constraints()
        async with self._ns.lock.read():
            if EDV_INDEX in self._ns.indexes:
                return self._ns.attribute_index.search(constraints)
            logger.debug(f"Store '{self.name}' has no EDV index, scanning all documents")
            return scan(
                constraints,
                ((key, entry.attributes) for key, entry in self._ns.entries.items()),
            )

    async def _add_index(self, index_name: str) -> None:
        async with self._ns.lock.write():
            if index_name in self._ns.indexes:
                return
            self._ns.indexes.add(index_name)
            try:
                self._ns.save()
            except Exception:
                self._ns.indexes.discard(index_name)
                raise


class FileEDVProvider(EDVProvider):
    """Provider of JSON-file stores rooted at data_dir."""

    def __init__(self, data_dir: Path, prefix: str = "") -> None:
        super().__init__(prefix)
        self._data_dir = Path(data_dir)
        self._namespaces: dict[str, _FileNamespace] = {}
        self._lock = AsyncRWLock()

    async def load(self) -> None:
        """Load every store file found in data_dir."""
        async with self._lock.write():
            self._namespaces.clear()
            for path in list_store_files(self._data_dir):
                namespace = _FileNamespace.from_file(path)
                self._namespaces[namespace.name] = namespace
        logger.info(f"Loaded {len(self._namespaces)} stores from {self._data_dir}")

    async def create_store(self, name: str) -> None:
        qualified = self._qualified(name)
        async with self._lock.write():
            if qualified in self._namespaces:
                raise StorageError(ErrorKind.DUPLICATE_STORE, details={"store": name})
            path = store_path(self._data_dir, qualified)
            if path.exists():
                raise StorageError(ErrorKind.DUPLICATE_STORE, details={"store": name})
            namespace = _FileNamespace(qualified, path)
            namespace.save()
            self._namespaces[qualified] = namespace
        logger.debug(f"Created file store '{qualified}' at {path}")

    async def open_store(self, name: str) -> FileEDVStore:
        async with self._lock.read():
            namespace = self._namespaces.get(self._qualified(name))
        if namespace is None:
            raise StorageError(ErrorKind.STORE_NOT_FOUND, details={"store": name})
        return FileEDVStore(name, namespace)

    async def delete_store(self, name: str) -> None:
        async with self._lock.write():
            namespace = self._namespaces.pop(self._qualified(name), None)
            if namespace is not None:
                namespace.path.unlink(missing_ok=True)

    def __repr__(self) -> str:
        return f"FileEDVProvider(data_dir={str(self._data_dir)!r}, stores={len(self._namespaces)})"
