"""Vault collection: the vault and document lifecycle rules.

Composes a storage provider and the vault registry. Storage errors are
translated into vault-level kinds wherever there is enough context to do so
(``STORE_NOT_FOUND`` -> ``VAULT_NOT_FOUND``, ``VALUE_NOT_FOUND`` ->
``DOCUMENT_NOT_FOUND``, duplicate store/value -> duplicate vault/document);
any other error propagates unchanged.
"""

import logging
from typing import Sequence

from edv.errors import EDVError, ErrorKind, StorageError
from edv.models.document import EncryptedDocument
from edv.models.query import Query
from edv.models.vault import DataVaultConfiguration
from edv.services.ids import check_base58_encoded_128_bit_value, generate_vault_id
from edv.services.registry import CONFIG_STORE_NAME, VaultRegistry
from edv.storage.base import EDVProvider, EDVStore

logger = logging.getLogger(__name__)


class VaultCollection:
    """Creates vaults and manages the documents inside them."""

    def __init__(self, provider: EDVProvider, registry: VaultRegistry) -> None:
        self._provider = provider
        self._registry = registry

    @property
    def registry(self) -> VaultRegistry:
        return self._registry

    # -------------------------------------------------------------------------
    # Vaults
    # -------------------------------------------------------------------------

    async def create_data_vault(self, config: DataVaultConfiguration) -> str:
        """Allocate, index and register a new vault. Returns the vault id."""
        if not config.reference_id.strip():
            raise EDVError(ErrorKind.BLANK_REFERENCE_ID)

        vault_id = generate_vault_id()

        try:
            await self._provider.create_store(vault_id)
        except StorageError as e:
            if e.kind is ErrorKind.DUPLICATE_STORE:
                raise EDVError(ErrorKind.DUPLICATE_VAULT, details={"vaultId": vault_id}) from e
            raise

        try:
            store = await self._provider.open_store(vault_id)
            await self._create_indexes(store)
            await self._registry.store_data_vault_configuration(config, vault_id)
        except Exception:
            # Drop the store allocated above so it does not linger unregistered
            await self._provider.delete_store(vault_id)
            raise

        logger.info(f"Vault created: referenceId='{config.reference_id}' id={vault_id}")
        return vault_id

    async def get_data_vault_configuration(self, vault_id: str) -> DataVaultConfiguration:
        return await self._registry.retrieve_data_vault_configuration(vault_id)

    async def _create_indexes(self, store: EDVStore) -> None:
        """Best-effort index creation; a backend without indexing still works."""
        try:
            await store.create_edv_index()
            await store.create_encrypted_doc_id_index()
        except StorageError as e:
            if e.kind is not ErrorKind.INDEXING_NOT_SUPPORTED:
                raise
            logger.debug(f"Indexing not supported, vault '{store.name}' runs unindexed")

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    async def create_document(self, vault_id: str, document: EncryptedDocument) -> None:
        """Store a new document. Never overwrites an existing one."""
        store = await self._open_vault(vault_id)

        check_base58_encoded_128_bit_value(document.id)

        try:
            await store.get(document.id)
        except StorageError as e:
            if e.kind is not ErrorKind.VALUE_NOT_FOUND:
                raise
        else:
            raise EDVError(ErrorKind.DUPLICATE_DOCUMENT, details={"id": document.id})

        try:
            await store.insert(document)
        except StorageError as e:
            if e.kind is ErrorKind.DUPLICATE_VALUE:
                raise EDVError(ErrorKind.DUPLICATE_DOCUMENT, details={"id": document.id}) from e
            raise

        logger.debug(f"Document created: vault={vault_id} id={document.id}")

    async def read_document(self, vault_id: str, doc_id: str) -> bytes:
        """Stored bytes of a document."""
        store = await self._open_vault(vault_id)
        return await self._get_document(store, doc_id)

    async def update_document(
        self, vault_id: str, doc_id: str, document: EncryptedDocument
    ) -> None:
        """Replace an existing document."""
        store = await self._open_vault(vault_id)

        if document.id != doc_id:
            raise EDVError(
                ErrorKind.MISMATCHED_DOCUMENT_ID, details={"path": doc_id, "body": document.id}
            )
        check_base58_encoded_128_bit_value(document.id)

        await self._get_document(store, doc_id)
        await store.update(document)
        logger.debug(f"Document updated: vault={vault_id} id={doc_id}")

    async def delete_document(self, vault_id: str, doc_id: str) -> None:
        store = await self._open_vault(vault_id)
        await self._get_document(store, doc_id)
        await store.delete(doc_id)
        logger.debug(f"Document deleted: vault={vault_id} id={doc_id}")

    async def upsert_documents(
        self, vault_id: str, documents: Sequence[EncryptedDocument]
    ) -> int:
        """Create or replace a batch of documents. Returns the number written."""
        store = await self._open_vault(vault_id)

        if documents is not None:
            for document in documents:
                check_base58_encoded_128_bit_value(document.id)

        await store.upsert_bulk(documents)
        count = len(documents)
        logger.debug(f"Documents upserted: vault={vault_id} count={count}")
        return count

    async def query_vault(self, vault_id: str, query: Query) -> list[str]:
        """Ids of the vault's documents matching the query (possibly empty)."""
        store = await self._open_vault(vault_id)
        return await store.query(query)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _open_vault(self, vault_id: str) -> EDVStore:
        if vault_id == CONFIG_STORE_NAME:
            # The registry shares the provider but is not a vault
            raise EDVError(ErrorKind.VAULT_NOT_FOUND, details={"vaultId": vault_id})
        try:
            return await self._provider.open_store(vault_id)
        except StorageError as e:
            if e.kind is ErrorKind.STORE_NOT_FOUND:
                raise EDVError(ErrorKind.VAULT_NOT_FOUND, details={"vaultId": vault_id}) from e
            raise

    async def _get_document(self, store: EDVStore, doc_id: str) -> bytes:
        try:
            return await store.get(doc_id)
        except StorageError as e:
            if e.kind is ErrorKind.VALUE_NOT_FOUND:
                raise EDVError(ErrorKind.DOCUMENT_NOT_FOUND, details={"id": doc_id}) from e
            raise
