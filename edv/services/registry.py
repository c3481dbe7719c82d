"""Vault registry: reference id -> vault id -> configuration.

Both mappings live in one internal store. Reference id pointers are keyed
``ref:<referenceId>``; configuration records are keyed by vault id.
Vault ids are base58 text, so the two key spaces cannot collide.
"""

import logging

from edv.errors import EDVError, ErrorKind, StorageError
from edv.models.vault import DataVaultConfiguration, DataVaultConfigurationMapping
from edv.storage.base import EDVProvider, EDVStore

logger = logging.getLogger(__name__)

CONFIG_STORE_NAME = "data_vault_configurations"
REFERENCE_ID_KEY_PREFIX = "ref:"


def _reference_key(reference_id: str) -> str:
    return f"{REFERENCE_ID_KEY_PREFIX}{reference_id}"


class VaultRegistry:
    """Persists vault configurations through the storage backend."""

    def __init__(self, store: EDVStore) -> None:
        self._store = store

    @classmethod
    async def open(cls, provider: EDVProvider) -> "VaultRegistry":
        """Open the registry store, creating it and its index if needed."""
        try:
            await provider.create_store(CONFIG_STORE_NAME)
            logger.info(f"Created vault registry store '{CONFIG_STORE_NAME}'")
        except StorageError as e:
            if e.kind is not ErrorKind.DUPLICATE_STORE:
                raise

        store = await provider.open_store(CONFIG_STORE_NAME)

        try:
            await store.create_reference_id_index()
        except StorageError as e:
            if e.kind is not ErrorKind.INDEXING_NOT_SUPPORTED:
                raise
            logger.debug("Storage backend does not support indexing; registry runs unindexed")

        return cls(store)

    async def store_data_vault_configuration(
        self, config: DataVaultConfiguration, vault_id: str
    ) -> None:
        """Record a new vault. Raises DUPLICATE_VAULT if the reference id is taken."""
        await self._check_duplicate_reference_id(config.reference_id)

        mapping = DataVaultConfigurationMapping(
            data_vault_configuration=config, vault_id=vault_id
        )

        # The pointer goes first and only if absent, so a concurrent attempt
        # with the same reference id loses here.
        try:
            await self._store.insert_value(
                _reference_key(config.reference_id), vault_id.encode("utf-8")
            )
        except StorageError as e:
            if e.kind is ErrorKind.DUPLICATE_VALUE:
                raise EDVError(
                    ErrorKind.DUPLICATE_VAULT, details={"referenceId": config.reference_id}
                ) from e
            raise

        await self._store.put_value(
            vault_id, mapping.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")
        )

    async def retrieve_data_vault_configuration(self, vault_id: str) -> DataVaultConfiguration:
        """Raises VAULT_NOT_FOUND if no vault is registered under vault_id."""
        try:
            raw = await self._store.get(vault_id)
        except StorageError as e:
            if e.kind is ErrorKind.VALUE_NOT_FOUND:
                raise EDVError(ErrorKind.VAULT_NOT_FOUND, details={"vaultId": vault_id}) from e
            raise

        return DataVaultConfigurationMapping.model_validate_json(raw).data_vault_configuration

    async def resolve_reference_id(self, reference_id: str) -> str:
        """Vault id registered for a reference id. Raises VAULT_NOT_FOUND."""
        try:
            raw = await self._store.get(_reference_key(reference_id))
        except StorageError as e:
            if e.kind is ErrorKind.VALUE_NOT_FOUND:
                raise EDVError(
                    ErrorKind.VAULT_NOT_FOUND, details={"referenceId": reference_id}
                ) from e
            raise
        return raw.decode("utf-8")

    async def _check_duplicate_reference_id(self, reference_id: str) -> None:
        try:
            await self._store.get(_reference_key(reference_id))
        except StorageError as e:
            if e.kind is ErrorKind.VALUE_NOT_FOUND:
                return
            raise
        raise EDVError(ErrorKind.DUPLICATE_VAULT, details={"referenceId": reference_id})
