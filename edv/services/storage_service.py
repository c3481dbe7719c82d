"""Storage service - process-wide access to the configured backend."""

import logging
from pathlib import Path
from typing import Callable, Optional

import httpx

from edv.config import settings
from edv.models.enums import DatabaseType
from edv.services.registry import VaultRegistry
from edv.services.vault_collection import VaultCollection
from edv.storage.base import EDVProvider
from edv.storage.couchdb import CouchDBEDVProvider
from edv.storage.filedb import FileEDVProvider
from edv.storage.memory import MemEDVProvider

logger = logging.getLogger(__name__)


def _mem_provider(**options) -> EDVProvider:
    return MemEDVProvider(prefix=options["prefix"])


def _filedb_provider(**options) -> EDVProvider:
    return FileEDVProvider(Path(options["data_dir"]), prefix=options["prefix"])


def _couchdb_provider(**options) -> EDVProvider:
    if not options["url"]:
        raise ValueError("database_url is required for the couchdb backend")
    return CouchDBEDVProvider(
        options["url"],
        prefix=options["prefix"],
        timeout=options["timeout"],
        transport=options["transport"],
    )


PROVIDER_FACTORIES: dict[DatabaseType, Callable[..., EDVProvider]] = {
    DatabaseType.MEM: _mem_provider,
    DatabaseType.FILEDB: _filedb_provider,
    DatabaseType.COUCHDB: _couchdb_provider,
}


class StorageService:
    """Singleton holding the storage provider and the vault collection.

    Initialize at app startup via `await StorageService.initialize()`.
    """

    _provider: EDVProvider | None = None
    _collection: VaultCollection | None = None
    _database_type: DatabaseType | None = None

    @classmethod
    async def initialize(
        cls,
        database_type: DatabaseType | str | None = None,
        database_url: Optional[str] = None,
        database_prefix: Optional[str] = None,
        data_dir: str | Path | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Create the configured provider, load it and open the vault registry.

        Arguments left as None fall back to settings.
        """
        if cls._provider is not None:
            await cls.close()

        db_type = DatabaseType(database_type or settings.database_type)
        provider = PROVIDER_FACTORIES[db_type](
            url=database_url or settings.database_url,
            prefix=settings.database_prefix if database_prefix is None else database_prefix,
            timeout=settings.database_timeout,
            data_dir=data_dir or settings.data_dir,
            transport=transport,
        )
        logger.info(f"Using storage backend: {provider!r}")

        await provider.load()
        registry = await VaultRegistry.open(provider)

        cls._provider = provider
        cls._collection = VaultCollection(provider, registry)
        cls._database_type = db_type

    @classmethod
    def collection(cls) -> VaultCollection:
        """Get the vault collection."""
        if cls._collection is None:
            raise RuntimeError("StorageService not initialized")
        return cls._collection

    @classmethod
    def provider(cls) -> EDVProvider:
        """Get the storage provider."""
        if cls._provider is None:
            raise RuntimeError("StorageService not initialized")
        return cls._provider

    @classmethod
    def get_stats(cls) -> dict:
        """Describe the active backend."""
        return {
            "database_type": cls._database_type.value if cls._database_type else None,
            "provider": repr(cls._provider) if cls._provider else None,
        }

    @classmethod
    async def close(cls) -> None:
        """Close the provider and forget it. Useful for testing."""
        provider = cls._provider
        cls._provider = None
        cls._collection = None
        cls._database_type = None
        if provider is not None:
            await provider.close()
