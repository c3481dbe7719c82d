"""Tests for vault and document lifecycle rules, independent of HTTP."""

import asyncio
import os
from unittest.mock import patch

import base58
import pytest

from edv.errors import EDVError, ErrorKind
from edv.models.document import EncryptedDocument
from edv.models.query import Query
from edv.models.vault import DataVaultConfiguration
from edv.services.registry import CONFIG_STORE_NAME, VaultRegistry
from edv.services.vault_collection import VaultCollection
from edv.storage.filedb import FileEDVProvider
from edv.storage.memory import MemEDVProvider, MemEDVStore


def new_doc_id() -> str:
    return base58.b58encode(os.urandom(16)).decode("ascii")


def make_document(doc_id: str | None = None, **attributes: str) -> EncryptedDocument:
    return EncryptedDocument.model_validate({
        "id": doc_id or new_doc_id(),
        "indexed": [{"attributes": [{"name": n, "value": v} for n, v in attributes.items()]}],
        "jwe": {"ciphertext": "c"},
    })


async def open_collection(provider) -> VaultCollection:
    await provider.load()
    return VaultCollection(provider, await VaultRegistry.open(provider))


class TestVaultCreation:
    """Test suite for create_data_vault and the registry."""

    def test_create_and_get_configuration(self):
        async def scenario():
            collection = await open_collection(MemEDVProvider())
            config = DataVaultConfiguration(reference_id="ref-1", controller="did:example:1")
            vault_id = await collection.create_data_vault(config)
            return vault_id, await collection.get_data_vault_configuration(vault_id)

        vault_id, config = asyncio.run(scenario())

        assert len(base58.b58decode(vault_id)) == 16
        assert config.reference_id == "ref-1"
        assert config.controller == "did:example:1"

    def test_resolve_reference_id(self):
        async def scenario():
            collection = await open_collection(MemEDVProvider())
            vault_id = await collection.create_data_vault(DataVaultConfiguration(reference_id="named"))
            return vault_id, await collection.registry.resolve_reference_id("named")

        vault_id, resolved = asyncio.run(scenario())

        assert resolved == vault_id

    def test_blank_reference_id(self):
        async def scenario():
            collection = await open_collection(MemEDVProvider())
            await collection.create_data_vault(DataVaultConfiguration(reference_id=" \t"))

        with pytest.raises(EDVError) as exc_info:
            asyncio.run(scenario())
        assert exc_info.value.kind is ErrorKind.BLANK_REFERENCE_ID

    def test_unknown_vault(self):
        async def scenario():
            collection = await open_collection(MemEDVProvider())
            await collection.get_data_vault_configuration(new_doc_id())

        with pytest.raises(EDVError) as exc_info:
            asyncio.run(scenario())
        assert exc_info.value.kind is ErrorKind.VAULT_NOT_FOUND

    def test_concurrent_duplicate_reference_id(self):
        """Exactly one of several racing creations with one referenceId wins."""
        provider = MemEDVProvider()

        async def scenario():
            collection = await open_collection(provider)
            return await asyncio.gather(
                *(collection.create_data_vault(DataVaultConfiguration(reference_id="race")) for _ in range(5)),
                return_exceptions=True,
            )

        results = asyncio.run(scenario())

        winners = [r for r in results if isinstance(r, str)]
        losers = [r for r in results if isinstance(r, EDVError)]
        assert len(winners) == 1
        assert len(losers) == 4
        assert all(e.kind is ErrorKind.DUPLICATE_VAULT for e in losers)

    def test_losing_creation_leaves_no_store(self):
        provider = MemEDVProvider()

        async def scenario():
            collection = await open_collection(provider)
            winner = await collection.create_data_vault(DataVaultConfiguration(reference_id="once"))
            with pytest.raises(EDVError):
                await collection.create_data_vault(DataVaultConfiguration(reference_id="once"))
            return winner

        asyncio.run(scenario())

        # registry store plus the one vault
        assert len(provider._namespaces) == 2

    def test_failed_registration_leaves_no_store(self):
        provider = MemEDVProvider()

        async def scenario():
            collection = await open_collection(provider)
            with patch.object(
                VaultRegistry, "store_data_vault_configuration", side_effect=OSError("disk full")
            ):
                await collection.create_data_vault(DataVaultConfiguration(reference_id="io"))

        with pytest.raises(OSError):
            asyncio.run(scenario())
        assert list(provider._namespaces) == [CONFIG_STORE_NAME]

    def test_failed_index_creation_leaves_no_store(self):
        provider = MemEDVProvider()

        async def scenario():
            collection = await open_collection(provider)
            with patch.object(MemEDVStore, "create_edv_index", side_effect=RuntimeError("boom")):
                await collection.create_data_vault(DataVaultConfiguration(reference_id="idx"))

        with pytest.raises(RuntimeError):
            asyncio.run(scenario())
        assert list(provider._namespaces) == [CONFIG_STORE_NAME]

    def test_registry_survives_restart(self, tmp_path):
        async def create():
            collection = await open_collection(FileEDVProvider(tmp_path))
            return await collection.create_data_vault(DataVaultConfiguration(reference_id="durable"))

        async def reopen(vault_id):
            collection = await open_collection(FileEDVProvider(tmp_path))
            config = await collection.get_data_vault_configuration(vault_id)
            with pytest.raises(EDVError) as exc_info:
                await collection.create_data_vault(DataVaultConfiguration(reference_id="durable"))
            return config, exc_info.value

        vault_id = asyncio.run(create())
        config, error = asyncio.run(reopen(vault_id))

        assert config.reference_id == "durable"
        assert error.kind is ErrorKind.DUPLICATE_VAULT


class TestDocumentLifecycle:
    """Test suite for document operations and error translation."""

    def run(self, scenario):
        async def wrapper():
            collection = await open_collection(MemEDVProvider())
            vault_id = await collection.create_data_vault(DataVaultConfiguration(reference_id="docs"))
            return await scenario(collection, vault_id)

        return asyncio.run(wrapper())

    def test_create_and_read(self):
        doc = make_document(a="1")

        async def scenario(collection, vault_id):
            await collection.create_document(vault_id, doc)
            return await collection.read_document(vault_id, doc.id)

        assert self.run(scenario) == doc.to_bytes()

    def test_duplicate_document(self):
        doc = make_document()

        async def scenario(collection, vault_id):
            await collection.create_document(vault_id, doc)
            await collection.create_document(vault_id, doc)

        with pytest.raises(EDVError) as exc_info:
            self.run(scenario)
        assert exc_info.value.kind is ErrorKind.DUPLICATE_DOCUMENT

    def test_concurrent_duplicate_document(self):
        doc_id = new_doc_id()

        async def scenario(collection, vault_id):
            results = await asyncio.gather(
                *(collection.create_document(vault_id, make_document(doc_id, n=str(i))) for i in range(5)),
                return_exceptions=True,
            )
            return results, await collection.read_document(vault_id, doc_id)

        results, stored = self.run(scenario)

        assert results.count(None) == 1
        errors = [r for r in results if r is not None]
        assert all(isinstance(e, EDVError) and e.kind is ErrorKind.DUPLICATE_DOCUMENT for e in errors)
        assert stored == make_document(doc_id, n=str(results.index(None))).to_bytes()

    def test_vault_not_found(self):
        async def scenario(collection, vault_id):
            await collection.create_document(new_doc_id(), make_document())

        with pytest.raises(EDVError) as exc_info:
            self.run(scenario)
        assert exc_info.value.kind is ErrorKind.VAULT_NOT_FOUND

    def test_registry_store_is_not_a_vault(self):
        async def scenario(collection, vault_id):
            await collection.read_document(CONFIG_STORE_NAME, "ref:docs")

        with pytest.raises(EDVError) as exc_info:
            self.run(scenario)
        assert exc_info.value.kind is ErrorKind.VAULT_NOT_FOUND

    def test_document_not_found(self):
        async def scenario(collection, vault_id):
            await collection.read_document(vault_id, new_doc_id())

        with pytest.raises(EDVError) as exc_info:
            self.run(scenario)
        assert exc_info.value.kind is ErrorKind.DOCUMENT_NOT_FOUND

    def test_vault_checked_before_document_id(self):
        """An unknown vault is reported even when the document id is invalid too."""
        async def scenario(collection, vault_id):
            await collection.create_document(new_doc_id(), make_document("0OIl"))

        with pytest.raises(EDVError) as exc_info:
            self.run(scenario)
        assert exc_info.value.kind is ErrorKind.VAULT_NOT_FOUND

    def test_update_mismatched_id(self):
        doc = make_document()

        async def scenario(collection, vault_id):
            await collection.create_document(vault_id, doc)
            await collection.update_document(vault_id, doc.id, make_document())

        with pytest.raises(EDVError) as exc_info:
            self.run(scenario)
        assert exc_info.value.kind is ErrorKind.MISMATCHED_DOCUMENT_ID

    def test_update_and_delete(self):
        doc = make_document(a="1")
        updated = make_document(doc.id, a="2")

        async def scenario(collection, vault_id):
            await collection.create_document(vault_id, doc)
            await collection.update_document(vault_id, doc.id, updated)
            stored = await collection.read_document(vault_id, doc.id)
            await collection.delete_document(vault_id, doc.id)
            with pytest.raises(EDVError) as exc_info:
                await collection.read_document(vault_id, doc.id)
            return stored, exc_info.value.kind

        stored, kind = self.run(scenario)

        assert stored == updated.to_bytes()
        assert kind is ErrorKind.DOCUMENT_NOT_FOUND

    def test_upsert_documents_none(self):
        async def scenario(collection, vault_id):
            await collection.upsert_documents(vault_id, None)

        with pytest.raises(EDVError) as exc_info:
            self.run(scenario)
        assert exc_info.value.kind is ErrorKind.MISSING_DOCUMENTS

    def test_upsert_documents_count(self):
        docs = [make_document() for _ in range(3)]

        async def scenario(collection, vault_id):
            return await collection.upsert_documents(vault_id, docs)

        assert self.run(scenario) == 3

    def test_query_unsupported_on_memory(self):
        async def scenario(collection, vault_id):
            await collection.query_vault(vault_id, Query(index="a", equals="1"))

        with pytest.raises(EDVError) as exc_info:
            self.run(scenario)
        assert exc_info.value.kind is ErrorKind.QUERYING_NOT_SUPPORTED
