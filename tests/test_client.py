"""Tests for the Python API client, run against the app in-process."""

import asyncio
import os

import base58
import httpx
import pytest
from fastapi.testclient import TestClient

from client import EDVClient
from edv.main import app
from edv.services.storage_service import StorageService


def make_document(doc_id: str | None = None, color: str = "red") -> dict:
    return {
        "id": doc_id or base58.b58encode(os.urandom(16)).decode("ascii"),
        "indexed": [{"attributes": [{"name": "color", "value": color}]}],
        "jwe": {"ciphertext": "c"},
    }


class TestEDVClient:
    """Test suite for EDVClient."""

    @pytest.fixture(autouse=True)
    def setup(self, tmp_path):
        asyncio.run(StorageService.initialize(database_type="filedb", data_dir=tmp_path / "test_data"))
        yield
        asyncio.run(StorageService.close())

    @pytest.fixture
    def edv(self):
        return EDVClient(http_client=TestClient(app))

    def test_health_check(self, edv):
        assert edv.health_check() is True

    def test_vault_round_trip(self, edv):
        vault_id = edv.create_vault("client-vault", controller="did:example:1")

        assert edv.get_vault(vault_id)["controller"] == "did:example:1"
        assert edv.find_vault("client-vault") == vault_id

    def test_duplicate_vault_raises(self, edv):
        edv.create_vault("twice")

        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            edv.create_vault("twice")
        assert exc_info.value.response.status_code == 409

    def test_document_lifecycle(self, edv):
        vault_id = edv.create_vault("docs")
        doc = make_document()

        location = edv.create_document(vault_id, doc)
        assert location.endswith(f"/documents/{doc['id']}")
        assert edv.get_document(vault_id, doc["id"])["jwe"] == {"ciphertext": "c"}

        edv.update_document(vault_id, make_document(doc["id"], color="blue"))
        assert edv.get_document(vault_id, doc["id"])["indexed"][0]["attributes"][0]["value"] == "blue"

        edv.delete_document(vault_id, doc["id"])
        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            edv.get_document(vault_id, doc["id"])
        assert exc_info.value.response.status_code == 404

    def test_upsert_and_query(self, edv):
        vault_id = edv.create_vault("search")
        red, blue, green = make_document(color="red"), make_document(color="blue"), make_document(color="green")

        result = edv.upsert_documents(vault_id, [red, blue, green])
        assert result["upserted_count"] == 3

        urls = edv.query(vault_id, {"color": ["red", "blue"]})
        assert sorted(url.rsplit("/", 1)[-1] for url in urls) == sorted([red["id"], blue["id"]])
        assert edv.query(vault_id, {"color": "purple"}) == []

    def test_log_spec(self, edv):
        original = edv.get_log_spec()
        try:
            edv.set_log_spec("storage=debug:info")
            assert "storage=debug" in edv.get_log_spec().split(":")
        finally:
            edv.set_log_spec(original)
