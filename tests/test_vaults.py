"""Tests for vault router endpoints."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from edv.main import app
from edv.services.storage_service import StorageService


class TestVaultEndpoints:
    """Test suite for vault creation and lookup."""

    @pytest.fixture(autouse=True)
    def setup(self):
        """Fresh in-memory storage for each test."""
        asyncio.run(StorageService.initialize(database_type="mem"))
        yield
        asyncio.run(StorageService.close())

    @pytest.fixture
    def client(self):
        """Create test client."""
        return TestClient(app)

    # -------------------------------------------------------------------------
    # POST /encrypted-data-vaults - Create
    # -------------------------------------------------------------------------

    def test_create_vault_minimal(self, client):
        """Test creating a vault with only a referenceId."""
        response = client.post("/encrypted-data-vaults", json={"referenceId": "vault-1"})

        assert response.status_code == 201
        location = response.headers["location"]
        assert location.startswith("http://testserver/encrypted-data-vaults/")
        assert response.content == b""

    def test_create_vault_full(self, client):
        """Test creating a vault with every configuration field."""
        payload = {
            "sequence": 0,
            "controller": "did:example:123456789",
            "invoker": "did:example:123456789",
            "delegator": "did:example:123456789",
            "referenceId": "full-vault",
            "kek": {"id": "https://example.com/kms/12345", "type": "AesKeyWrappingKey2019"},
            "hmac": {"id": "https://example.com/kms/67891", "type": "Sha256HmacKey2019"},
        }

        response = client.post("/encrypted-data-vaults", json=payload)
        assert response.status_code == 201

        config = client.get(response.headers["location"]).json()
        assert config == payload

    def test_create_vault_ids_are_distinct(self, client):
        """Different referenceIds get different vault ids."""
        first = client.post("/encrypted-data-vaults", json={"referenceId": "a"})
        second = client.post("/encrypted-data-vaults", json={"referenceId": "b"})

        assert first.headers["location"] != second.headers["location"]

    def test_create_vault_duplicate_reference_id(self, client):
        """Test that a second vault with the same referenceId is rejected."""
        client.post("/encrypted-data-vaults", json={"referenceId": "taken"})

        response = client.post("/encrypted-data-vaults", json={"referenceId": "taken"})

        assert response.status_code == 409
        assert response.json()["detail"] == "Data vault creation failed: vault already exists"

    def test_create_vault_blank_reference_id(self, client):
        """Test that an empty or whitespace referenceId is rejected."""
        for reference_id in ["", "   "]:
            response = client.post("/encrypted-data-vaults", json={"referenceId": reference_id})
            assert response.status_code == 400
            assert "referenceId can't be blank" in response.json()["detail"]

    def test_create_vault_missing_reference_id(self, client):
        """Test that referenceId is required."""
        response = client.post("/encrypted-data-vaults", json={"controller": "did:example:1"})

        assert response.status_code == 422

    def test_create_vault_invalid_json(self, client):
        response = client.post(
            "/encrypted-data-vaults",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 422

    # -------------------------------------------------------------------------
    # GET /encrypted-data-vaults/{vault_id}
    # -------------------------------------------------------------------------

    def test_get_vault_configuration(self, client):
        response = client.post(
            "/encrypted-data-vaults",
            json={"referenceId": "cfg", "controller": "did:example:abc"},
        )
        vault_id = response.headers["location"].rsplit("/", 1)[-1]

        response = client.get(f"/encrypted-data-vaults/{vault_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["referenceId"] == "cfg"
        assert data["controller"] == "did:example:abc"
        assert data["sequence"] == 0
        assert "kek" not in data

    def test_get_vault_not_found(self, client):
        response = client.get("/encrypted-data-vaults/VJYHHJx4C8J9Fsgz7rZqSp")

        assert response.status_code == 404
        assert response.json()["detail"] == "specified vault does not exist"

    def test_registry_store_is_not_a_vault(self, client):
        """The internal configuration store can't be addressed as a vault."""
        response = client.get("/encrypted-data-vaults/data_vault_configurations/documents/1")

        assert response.status_code == 404

    # -------------------------------------------------------------------------
    # GET /encrypted-data-vaults/by-reference/{reference_id}
    # -------------------------------------------------------------------------

    def test_resolve_reference_id(self, client):
        response = client.post("/encrypted-data-vaults", json={"referenceId": "lookup-me"})
        location = response.headers["location"]

        response = client.get("/encrypted-data-vaults/by-reference/lookup-me")

        assert response.status_code == 200
        data = response.json()
        assert data["location"] == location
        assert location.endswith("/" + data["id"])

    def test_resolve_unknown_reference_id(self, client):
        response = client.get("/encrypted-data-vaults/by-reference/nobody")

        assert response.status_code == 404


class TestHealthEndpoints:
    """Test suite for the root and health endpoints."""

    @pytest.fixture
    def client(self):
        return TestClient(app)

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}
