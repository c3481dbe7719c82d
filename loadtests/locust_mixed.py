"""
Mixed workload load test for the EDV API.

Simulates realistic traffic with two user types:
- ReadHeavyUser: Mostly reading documents and querying (weight=5)
- WriteUser: Creating vaults and documents (weight=1)

This tests how reads and writes interact under the per-store RWLock.
Queries only succeed against a backend with query support (filedb, couchdb);
against the in-memory backend they return 501, which is counted as expected.

Usage:
    locust -f loadtests/locust_mixed.py --host=http://localhost:8000

Run only readers:
    locust -f loadtests/locust_mixed.py --host=http://localhost:8000 ReadHeavyUser
"""

import random
from locust import HttpUser, task, between

import sys
sys.path.insert(0, ".")
from loadtests.common import random_attribute, random_document, random_id


class SharedState:
    """Shared state across all user types."""

    vault_ids: list[str] = []
    document_ids: list[tuple[str, str]] = []  # (vault_id, doc_id)


def register_vault(client) -> str | None:
    """Create a vault and remember its id."""
    payload = {"referenceId": random_id("loadtest-")}
    with client.post(
        "/encrypted-data-vaults", json=payload, catch_response=True
    ) as response:
        if response.status_code == 201:
            vault_id = response.headers["location"].rsplit("/", 1)[-1]
            SharedState.vault_ids.append(vault_id)
            response.success()
            return vault_id
        if response.status_code == 409:
            response.success()  # Reference id collision, not a failure
        else:
            response.failure(f"Status {response.status_code}")
    return None


class ReadHeavyUser(HttpUser):
    """User that mostly reads documents and runs queries."""

    weight = 5
    wait_time = between(0.1, 0.5)

    def on_start(self):
        if not SharedState.vault_ids:
            register_vault(self.client)

    @task(6)
    def read_document(self):
        """Read a document created by a writer."""
        if not SharedState.document_ids:
            return

        vault_id, doc_id = random.choice(SharedState.document_ids)
        with self.client.get(
            f"/encrypted-data-vaults/{vault_id}/documents/{doc_id}",
            name="/encrypted-data-vaults/{vault_id}/documents/{doc_id}",
            catch_response=True,
        ) as response:
            if response.status_code in (200, 404):
                response.success()
            else:
                response.failure(f"Status {response.status_code}")

    @task(3)
    def query_vault(self):
        """Query a vault by one random attribute."""
        if not SharedState.vault_ids:
            return

        vault_id = random.choice(SharedState.vault_ids)
        with self.client.post(
            f"/encrypted-data-vaults/{vault_id}/queries",
            json={"attributes": [random_attribute()]},
            name="/encrypted-data-vaults/{vault_id}/queries",
            catch_response=True,
        ) as response:
            if response.status_code in (200, 501):
                response.success()
            else:
                response.failure(f"Status {response.status_code}")

    @task(1)
    def health(self):
        self.client.get("/health")


class WriteUser(HttpUser):
    """User that creates vaults and documents."""

    weight = 1
    wait_time = between(0.5, 2)

    @task(1)
    def create_vault(self):
        register_vault(self.client)

    @task(8)
    def create_document(self):
        """Create a document in an existing vault."""
        if not SharedState.vault_ids:
            return

        vault_id = random.choice(SharedState.vault_ids)
        document = random_document()
        with self.client.post(
            f"/encrypted-data-vaults/{vault_id}/documents",
            json=document,
            name="/encrypted-data-vaults/{vault_id}/documents",
            catch_response=True,
        ) as response:
            if response.status_code == 201:
                SharedState.document_ids.append((vault_id, document["id"]))
                response.success()
            else:
                response.failure(f"Status {response.status_code}")

    @task(2)
    def upsert_batch(self):
        """Create or replace several documents in one request."""
        if not SharedState.vault_ids:
            return

        vault_id = random.choice(SharedState.vault_ids)
        batch_size = random.choice([5, 10, 20])
        documents = [random_document() for _ in range(batch_size)]
        with self.client.post(
            f"/encrypted-data-vaults/{vault_id}/batch",
            json={"documents": documents},
            name=f"/encrypted-data-vaults/{{vault_id}}/batch (n={batch_size})",
            catch_response=True,
        ) as response:
            if response.status_code == 200:
                SharedState.document_ids.extend((vault_id, d["id"]) for d in documents)
                response.success()
            else:
                response.failure(f"Status {response.status_code}")
