"""EDV API Client for use in notebooks and scripts."""

import httpx
from typing import Any
from urllib.parse import quote


class EDVClient:
    """Client for interacting with the Encrypted Data Vault API.

    Documents are sent and returned as already-encrypted JSON; the client
    never looks inside them.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ):
        self.base_url = base_url
        self.client = http_client or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self):
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    def health_check(self) -> bool:
        """Check if the server is running. Returns True if healthy."""
        try:
            response = self.client.get("/health")
            return response.status_code == 200
        except httpx.ConnectError:
            return False

    # -------------------------------------------------------------------------
    # Vaults
    # -------------------------------------------------------------------------

    def create_vault(self, reference_id: str, **config: Any) -> str:
        """Create a vault. Returns the vault id taken from the Location header.

        Args:
            reference_id: Client-chosen unique name for the vault
            **config: Other DataVaultConfiguration fields (controller, kek, hmac, ...)
        """
        data = {"referenceId": reference_id, **config}
        response = self.client.post("/encrypted-data-vaults", json=data)
        response.raise_for_status()
        return _last_path_segment(response.headers["location"])

    def get_vault(self, vault_id: str) -> dict[str, Any]:
        """Get a vault's configuration."""
        response = self.client.get(f"/encrypted-data-vaults/{quote(vault_id, safe='')}")
        response.raise_for_status()
        return response.json()

    def find_vault(self, reference_id: str) -> str:
        """Get the id of the vault registered under reference_id."""
        response = self.client.get(
            f"/encrypted-data-vaults/by-reference/{quote(reference_id, safe='')}"
        )
        response.raise_for_status()
        return response.json()["id"]

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    def create_document(self, vault_id: str, document: dict[str, Any]) -> str:
        """Store a new encrypted document. Returns its URL."""
        response = self.client.post(f"{_vault_path(vault_id)}/documents", json=document)
        response.raise_for_status()
        return response.headers["location"]

    def get_document(self, vault_id: str, doc_id: str) -> dict[str, Any]:
        """Get a document by id."""
        response = self.client.get(_document_path(vault_id, doc_id))
        response.raise_for_status()
        return response.json()

    def update_document(self, vault_id: str, document: dict[str, Any]) -> None:
        """Replace an existing document (matched by document['id'])."""
        response = self.client.put(_document_path(vault_id, document["id"]), json=document)
        response.raise_for_status()

    def delete_document(self, vault_id: str, doc_id: str) -> None:
        """Delete a document."""
        response = self.client.delete(_document_path(vault_id, doc_id))
        response.raise_for_status()

    def upsert_documents(
        self, vault_id: str, documents: list[dict[str, Any]]
    ) -> dict[str, Any]:
        """Create or replace several documents at once (up to 500)."""
        response = self.client.post(
            f"{_vault_path(vault_id)}/batch", json={"documents": documents}
        )
        response.raise_for_status()
        return response.json()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def query(self, vault_id: str, attributes: dict[str, str | list[str]]) -> list[str]:
        """Find documents by indexed attributes. Returns document URLs.

        Each name must match; a list of values means "any of these".
        """
        pairs = []
        for name, values in attributes.items():
            for value in [values] if isinstance(values, str) else values:
                pairs.append({"name": name, "value": value})
        response = self.client.post(
            f"{_vault_path(vault_id)}/queries", json={"attributes": pairs}
        )
        response.raise_for_status()
        return response.json()

    # -------------------------------------------------------------------------
    # Log levels
    # -------------------------------------------------------------------------

    def get_log_spec(self) -> str:
        response = self.client.get("/encrypted-data-vaults/logspec")
        response.raise_for_status()
        return response.text

    def set_log_spec(self, spec: str) -> None:
        response = self.client.put("/encrypted-data-vaults/logspec", json={"spec": spec})
        response.raise_for_status()


def _vault_path(vault_id: str) -> str:
    return f"/encrypted-data-vaults/{quote(vault_id, safe='')}"


def _document_path(vault_id: str, doc_id: str) -> str:
    return f"{_vault_path(vault_id)}/documents/{quote(doc_id, safe='')}"


def _last_path_segment(url: str) -> str:
    return url.rstrip("/").rsplit("/", 1)[-1]


# Default client instance for simple usage
_default_client: EDVClient | None = None


def get_client() -> EDVClient:
    """Get or create the default client instance."""
    global _default_client
    if _default_client is None:
        _default_client = EDVClient()
    return _default_client


__all__ = ["EDVClient", "get_client"]
