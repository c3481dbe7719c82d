"""
Shared utilities for Locust load tests.
"""

import base64
import os
import random
import uuid

import base58

# Blinded attribute names/values, as a client would produce with its HMAC key
ATTRIBUTE_NAMES = [
    "CUQaxPtSLtd8L3WBAIkJ4DiVJeqoF6bdnhR7lSaPloZ",
    "KXOSMNTu0vFx7xh8W3OAXFQxB4Tp4a4RVYtJLPXlcxM",
    "bXbEcR4cTTrvTuUTGj8Dj5lmrdR81B3eTkPTfLjbJ8c",
]
ATTRIBUTE_VALUES = ["RV58Va4904K", "Zp8Cq11aM3B", "nT3W1bQxeo2", "u0Fd9kTqA4s"]


def random_id(prefix: str = "") -> str:
    """Generate a random reference id with optional prefix."""
    return f"{prefix}{uuid.uuid4().hex[:8]}"


def random_document_id() -> str:
    """Base58 of 16 random bytes, the only document id format the server accepts."""
    return base58.b58encode(os.urandom(16)).decode("ascii")


def random_attribute() -> dict[str, str]:
    return {"name": random.choice(ATTRIBUTE_NAMES), "value": random.choice(ATTRIBUTE_VALUES)}


def random_document(doc_id: str | None = None) -> dict:
    """A document with a fake JWE payload and one or two indexed attributes."""
    return {
        "id": doc_id or random_document_id(),
        "sequence": 0,
        "indexed": [
            {
                "sequence": 0,
                "hmac": {"id": "did:example:123#hmac", "type": "Sha256HmacKey2019"},
                "attributes": [random_attribute() for _ in range(random.randint(1, 2))],
            }
        ],
        "jwe": {
            "protected": "eyJlbmMiOiJDMjBQIn0",
            "recipients": [],
            "iv": base64.urlsafe_b64encode(os.urandom(12)).decode("ascii"),
            "ciphertext": base64.urlsafe_b64encode(os.urandom(64)).decode("ascii"),
            "tag": base64.urlsafe_b64encode(os.urandom(16)).decode("ascii"),
        },
    }
