"""Error taxonomy for the EDV server.

Every failure the core reports is an ``EDVError`` tagged with an
``ErrorKind``. Callers branch on ``error.kind``, never on message text.
``StorageError`` is raised by storage backends; the vault collection
translates the storage kinds it has context for (for example
``STORE_NOT_FOUND`` becomes ``VAULT_NOT_FOUND``) and lets the rest through.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Closed set of error conditions."""

    # Storage backend conditions
    DUPLICATE_STORE = "duplicate_store"
    STORE_NOT_FOUND = "store_not_found"
    VALUE_NOT_FOUND = "value_not_found"
    DUPLICATE_VALUE = "duplicate_value"
    MISSING_DOCUMENTS = "missing_documents"
    INDEXING_NOT_SUPPORTED = "indexing_not_supported"
    QUERYING_NOT_SUPPORTED = "querying_not_supported"

    # Validation
    BLANK_REFERENCE_ID = "blank_reference_id"
    NOT_BASE58_ENCODED = "not_base58_encoded"
    NOT_128_BIT_VALUE = "not_128_bit_value"
    MISMATCHED_DOCUMENT_ID = "mismatched_document_id"

    # Conflicts
    DUPLICATE_VAULT = "duplicate_vault"
    DUPLICATE_DOCUMENT = "duplicate_document"

    # Not found
    VAULT_NOT_FOUND = "vault_not_found"
    DOCUMENT_NOT_FOUND = "document_not_found"


_DEFAULT_MESSAGES = {
    ErrorKind.DUPLICATE_STORE: "store already exists",
    ErrorKind.STORE_NOT_FOUND: "store not found",
    ErrorKind.VALUE_NOT_FOUND: "value not found",
    ErrorKind.DUPLICATE_VALUE: "a value is already stored under the given key",
    ErrorKind.MISSING_DOCUMENTS: "documents array cannot be nil",
    ErrorKind.INDEXING_NOT_SUPPORTED: "indexing is not supported by this storage backend",
    ErrorKind.QUERYING_NOT_SUPPORTED: "querying is not supported by this storage backend",
    ErrorKind.BLANK_REFERENCE_ID: "referenceId can't be blank",
    ErrorKind.NOT_BASE58_ENCODED: "document ID must be base58-encoded",
    ErrorKind.NOT_128_BIT_VALUE: (
        "document ID is base58-encoded, but original value before encoding was not 128 bits long"
    ),
    ErrorKind.MISMATCHED_DOCUMENT_ID: "document ID in the body does not match the document ID in the path",
    ErrorKind.DUPLICATE_VAULT: "vault already exists",
    ErrorKind.DUPLICATE_DOCUMENT: "a document with the given ID already exists",
    ErrorKind.VAULT_NOT_FOUND: "specified vault does not exist",
    ErrorKind.DOCUMENT_NOT_FOUND: "specified document does not exist",
}

VALIDATION_KINDS = frozenset({
    ErrorKind.BLANK_REFERENCE_ID,
    ErrorKind.NOT_BASE58_ENCODED,
    ErrorKind.NOT_128_BIT_VALUE,
    ErrorKind.MISMATCHED_DOCUMENT_ID,
    ErrorKind.MISSING_DOCUMENTS,
})

CONFLICT_KINDS = frozenset({
    ErrorKind.DUPLICATE_VAULT,
    ErrorKind.DUPLICATE_DOCUMENT,
    ErrorKind.DUPLICATE_STORE,
    ErrorKind.DUPLICATE_VALUE,
})

NOT_FOUND_KINDS = frozenset({
    ErrorKind.VAULT_NOT_FOUND,
    ErrorKind.DOCUMENT_NOT_FOUND,
    ErrorKind.STORE_NOT_FOUND,
    ErrorKind.VALUE_NOT_FOUND,
})

UNSUPPORTED_KINDS = frozenset({
    ErrorKind.INDEXING_NOT_SUPPORTED,
    ErrorKind.QUERYING_NOT_SUPPORTED,
})


class EDVError(Exception):
    """Base class for all EDV errors."""

    def __init__(
        self,
        kind: ErrorKind,
        message: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.kind = kind
        self.message = message or _DEFAULT_MESSAGES[kind]
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


class StorageError(EDVError):
    """Raised by storage backends."""
