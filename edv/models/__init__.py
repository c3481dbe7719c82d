"""Domain models for the EDV server."""

from edv.models.document import (
    BatchUpsertRequest,
    BatchUpsertResponse,
    EncryptedDocument,
    IDTypePair,
    IndexedAttribute,
    IndexedAttributeCollection,
)
from edv.models.enums import DatabaseType
from edv.models.logspec import LogSpec
from edv.models.query import Query, QueryAttribute
from edv.models.vault import DataVaultConfiguration, DataVaultConfigurationMapping

__all__ = [
    "BatchUpsertRequest",
    "BatchUpsertResponse",
    "DataVaultConfiguration",
    "DataVaultConfigurationMapping",
    "DatabaseType",
    "EncryptedDocument",
    "IDTypePair",
    "IndexedAttribute",
    "IndexedAttributeCollection",
    "LogSpec",
    "Query",
    "QueryAttribute",
]
