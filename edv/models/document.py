"""Encrypted document model - an opaque payload plus indexed attributes."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class IDTypePair(BaseModel):
    """A key reference: identifier plus key type."""

    id: str = Field(..., description="Key identifier")
    type: str = Field(..., description="Key type")


class IndexedAttribute(BaseModel):
    """A single blinded name/value pair left visible for equality queries."""

    name: str = Field(..., description="Attribute name (typically an HMAC output)")
    value: str = Field(..., description="Attribute value (typically an HMAC output)")
    unique: bool = Field(default=False, description="Whether the value is meant to be unique")


class IndexedAttributeCollection(BaseModel):
    """Attributes indexed with one HMAC key."""

    sequence: int = Field(default=0, description="Revision number")
    hmac: Optional[IDTypePair] = Field(None, description="HMAC key used to blind the attributes")
    attributes: list[IndexedAttribute] = Field(default_factory=list)


class EncryptedDocument(BaseModel):
    """An already-encrypted document.

    The server never interprets ``jwe`` or any extra field; they are kept as-is.
    Only ``id`` and the ``indexed`` attributes carry meaning for storage.
    """

    id: str = Field(..., description="Base58-encoded 128-bit identifier chosen by the client")
    sequence: int = Field(default=0, description="Revision number")
    indexed: list[IndexedAttributeCollection] = Field(default_factory=list)
    jwe: Optional[dict[str, Any]] = Field(None, description="Encrypted content as a JWE object")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        json_schema_extra={
            "example": {
                "id": "VJYHHJx4C8J9Fsgz7rZqSp",
                "sequence": 0,
                "indexed": [
                    {
                        "sequence": 0,
                        "hmac": {"id": "did:ex:123#hmac", "type": "Sha256HmacKey2019"},
                        "attributes": [
                            {"name": "CUQaxPtSLtd8L3WBAIkJ4DiVJeqoF6bdnhR7lSaPloZ", "value": "RV58Va4904K"}
                        ],
                    }
                ],
                "jwe": {"protected": "eyJlbmMiOiJDMjBQIn0", "recipients": [], "iv": "", "ciphertext": "", "tag": ""},
            }
        },
    )

    def to_bytes(self) -> bytes:
        """Canonical serialization persisted by every backend."""
        return self.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")

    def attribute_pairs(self) -> list[tuple[str, str]]:
        """All (name, value) pairs across every indexed attribute collection."""
        return [
            (attribute.name, attribute.value)
            for collection in self.indexed
            for attribute in collection.attributes
        ]


class BatchUpsertRequest(BaseModel):
    """Request model for creating or replacing several documents at once."""

    documents: list[EncryptedDocument] = Field(..., description="Documents to upsert, in order")


class BatchUpsertResponse(BaseModel):
    """Response model for batch upsert."""

    upserted_count: int = Field(..., description="Number of documents written")
    locations: list[str] = Field(..., description="URL of each written document")
