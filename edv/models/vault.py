"""Data vault configuration models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from edv.models.document import IDTypePair


class DataVaultConfiguration(BaseModel):
    """Input model for creating a vault."""

    sequence: int = Field(default=0, description="Revision number")
    controller: str = Field(default="", description="Entity in control of the vault")
    invoker: Optional[str] = Field(None, description="Entity allowed to invoke operations")
    delegator: Optional[str] = Field(None, description="Entity allowed to delegate capabilities")
    reference_id: str = Field(..., description="Client-chosen unique name for the vault")
    kek: Optional[IDTypePair] = Field(None, description="Key encryption key reference")
    hmac: Optional[IDTypePair] = Field(None, description="HMAC key reference")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "sequence": 0,
                "controller": "did:example:123456789",
                "referenceId": "my-vault",
                "kek": {"id": "https://example.com/kms/12345", "type": "AesKeyWrappingKey2019"},
                "hmac": {"id": "https://example.com/kms/67891", "type": "Sha256HmacKey2019"},
            }
        },
    )


class DataVaultConfigurationMapping(BaseModel):
    """Registry record: a vault's configuration plus its generated id."""

    data_vault_configuration: DataVaultConfiguration
    vault_id: str

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
