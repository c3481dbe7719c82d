"""Vault router - vault creation and configuration lookup."""

import logging

from fastapi import APIRouter, Request, Response, status

from edv.errors import EDVError
from edv.models.vault import DataVaultConfiguration
from edv.routers.common import http_error, vault_url
from edv.services.storage_service import StorageService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/encrypted-data-vaults",
    status_code=status.HTTP_201_CREATED,
    response_class=Response,
    responses={
        400: {"description": "Blank referenceId"},
        409: {"description": "A vault with this referenceId already exists"},
    },
)
async def create_data_vault(config: DataVaultConfiguration, request: Request):
    """Create a new data vault. The vault URL is returned in the Location header."""
    logger.info(f"Creating vault: referenceId='{config.reference_id}'")
    try:
        vault_id = await StorageService.collection().create_data_vault(config)
    except EDVError as e:
        logger.info(f"Vault creation failed: referenceId='{config.reference_id}' reason={e.kind.value}")
        raise http_error(e, prefix="Data vault creation failed: ")

    return Response(
        status_code=status.HTTP_201_CREATED,
        headers={"Location": vault_url(request, vault_id)},
    )


@router.get(
    "/encrypted-data-vaults/{vault_id}",
    response_model=DataVaultConfiguration,
    response_model_exclude_none=True,
)
async def get_data_vault(vault_id: str):
    """Get a vault's configuration."""
    try:
        return await StorageService.collection().get_data_vault_configuration(vault_id)
    except EDVError as e:
        raise http_error(e)


@router.get("/encrypted-data-vaults/by-reference/{reference_id}")
async def resolve_reference_id(reference_id: str, request: Request) -> dict:
    """Look up the vault registered under a referenceId."""
    try:
        vault_id = await StorageService.collection().registry.resolve_reference_id(reference_id)
    except EDVError as e:
        raise http_error(e)
    return {"id": vault_id, "location": vault_url(request, vault_id)}
