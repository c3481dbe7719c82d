"""Query router - attribute-equality search within a vault."""

import logging

from fastapi import APIRouter, Request

from edv.errors import EDVError
from edv.models.query import Query
from edv.routers.common import document_url, http_error
from edv.services.storage_service import StorageService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/encrypted-data-vaults/{vault_id}/queries",
    response_model=list[str],
    responses={
        404: {"description": "Vault not found"},
        501: {"description": "Storage backend does not support querying"},
    },
)
async def query_vault(vault_id: str, query: Query, request: Request):
    """Return the URLs of all documents matching the query (possibly none)."""
    try:
        matching_ids = await StorageService.collection().query_vault(vault_id, query)
    except EDVError as e:
        raise http_error(e)

    logger.debug(f"Query matched {len(matching_ids)} documents in vault {vault_id}")
    return [document_url(request, vault_id, doc_id) for doc_id in matching_ids]
