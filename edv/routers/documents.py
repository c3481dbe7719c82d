"""Document router - create, read, update and delete encrypted documents."""

import logging

from fastapi import APIRouter, HTTPException, Request, Response, status

from edv.config import settings
from edv.errors import EDVError
from edv.models.document import BatchUpsertRequest, BatchUpsertResponse, EncryptedDocument
from edv.routers.common import document_url, http_error
from edv.services.storage_service import StorageService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/encrypted-data-vaults/{vault_id}/documents",
    status_code=status.HTTP_201_CREATED,
    response_class=Response,
    responses={
        400: {"description": "Document id is not a base58-encoded 128-bit value"},
        404: {"description": "Vault not found"},
        409: {"description": "A document with this id already exists"},
    },
)
async def create_document(vault_id: str, document: EncryptedDocument, request: Request):
    """Create a new document in a vault. Never overwrites an existing document."""
    logger.info(f"Creating document: vault={vault_id} id={document.id}")
    try:
        await StorageService.collection().create_document(vault_id, document)
    except EDVError as e:
        raise http_error(e)

    return Response(
        status_code=status.HTTP_201_CREATED,
        headers={"Location": document_url(request, vault_id, document.id)},
    )


@router.get(
    "/encrypted-data-vaults/{vault_id}/documents/{doc_id}",
    response_class=Response,
    responses={404: {"description": "Vault or document not found"}},
)
async def read_document(vault_id: str, doc_id: str):
    """Get a document exactly as it was stored."""
    try:
        document_bytes = await StorageService.collection().read_document(vault_id, doc_id)
    except EDVError as e:
        raise http_error(e)
    return Response(content=document_bytes, media_type="application/json")


@router.put(
    "/encrypted-data-vaults/{vault_id}/documents/{doc_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def update_document(vault_id: str, doc_id: str, document: EncryptedDocument):
    """Replace an existing document."""
    logger.info(f"Updating document: vault={vault_id} id={doc_id}")
    try:
        await StorageService.collection().update_document(vault_id, doc_id, document)
    except EDVError as e:
        raise http_error(e)


@router.delete(
    "/encrypted-data-vaults/{vault_id}/documents/{doc_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_document(vault_id: str, doc_id: str):
    """Delete a document."""
    logger.info(f"Deleting document: vault={vault_id} id={doc_id}")
    try:
        await StorageService.collection().delete_document(vault_id, doc_id)
    except EDVError as e:
        raise http_error(e)


@router.post(
    "/encrypted-data-vaults/{vault_id}/batch",
    response_model=BatchUpsertResponse,
)
async def upsert_documents(vault_id: str, batch: BatchUpsertRequest, request: Request):
    """Create or replace several documents at once."""
    if len(batch.documents) > settings.max_batch_size:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Batch size {len(batch.documents)} exceeds maximum of {settings.max_batch_size}"
        )

    logger.info(f"Upserting documents: vault={vault_id} count={len(batch.documents)}")
    try:
        count = await StorageService.collection().upsert_documents(vault_id, batch.documents)
    except EDVError as e:
        raise http_error(e)

    return BatchUpsertResponse(
        upserted_count=count,
        locations=[document_url(request, vault_id, document.id) for document in batch.documents],
    )
