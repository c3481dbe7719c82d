"""Helpers shared by the routers."""

from urllib.parse import quote

from fastapi import HTTPException, Request, status

from edv.errors import (
    CONFLICT_KINDS,
    NOT_FOUND_KINDS,
    UNSUPPORTED_KINDS,
    VALIDATION_KINDS,
    EDVError,
)


def http_error(error: EDVError, prefix: str = "") -> HTTPException:
    """Translate an EDVError into the HTTPException a router should raise."""
    if error.kind in NOT_FOUND_KINDS:
        status_code = status.HTTP_404_NOT_FOUND
    elif error.kind in CONFLICT_KINDS:
        status_code = status.HTTP_409_CONFLICT
    elif error.kind in UNSUPPORTED_KINDS:
        status_code = status.HTTP_501_NOT_IMPLEMENTED
    elif error.kind in VALIDATION_KINDS:
        status_code = status.HTTP_400_BAD_REQUEST
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    detail = f"{prefix}{error.message}" if prefix else error.message
    return HTTPException(status_code=status_code, detail=detail)


def vault_url(request: Request, vault_id: str) -> str:
    return str(request.url_for("get_data_vault", vault_id=quote(vault_id, safe="")))


def document_url(request: Request, vault_id: str, doc_id: str) -> str:
    return str(request.url_for(
        "read_document", vault_id=quote(vault_id, safe=""), doc_id=quote(doc_id, safe="")
    ))
