"""Log spec router - read and change log levels at runtime."""

import logging

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import PlainTextResponse

from edv.logging_config import apply_log_spec, current_log_spec
from edv.models.logspec import LogSpec

logger = logging.getLogger(__name__)

router = APIRouter()

SET_LOG_LEVEL_SUCCESS_MSG = "Successfully set log level(s)."
INVALID_LOG_SPEC_MSG = (
    "Invalid log spec. It needs to be in the following format: "
    "ModuleName1=Level1:ModuleName2=Level2:ModuleNameN=LevelN:AllOtherModuleDefaultLevel\n"
    "Valid log levels: critical,error,warn,info,debug"
)


@router.put("/encrypted-data-vaults/logspec", response_class=PlainTextResponse)
async def set_log_spec(log_spec: LogSpec):
    """Change log levels."""
    try:
        apply_log_spec(log_spec.spec)
    except ValueError as e:
        logger.debug(f"Rejected log spec '{log_spec.spec}': {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_LOG_SPEC_MSG)

    logger.info(f"Log spec set to '{log_spec.spec}'")
    return SET_LOG_LEVEL_SUCCESS_MSG


@router.get("/encrypted-data-vaults/logspec", response_class=PlainTextResponse)
async def get_log_spec():
    """Current log levels as a log spec."""
    return current_log_spec()
