"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from edv.config import settings
from edv.logging_config import setup_logging
from edv.routers import documents, logspec, queries, vaults
from edv.services.storage_service import StorageService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan."""
    setup_logging()
    logger.info("Starting EDV server...")

    await StorageService.initialize()
    stats = StorageService.get_stats()
    logger.info(f"Storage ready: backend={stats['database_type']} ({stats['provider']})")

    logger.info("EDV server ready")
    yield
    logger.info("Shutting down EDV server")
    await StorageService.close()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Encrypted Data Vault server: stores pre-encrypted documents and answers attribute queries",
    lifespan=lifespan,
)

# logspec goes first so its fixed path wins over /encrypted-data-vaults/{vault_id}
app.include_router(logspec.router, tags=["logspec"])
app.include_router(vaults.router, tags=["vaults"])
app.include_router(documents.router, tags=["documents"])
app.include_router(queries.router, tags=["queries"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running"
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
