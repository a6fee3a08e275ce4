"""
PeerLink API - FastAPI application

Usage:
    peerlink-web

Then open:
    - http://127.0.0.1:8080/docs - API Documentation (Swagger UI)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError

from peerlink import config

from .dependencies import close_insight_client
from .exceptions import (
    ServiceException,
    general_exception_handler,
    http_exception_handler,
    service_exception_handler,
    validation_exception_handler,
)
from .routes import router

logging.basicConfig(
    level=config.PEERLINK_LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Release the shared insight client on shutdown."""
    yield
    await close_insight_client()


app = FastAPI(
    title="PeerLink API",
    description="Peer support recommendations for patient communities",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.add_exception_handler(ServiceException, service_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

app.include_router(router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "peerlink"}


def main():
    """Run the web server."""
    import uvicorn

    logger.info(f"Starting PeerLink API on {config.PEERLINK_HOST}:{config.PEERLINK_PORT}")
    logger.info(f"Data directory: {config.PEERLINK_DATA_DIR}")
    if not config.llm_configured():
        logger.info("No LLM key configured; recommendations use neutral AI adjustments")

    uvicorn.run(
        "peerlink.web.app:app",
        host=config.PEERLINK_HOST,
        port=config.PEERLINK_PORT,
        reload=False,
        log_level=config.PEERLINK_LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    main()
