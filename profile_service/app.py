"""
FastAPI profile service.

Provides the resume import endpoint and the import-session review
endpoints. Sessions live in memory; committed drafts go to MongoDB.
"""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.common.config import Config
from src.common.logger import setup_logging

from . import __version__
from .config import settings, validate_config_on_startup
from .models import HealthResponse
from .routes import import_sessions_router, resume_import_router
from .sessions import get_session_registry

# Configure logging
setup_logging(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format=os.getenv("LOG_FORMAT", "simple"),
)
logger = logging.getLogger(__name__)

# Validate configuration at startup
validate_config_on_startup()

app = FastAPI(title="Profile Import Service", version=__version__)

# Configure CORS using validated settings
if settings.cors_origins_list:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Include modular route handlers
app.include_router(resume_import_router)
app.include_router(import_sessions_router)


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint for container orchestration.

    Reports which upstream services are configured; it does not call them.
    """
    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=settings.environment,
        ocr_configured=bool(Config.MISTRAL_API_KEY),
        structured_extraction=Config.has_extraction_credentials(),
        active_sessions=len(get_session_registry()),
    )
