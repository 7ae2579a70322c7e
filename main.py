"""
Application entry point for the course catalog backend.

Design choices:
- Mounts versioned routers using a configurable prefix from core.config Settings.
- Keeps a bare root route for quick health checks while the API evolves.
- Missing collection documents are created empty at startup so a fresh checkout can serve requests.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from api.v1.routes import router as v1_router
from core.config import get_settings
from core.logging_config import configure_logging
from middleware import RequestContextMiddleware, create_request_context_config
from services.dependencies import ensure_documents, get_coordinator

_settings = get_settings()

# Configure structured logging
configure_logging(_settings.log_level)

app = FastAPI(
    title="Course Catalog API",
    version="1.0.0",
    description="Courses, modules and lessons stored as JSON documents.",
)

# Basic CORS (can be restricted via settings in the future)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=_settings.gzip_minimum_size)
app.add_middleware(RequestContextMiddleware, config=create_request_context_config())


@app.get("/")
async def root():
    return {"message": "Server running"}


# Mount versioned API routers
app.include_router(v1_router, prefix=_settings.api_v1_prefix)


@app.on_event("startup")
async def startup_event():
    """Make sure every collection document exists before the first request."""
    logger = logging.getLogger("startup")
    logger.info("Starting application initialization...")
    await ensure_documents(get_coordinator())
    logger.info("Application initialization completed successfully")
