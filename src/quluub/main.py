"""Main entry point for the Quluub application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from quluub.api.v1 import (
    auth_router,
    chats_router,
    relationships_router,
    system_router,
    users_router,
)
from quluub.core.errors import QuluubError
from quluub.core.settings import settings
from quluub.db.session import create_tables

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=f"{settings.app_name} API",
    description="Matrimonial matching and messaging API",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(system_router)
app.include_router(auth_router, prefix=settings.api_prefix)
app.include_router(users_router, prefix=settings.api_prefix)
app.include_router(relationships_router, prefix=settings.api_prefix)
app.include_router(chats_router, prefix=settings.api_prefix)


@app.exception_handler(QuluubError)
async def handle_domain_error(request: Request, exc: QuluubError) -> JSONResponse:
    """Translate domain errors into JSON error responses."""
    logger.debug("%s %s -> %s: %s", request.method, request.url.path, exc.kind, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.on_event("startup")
async def on_startup() -> None:
    if settings.create_tables_on_startup:
        logger.info("Creating database tables")
        create_tables()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("quluub.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
