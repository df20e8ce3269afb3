"""
ImageVault Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, error mapping
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn imagevault.main:app).

Routes:
    POST /api/images          upload image + insert record
    GET  /api/images          list records
    GET  /api/images/{id}     get one record
    PUT  /api/images/{id}     update text fields
    GET  /uploads/{filename}  serve a stored file
    GET  /health              store connectivity

Lifecycle:
    Startup:   configure logging, create the MongoDB client, select the
               images collection, keep both on app.state
    Shutdown:  close the MongoDB client
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from imagevault import __version__
from imagevault.config import settings
from imagevault.database import close_client, create_client, get_collection
from imagevault.exceptions import ImageVaultError, NotFoundError
from imagevault.middleware.request_context import RequestContextMiddleware, RequestIdFilter
from imagevault.routes import health, images, uploads

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once at startup.

    Format: %(asctime)s [%(levelname)s] %(name)s [%(request_id)s] %(message)s

    request_id is "-" outside a request (startup, shutdown).
    """
    handler = logging.StreamHandler(sys.stdout)  # Docker captures stdout
    handler.addFilter(RequestIdFilter())
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # Our access log replaces uvicorn's; the driver logs every heartbeat at DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Build the store client before serving and close it afterwards.

    The client is injected into handlers through app.state; nothing else
    holds a reference to it.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("ImageVault Backend %s starting up...", __version__)

    client = create_client(settings)
    app.state.mongo_client = client
    app.state.images_collection = get_collection(client, settings)

    logger.info("Upload directory: %s", settings.upload_dir)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("ImageVault Backend shutting down...")
    await close_client(client)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to `{"message": ...}` responses.

    Handler hierarchy:
        NotFoundError           → 404 "Image not found"
        ImageVaultError (base)  → 500 with the error's message
        RequestValidationError  → 500 with the validation summary

    Anything else is answered by RequestContextMiddleware with a 500
    carrying the exception text. Only the not-found check produces a 4xx;
    every other failure, including malformed client input, is a 500.
    """

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, exc.message)

    @app.exception_handler(ImageVaultError)
    async def handle_app_error(request: Request, exc: ImageVaultError):
        logger.error("%s: %s | Context: %s", type(exc).__name__, exc.message, exc.context)
        return _error_response(500, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        message = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ) or "Invalid request"
        logger.warning("Request could not be parsed: %s", message)
        return _error_response(500, message)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Assemble middleware, exception handlers and routers into one app."""
    app = FastAPI(
        title="ImageVault API",
        description=(
            "Upload images with a name, type and description, then list, "
            "fetch and update their records."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition:
    # RequestContext → CORS → route
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count"],
    )
    app.add_middleware(RequestContextMiddleware)

    register_exception_handlers(app)

    app.include_router(images.router)
    app.include_router(uploads.router)
    app.include_router(health.router)

    return app


# uvicorn expects `imagevault.main:app` to be importable
app = create_app()


def run() -> None:
    """Console entry point: `imagevault` starts uvicorn with configured host/port."""
    import uvicorn

    uvicorn.run(
        "imagevault.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
    )
