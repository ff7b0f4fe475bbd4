"""Main application entrypoint for the EduRelay upload relay."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from edurelay.api.middleware import HTTPErrorLoggingMiddleware
from edurelay.api.v1 import routes_health
from edurelay.api.v1.routes_upload import router as upload_router, ui_router
from edurelay.core.config import Settings
from edurelay.core.exceptions import NoFileError, UploadException
from edurelay.core.logging import setup_logging
from edurelay.services.relay import RelayService
from edurelay.storage.base import ObjectStore
from edurelay.storage.factory import get_storage_backend
from edurelay.storage.staging import StagingArea

logger = logging.getLogger(__name__)


def log_configuration_status(settings: Settings) -> None:
    """Log which object store settings are present without leaking values."""
    backend = settings.STORAGE_BACKEND.lower()
    if backend == "s3":
        required = ["S3_ENDPOINT", "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY", "S3_BUCKET"]
    elif backend == "gcs":
        required = ["GCS_BUCKET_NAME"]
    else:
        required = ["LOCAL_STORAGE_PATH"]

    status = {name: "set" if getattr(settings, name) else "missing" for name in required}
    logger.info(
        f"Storage backend '{backend}' configuration: "
        + ", ".join(f"{name}={state}" for name, state in status.items()),
        extra={"storage_backend": backend, "config_status": status},
    )
    logger.info(f"Public base URL: {settings.public_base_url}")

    missing = [name for name, state in status.items() if state == "missing"]
    if missing:
        logger.warning(f"Uploads will fail until configured: {', '.join(missing)}")


async def handle_no_file(request: Request, exc: NoFileError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


async def handle_upload_exception(request: Request, exc: UploadException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc) or "Upload failed"},
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation errors in the relay's error shape."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"success": False, "error": message})


def create_app(
    settings: Settings | None = None,
    store: ObjectStore | None = None,
    staging: StagingArea | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use; the process-wide settings when omitted
        store: Object store to forward uploads to; built from settings when omitted
        staging: Staging area for multipart bodies; built from settings when omitted

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    if settings is None:
        from edurelay.core.config import settings

    setup_logging(settings)

    if store is None:
        store = get_storage_backend(settings)
    if staging is None:
        staging = StagingArea(settings.STAGING_DIR)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        Path(staging.directory).mkdir(parents=True, exist_ok=True)
        log_configuration_status(settings)
        logger.info(f"Upload relay ready (backend={store.get_backend_name()})")
        yield

    app = FastAPI(
        title=settings.SERVICE_NAME,
        version=settings.SERVICE_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.relay = RelayService(
        store=store,
        staging=staging,
        public_base_url=settings.public_base_url,
        presign_expiration=settings.PRESIGN_EXPIRATION_SECONDS,
    )

    app.add_middleware(HTTPErrorLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(NoFileError, handle_no_file)
    app.add_exception_handler(UploadException, handle_upload_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    app.include_router(routes_health.router, tags=["health"])
    app.include_router(upload_router)
    app.include_router(ui_router)

    return app


# Export app instance for ASGI servers
app = create_app()


def run() -> None:
    """Serve the relay with uvicorn on HOST:PORT."""
    settings = app.state.settings
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
