"""Health check endpoint for the upload relay."""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check(request: Request) -> dict:
    """Health check endpoint.

    Used by operators and orchestrators; does no I/O.
    """
    settings = request.app.state.settings
    return {
        "status": "ok",
        "message": "Upload relay is running",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
    }
