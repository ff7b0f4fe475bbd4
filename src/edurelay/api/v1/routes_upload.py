"""Upload API routes."""

from pathlib import Path

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from edurelay.models.upload import (
    ErrorResponse,
    PresignRequest,
    PresignResponse,
    UploadResponse,
)
from edurelay.services.relay import RelayService

router = APIRouter(tags=["upload"])
ui_router = APIRouter()
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[2] / "ui" / "templates"))


def get_relay_service(request: Request) -> RelayService:
    return request.app.state.relay


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={400: {"description": "No file uploaded"}, 500: {"model": ErrorResponse}},
)
async def upload_file(
    file: UploadFile | str | None = File(None),
    relay: RelayService = Depends(get_relay_service),
) -> UploadResponse:
    """Relay a multipart file to the object store and return its public URL."""
    return await relay.relay_upload(file)


@router.post(
    "/generate-upload-url",
    response_model=PresignResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def generate_upload_url(
    request: PresignRequest,
    relay: RelayService = Depends(get_relay_service),
) -> PresignResponse:
    """Mint a presigned PUT URL for a direct client-to-bucket upload."""
    return relay.create_presigned_upload(request.filename, request.content_type)


@ui_router.get("/", response_class=HTMLResponse)
async def upload_page(request: Request):
    """Serve the upload form."""
    return templates.TemplateResponse(
        request,
        "upload.html",
        {"accept": "video/*,image/*", "title": "Upload course media"},
    )
