"""Upload data models."""

from pydantic import BaseModel, ConfigDict, Field


class UploadResponse(BaseModel):
    """Response model for a relayed upload.

    The shape is the same for images and videos; callers read ``video_url``
    as the public URL of whatever they uploaded.
    """

    success: bool = True
    video_url: str
    thumbnail_url: str = ""
    duration: str = ""
    message: str = "File uploaded successfully"


class PresignRequest(BaseModel):
    """Request model for minting a presigned PUT URL."""

    model_config = ConfigDict(populate_by_name=True)

    filename: str = Field(..., min_length=1, description="Original file name, used as object key")
    content_type: str = Field(
        ..., alias="contentType", min_length=1, description="MIME type the upload will carry"
    )


class PresignResponse(BaseModel):
    """Response model for presigned URL generation."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    presigned_url: str = Field(..., alias="presignedUrl")
    public_url: str = Field(..., alias="publicUrl")


class ErrorResponse(BaseModel):
    """Error body for failed relay operations."""

    success: bool = False
    error: str
