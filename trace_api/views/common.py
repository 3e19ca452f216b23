"""Response schemas shared by the upload endpoints."""

from pydantic import BaseModel


class UploadErrorResponse(BaseModel):
    success: bool = False
    error: str
