"""
Pydantic Data Transfer Objects (DTOs) for the Contact Form API.

These models are used for API request/response validation and internal data transfer.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SubmissionDTO(BaseModel):
    """
    DTO for a stored contact-form submission.

    Mirrors SubmissionORM and is returned verbatim by the listing endpoint.
    """
    id: int
    name: str
    email: str
    message: str
    image_url: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ImageAttachment(BaseModel):
    """An uploaded image held in memory, as received from the multipart form."""
    filename: str
    content_type: str = "application/octet-stream"
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class ContactSubmissionResponse(BaseModel):
    """Response body for a successfully stored submission."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    id: int
    image_url: Optional[str] = Field(default=None, alias="imageUrl")


class ErrorResponse(BaseModel):
    """Error body shared by every failing endpoint."""
    error: str
