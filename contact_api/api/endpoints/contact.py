"""
Contact form API endpoints.

This module implements the submission endpoint (multipart form with an
optional image) and the listing endpoint.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from contact_api.core.errors import PayloadTooLargeError
from contact_api.core.pipeline import ContactPipeline
from contact_api.models.dtos import (
    ContactSubmissionResponse,
    ErrorResponse,
    ImageAttachment,
    SubmissionDTO,
)

router = APIRouter()
logger = logging.getLogger(__name__)

PAYLOAD_TOO_LARGE_ERROR = "PayloadTooLargeError"


# Dependency to get the shared pipeline instance
def get_pipeline(request: Request) -> ContactPipeline:
    """Get the pipeline built at application startup."""
    return request.app.state.pipeline


async def read_attachment(
    request: Request,
    image: Optional[UploadFile],
) -> Optional[ImageAttachment]:
    """
    Read an uploaded image into memory, enforcing the upload size limit.

    Args:
        request: Current request, used to reach settings and telemetry
        image: Uploaded file, or None when the form carried no image

    Returns:
        ImageAttachment, or None when no file was attached

    Raises:
        PayloadTooLargeError: If the file exceeds MAX_UPLOAD_BYTES
    """
    if image is None or not image.filename:
        return None

    max_bytes = request.app.state.settings.MAX_UPLOAD_BYTES
    attachment = ImageAttachment(
        filename=image.filename,
        content_type=image.content_type or "application/octet-stream",
        data=await image.read(max_bytes + 1),
    )
    await image.close()

    if attachment.size > max_bytes:
        logger.warning(f"Rejected upload {image.filename!r}: larger than {max_bytes} bytes")
        telemetry = getattr(request.app.state, "telemetry", None)
        if telemetry is not None:
            telemetry.record_error(PAYLOAD_TOO_LARGE_ERROR)
        raise PayloadTooLargeError("File too large")

    logger.debug(f"Read upload {attachment.filename!r} ({attachment.size} bytes)")
    return attachment


@router.post(
    "/contact",
    response_model=ContactSubmissionResponse,
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def create_contact(
    request: Request,
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    message: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    pipeline: ContactPipeline = Depends(get_pipeline),
) -> ContactSubmissionResponse:
    """
    Store a contact-form submission.

    Accepts a multipart form with ``name``, ``email``, ``message`` and an
    optional ``image`` file.

    Returns:
        ContactSubmissionResponse: ``{success, id, imageUrl}``
    """
    attachment = await read_attachment(request, image)
    return await pipeline.create_submission(name, email, message, attachment)


@router.get(
    "/submissions",
    response_model=List[SubmissionDTO],
    responses={500: {"model": ErrorResponse}},
)
async def list_submissions(
    pipeline: ContactPipeline = Depends(get_pipeline),
) -> List[SubmissionDTO]:
    """
    List every stored submission, most recent first.
    """
    return await pipeline.list_submissions()
