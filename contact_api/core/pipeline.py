"""
Request pipeline for the Contact Form API.

Coordinates input validation, the optional image upload, the database insert
and the error telemetry for each contact-form request.
"""
import logging
import time
from typing import TYPE_CHECKING, List, Optional

from contact_api.core.errors import StoreError, UploadError, ValidationError
from contact_api.core.submission_store import SubmissionStore
from contact_api.models.dtos import ContactSubmissionResponse, ImageAttachment, SubmissionDTO

if TYPE_CHECKING:
    from contact_api.integrations.cloudwatch import TelemetryEmitter
    from contact_api.integrations.s3 import S3ObjectStore

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Name, email, and message are required."
CONTACT_SUBMISSION_ERROR = "ContactSubmissionError"
FETCH_SUBMISSIONS_ERROR = "FetchSubmissionsError"
OBJECT_KEY_PREFIX = "contacts"


def build_object_key(filename: str, now_ms: Optional[int] = None) -> str:
    """
    Build the storage key of an uploaded image.

    Args:
        filename: Original file name as sent by the client.
        now_ms: Epoch milliseconds; the current time when omitted.

    Returns:
        ``contacts/<epoch-millis>-<filename>``
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{OBJECT_KEY_PREFIX}/{now_ms}-{filename}"


def validate_contact_fields(name: Optional[str], email: Optional[str], message: Optional[str]) -> None:
    """Raise ValidationError unless name, email and message are all non-empty."""
    if not name or not email or not message:
        raise ValidationError(REQUIRED_FIELDS_MESSAGE)


class ContactPipeline:
    """
    Orchestrates contact submissions over the object store, the submission store and telemetry.
    """
    def __init__(
        self,
        store: SubmissionStore,
        object_store: "S3ObjectStore",
        telemetry: "TelemetryEmitter",
    ):
        self.store = store
        self.object_store = object_store
        self.telemetry = telemetry

    async def create_submission(
        self,
        name: Optional[str],
        email: Optional[str],
        message: Optional[str],
        attachment: Optional[ImageAttachment] = None,
    ) -> ContactSubmissionResponse:
        """
        Validates and stores one contact submission.

        The image, when present, is uploaded before the row is inserted. An
        uploaded image is left in place if the insert fails afterwards.

        Args:
            name: Sender name.
            email: Sender email.
            message: Message body.
            attachment: Optional image to upload.

        Returns:
            ContactSubmissionResponse with the new id and image URL.

        Raises:
            ValidationError: If a required field is missing; nothing else is attempted.
            UploadError: If the image upload failed.
            StoreError: If the insert failed.
        """
        validate_contact_fields(name, email, message)

        try:
            image_url = None
            if attachment is not None:
                key = build_object_key(attachment.filename)
                image_url = await self.object_store.upload(key, attachment.data, attachment.content_type)

            submission_id = await self.store.insert(name, email, message, image_url)
        except (UploadError, StoreError) as e:
            logger.error(f"Error: contact submission failed: {e}")
            self.telemetry.record_error(CONTACT_SUBMISSION_ERROR)
            raise

        return ContactSubmissionResponse(id=submission_id, image_url=image_url)

    async def list_submissions(self) -> List[SubmissionDTO]:
        """
        Returns every stored submission, most recent first.

        Raises:
            StoreError: If the query failed.
        """
        try:
            return await self.store.list_all()
        except StoreError as e:
            logger.error(f"Error fetching submissions: {e}")
            self.telemetry.record_error(FETCH_SUBMISSIONS_ERROR)
            raise
