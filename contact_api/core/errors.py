"""
Error taxonomy of the Contact Form API.

Each error carries the HTTP status it maps to. The HTTP layer turns them into
``{"error": <message>}`` bodies; anything outside this hierarchy is answered
with a generic 500.
"""


class ContactAPIError(Exception):
    """Base class for failures the API reports with their own message."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ContactAPIError):
    """A required form field is missing or empty. Client-caused."""

    status_code = 400


class PayloadTooLargeError(ContactAPIError):
    """The attached file exceeds the configured upload limit."""

    status_code = 413


class StoreError(ContactAPIError):
    """The relational store is unreachable or a statement failed."""


class UploadError(ContactAPIError):
    """The object store is unreachable or rejected the upload."""
