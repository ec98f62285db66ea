"""
Core components for the Contact Form API.
"""

from .errors import (
    ContactAPIError,
    PayloadTooLargeError,
    StoreError,
    UploadError,
    ValidationError,
)
from .submission_store import SubmissionStore
from .pipeline import ContactPipeline

__all__ = [
    "ContactAPIError",
    "PayloadTooLargeError",
    "StoreError",
    "UploadError",
    "ValidationError",
    "SubmissionStore",
    "ContactPipeline",
]
