"""
Models package for the Contact Form API.

This package contains SQLAlchemy ORM models and Pydantic DTOs.
"""

# Ensure all ORM models are registered with the Base metadata when this package is imported.
from . import base
from . import submission_orm

from .base import Base
from .submission_orm import SubmissionORM

from .dtos import (
    ContactSubmissionResponse,
    ErrorResponse,
    ImageAttachment,
    SubmissionDTO,
)

__all__ = [
    # Base
    "Base",
    # ORMs
    "SubmissionORM",
    # DTOs
    "ContactSubmissionResponse",
    "ErrorResponse",
    "ImageAttachment",
    "SubmissionDTO",
]
