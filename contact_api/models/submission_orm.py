"""
SQLAlchemy ORM model for the 'submissions' table.
"""

from sqlalchemy import Column, Index, Integer, Text
from sqlalchemy import TIMESTAMP
from sqlalchemy.sql import func

from .base import Base


class SubmissionORM(Base):
    """
    SQLAlchemy ORM model representing a single contact-form submission.

    Rows are written once by the submission pipeline and never updated.

    Attributes:
        id (int): Primary key, auto-incrementing.
        name (str): Name given by the sender.
        email (str): Email address given by the sender. Not format-checked.
        message (str): Message body.
        image_url (str, optional): Public URL of the attached image, NULL when no image was sent.
        created_at (datetime): Insert timestamp (defaults to NOW()).
    """
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, autoincrement=True, comment="Unique identifier for the submission.")
    name = Column(Text, nullable=False, comment="Name of the sender.")
    email = Column(Text, nullable=False, comment="Email address of the sender.")
    message = Column(Text, nullable=False, comment="Message body.")
    image_url = Column(Text, nullable=True, comment="Public URL of the uploaded image, if any.")
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), comment="Timestamp of insertion.")

    __table_args__ = (
        Index("idx_submissions_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<SubmissionORM(id={self.id}, email='{self.email}', "
            f"image_url='{self.image_url}', created_at='{self.created_at}')>"
        )
