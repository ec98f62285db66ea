"""
Declarative base shared by all ORM models of the Contact Form API.
"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
