"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.content_post import ContentPost
from db.models.dj_payment import DJPayment

__all__ = [
    "ContentPost",
    "DJPayment",
]
