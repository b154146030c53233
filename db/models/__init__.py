"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.rappel import RappelRecord

__all__ = [
    "RappelRecord",
]
