"""
app/repositories package marker.
"""

from app.repositories.recall_repository import RecallRepository

__all__ = [
    "RecallRepository",
]
