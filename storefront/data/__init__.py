"""
Module 'data': point d'entrée public de la couche d'accès aux collections.
"""

from .repository import (
    Condition,
    DataRepository,
    NotFoundError,
    RepoResult,
    RepositoryError,
    UNIQUE_VIOLATION,
    now_iso,
)
from .query import TableQuery

__all__ = [
    "Condition",
    "DataRepository",
    "NotFoundError",
    "RepoResult",
    "RepositoryError",
    "UNIQUE_VIOLATION",
    "now_iso",
    "TableQuery",
]
