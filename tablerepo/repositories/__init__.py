"""
Repository package for database abstraction layer.

Provides single-table CRUD on top of an injected driver.
"""

from .base_repository import BaseRepository, CrudOperations, TableSource
from .exceptions import NotFoundError, RepositoryError

__all__ = ["BaseRepository", "CrudOperations", "TableSource", "NotFoundError", "RepositoryError"]
