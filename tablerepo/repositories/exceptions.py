"""
Exceptions raised by repositories.

Only absence is signalled here. Errors coming from the driver are never
wrapped, so callers can tell "no such row" apart from any database failure by
exception type alone.
"""

from typing import Any, Dict, Optional


class RepositoryError(Exception):
    """
    Base exception for errors raised by the repository layer itself.
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        """
        Initialize repository error.

        Args:
            message: Human-readable error description
            context: Additional context data for debugging
        """
        super().__init__(message)
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": str(self),
            "context": self.context,
        }


class NotFoundError(RepositoryError):
    """
    No row matched the lookup, or a write reported zero affected rows.

    Always carries the same message; the targeted table and key are in
    ``context``.
    """

    MESSAGE = "Not Found."

    def __init__(self, table: str, id_field_name: str, id_value: Any):
        super().__init__(
            self.MESSAGE,
            context={"table": table, "id_field_name": id_field_name, "id": id_value},
        )
        self.table = table
        self.id_field_name = id_field_name
        self.id_value = id_value
