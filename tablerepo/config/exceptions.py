"""
Configuration-related exceptions for tablerepo.

Raised when a repository or record type is declared incorrectly, so the
problem surfaces when the class is defined or the repository is built rather
than on the first query.
"""


class ConfigurationError(Exception):
    """
    Raised when configuration loading or validation fails.

    This exception is used for declaration errors including:
    - Column bindings that name a field the record does not have
    - Missing or empty table identifiers
    - Duplicate column names within one record type
    """
    pass
