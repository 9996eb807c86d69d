"""
Database Package

Driver capability, the SQLAlchemy driver, and engine initialization.
"""

from .driver import Driver, MutationResult, RowSet, StatementResult, expand_statement
from .init_db import dispose_driver, get_driver, initialize_driver
from .sqlalchemy_driver import SQLAlchemyDriver

__all__ = [
    "Driver",
    "MutationResult",
    "RowSet",
    "StatementResult",
    "expand_statement",
    "SQLAlchemyDriver",
    "initialize_driver",
    "get_driver",
    "dispose_driver",
]
