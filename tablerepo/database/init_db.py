"""
Database Initialization Module

Creates the async engine and the process-wide driver that repositories are
constructed with.
"""

from typing import Optional
from urllib.parse import urlparse

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from tablerepo.config.settings import Settings, get_settings
from tablerepo.database.sqlalchemy_driver import SQLAlchemyDriver
from tablerepo.utils.logger import get_module_logger

logger = get_module_logger(__name__)


def detect_database_type(database_url: str) -> str:
    """
    Detect database type from connection URL.

    Args:
        database_url: Database connection string

    Returns:
        Database type ('postgresql' or 'sqlite')

    Raises:
        ValueError: For unsupported database schemes
    """
    parsed = urlparse(database_url)
    scheme = parsed.scheme.lower()

    if scheme.startswith('postgresql'):
        return 'postgresql'
    elif scheme.startswith('sqlite'):
        return 'sqlite'
    else:
        raise ValueError(f"Unsupported database scheme: {scheme}")


def to_async_url(database_url: str) -> str:
    """Swap a sync database URL for its async DBAPI equivalent."""
    db_type = detect_database_type(database_url)

    if db_type == 'postgresql':
        if not database_url.startswith('postgresql+asyncpg://'):
            database_url = database_url.replace('postgresql://', 'postgresql+asyncpg://', 1)
    elif not database_url.startswith('sqlite+aiosqlite://'):
        database_url = database_url.replace('sqlite://', 'sqlite+aiosqlite://', 1)

    return database_url


def create_async_database_engine(database_url: str, settings: Optional[Settings] = None) -> AsyncEngine:
    """
    Create async database engine with type-specific options.

    Args:
        database_url: Database connection string
        settings: Settings instance (will get default if None)

    Returns:
        SQLAlchemy async engine configured for the database type
    """
    if settings is None:
        settings = get_settings()

    db_type = detect_database_type(database_url)
    database_url = to_async_url(database_url)

    if db_type == 'postgresql':
        return create_async_engine(
            database_url,
            echo=settings.echo_sql,
            pool_size=settings.pool_size,
            max_overflow=settings.pool_max_overflow,
            pool_timeout=settings.pool_timeout,
            pool_recycle=settings.pool_recycle,
            pool_pre_ping=settings.pool_pre_ping,
            connect_args={
                "server_settings": {"application_name": "tablerepo"}
            }
        )

    connect_args = {"check_same_thread": False}

    # In-memory SQLite only lives as long as its single connection
    if ':memory:' in database_url:
        return create_async_engine(
            database_url,
            echo=settings.echo_sql,
            poolclass=StaticPool,
            connect_args=connect_args
        )

    return create_async_engine(
        database_url,
        echo=settings.echo_sql,
        connect_args=connect_args
    )


_async_engine: Optional[AsyncEngine] = None
_driver: Optional[SQLAlchemyDriver] = None


def initialize_driver(database_url: Optional[str] = None) -> SQLAlchemyDriver:
    """
    Initialize the shared async engine and driver.

    Args:
        database_url: Optional database URL, uses settings if not provided

    Returns:
        The process-wide driver
    """
    global _async_engine, _driver

    if database_url is None:
        database_url = get_settings().database_url

    _async_engine = create_async_database_engine(database_url)
    _driver = SQLAlchemyDriver(_async_engine)

    safe_url = make_url(database_url).render_as_string(hide_password=True)
    logger.info(f"Database driver initialized with URL: {safe_url}")
    return _driver


def get_driver() -> SQLAlchemyDriver:
    """
    Get the process-wide driver.

    Raises:
        RuntimeError: If the driver has not been initialized
    """
    if _driver is None:
        raise RuntimeError("Database driver not initialized. Call initialize_driver() first.")
    return _driver


async def dispose_driver() -> None:
    """Dispose the async engine and forget the driver."""
    global _async_engine, _driver

    if _async_engine:
        await _async_engine.dispose()
        logger.info("Async database engine disposed")

    _async_engine = None
    _driver = None
