"""
Global pytest configuration and fixtures for all tests.
"""

import os

import pytest

# Set testing environment variable as early as possible
os.environ["TESTING"] = "true"

from tablerepo.config.settings import get_settings  # noqa: E402
from tests.utils import MockDriver, UserRepository  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Automatically set up test environment for all tests."""
    os.environ["TESTING"] = "true"

    yield

    if "TESTING" in os.environ:
        del os.environ["TESTING"]


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Drop cached settings so environment patches take effect per test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mock_driver() -> MockDriver:
    """MockDriver with table ``test`` seeded with one row."""
    driver = MockDriver()
    driver.seed("test", {"id": 1234, "login": "Foo"})
    return driver


@pytest.fixture
def repository(mock_driver) -> UserRepository:
    """UserRepository over the seeded ``test`` table."""
    return UserRepository(mock_driver)
