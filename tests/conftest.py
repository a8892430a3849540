"""
Pytest configuration and fixtures for Cipherslip tests.

Created by orpheus497

Provides common fixtures and test utilities for unit and integration tests.
"""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from cipherslip.session import Session
from cipherslip.storage import JsonFileStore, MemoryStore


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory for test data.

    Yields:
        Path: Temporary directory path

    Cleanup:
        Automatically removes directory after test
    """
    tmp = Path(tempfile.mkdtemp(prefix="cipherslip_test_"))
    try:
        yield tmp
    finally:
        shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def memory_store() -> MemoryStore:
    """Provide an empty in-memory record store."""
    return MemoryStore()


@pytest.fixture
def file_store(temp_dir: Path) -> JsonFileStore:
    """Provide a file-backed record store in a temporary directory."""
    return JsonFileStore(temp_dir / "data")


@pytest.fixture
def alice() -> Session:
    """A session with a freshly generated identity."""
    session = Session(MemoryStore())
    session.generate_identity()
    return session


@pytest.fixture
def bob() -> Session:
    """A second, independent session with its own identity."""
    session = Session(MemoryStore())
    session.generate_identity()
    return session


@pytest.fixture
def carol() -> Session:
    """A third party holding an unrelated identity."""
    session = Session(MemoryStore())
    session.generate_identity()
    return session


# Pytest marks
def pytest_configure(config):
    """
    Configure pytest markers.

    Args:
        config: Pytest configuration object
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


# Test collection hooks
def pytest_collection_modifyitems(config, items):
    """
    Modify test collection to add markers based on test location.

    Args:
        config: Pytest configuration
        items: List of collected test items
    """
    for item in items:
        # Add unit marker to tests in unit/ directory
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
