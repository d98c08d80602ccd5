"""
Shared fixtures for docschema tests.
"""

import pytest

from docschema.config import reset_settings
from docschema.store.memory import InMemoryDocumentStore


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop cached settings so each test sees its own environment."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def store():
    """Create an empty in-memory store."""
    return InMemoryDocumentStore()


@pytest.fixture
def author() -> str:
    """Test author address."""
    return "@test.b3xtmeykhnbpdlm3oplsuxkm6vxirqxbfjcd2lfghnygkbcgmukbq"
