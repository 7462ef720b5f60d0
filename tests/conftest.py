"""Shared fixtures for feed_ingest tests."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import aiosqlite
import pytest

from feed_ingest.storage.database import init_database


FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def anyio_backend():
    """aiosqlite only runs on asyncio."""
    return "asyncio"


@pytest.fixture
def load_fixture():
    """Read a feed document from tests/fixtures as bytes."""
    def _load(name: str) -> bytes:
        return (FIXTURES_DIR / name).read_bytes()

    return _load


@pytest.fixture
async def in_memory_db():
    """Create an in-memory database for testing."""
    db = await aiosqlite.connect(":memory:")
    db.row_factory = aiosqlite.Row
    await init_database(db)

    # Patch get_database to return our in-memory connection
    with patch("feed_ingest.storage.database.get_database", AsyncMock(return_value=db)):
        yield db

    await db.close()
