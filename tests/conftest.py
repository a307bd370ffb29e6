"""Shared pytest fixtures for test modules."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from atbat_predictor.db.pool import ConnectionPool

if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path


@pytest.fixture
def pool(tmp_path: Path) -> Generator[ConnectionPool]:
    """A small pool over a migrated SQLite file, shared by every connection it hands out."""
    connection_pool = ConnectionPool(tmp_path / "atbat.db", size=3, checkout_timeout=2.0)
    yield connection_pool
    connection_pool.close_all()
