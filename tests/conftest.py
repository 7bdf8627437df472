"""Pytest configuration."""
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Ensure project root is importable regardless of where pytest is invoked
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

# Tests always run against the CSV backend
os.environ["DATABASE_URL"] = "none"

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def csv_backend(tmp_path: Path, monkeypatch):
    """Point the storage layer at an empty CSV table under tmp_path."""
    from storage import database
    monkeypatch.setattr(database, "USE_POSTGRES", False)
    monkeypatch.setattr(database, "DATA_DIR", tmp_path)
    return tmp_path
