"""
Global pytest configuration and fixtures for trivia bot tests

Provides:
- Temporary database paths and connected databases
- Config file writers
"""

import json

import pytest
import pytest_asyncio
import yaml

from common.database import BotDatabase


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom settings"""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "plugin: Plugin tests")


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
def temp_db_path(tmp_path):
    """Path for a throwaway SQLite database file"""
    return str(tmp_path / "test_trivia.db")


@pytest_asyncio.fixture
async def db(temp_db_path):
    """Connected database with tables created"""
    database = BotDatabase(temp_db_path)
    await database.connect(create_tables=True)
    yield database
    await database.close()


# ============================================================================
# Config Files
# ============================================================================

@pytest.fixture
def write_config(tmp_path):
    """Factory writing a config dict to a .json or .yaml file"""

    def _write(data, suffix=".json"):
        path = tmp_path / f"config{suffix}"
        if suffix == ".json":
            path.write_text(json.dumps(data), encoding="utf-8")
        else:
            path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return str(path)

    return _write
