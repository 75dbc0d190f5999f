import sys
from pathlib import Path
import pytest
from fastapi.testclient import TestClient

# Add the src directory to Python path
src_path = str(Path(__file__).parent.parent / "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from monopoly.app import create_app
from monopoly.config import Settings
from monopoly.db import Gateway, create_engine

# In-memory SQLite; every engine gets its own empty database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def settings():
    return Settings(database_url_raw=TEST_DATABASE_URL, db_ssl=False)


@pytest.fixture
def app(settings):
    return create_app(settings)


# Entering the client runs the lifespan, so the database is connected and seeded
@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
async def gateway(settings):
    gateway = Gateway(create_engine(settings))
    await gateway.connect()
    yield gateway
    await gateway.close()
