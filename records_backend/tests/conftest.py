import sys
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture()
def tmp_db_path(tmp_path):
    return str(tmp_path / "records_test.db")


@pytest.fixture()
def repo(tmp_db_path):
    from records_backend.db import connect_sqlite
    from records_backend.repository import SqliteRecordRepository

    r = SqliteRecordRepository(connect_sqlite(tmp_db_path))
    r.ensure_schema()
    yield r
    r.close()


@pytest.fixture()
def client(repo):
    # Build the app around the temp repository; startup hooks leave it alone
    from records_backend.api import create_app
    from records_backend.db import Settings
    from fastapi.testclient import TestClient
    return TestClient(create_app(repository=repo, settings=Settings()))


@pytest.fixture()
def album(client):
    res = client.post("/records", json={"title": "Blue Train", "artist": "John Coltrane", "price": 56})
    assert res.status_code == 201
    return res.json()
