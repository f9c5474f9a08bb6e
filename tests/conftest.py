import pytest
from fastapi.testclient import TestClient

from songbox_api.app import create_app
from songbox_api.storage import SongStore


@pytest.fixture
def store():
    s = SongStore.from_url("sqlite://")
    s.create_schema()
    return s


@pytest.fixture
def client(store):
    with TestClient(create_app(store)) as c:
        yield c
