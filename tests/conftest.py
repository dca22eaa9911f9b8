from datetime import datetime, timedelta, timezone

import mongomock
import pytest
from fastapi.testclient import TestClient

import database
from main import app


def plant_payload(**overrides):
    payload = {
        "name": "Snake Plant",
        "price": 499,
        "categories": ["Indoor", "Air Purifying"],
        "image": "https://example.com/plants/snake.jpg",
        "description": "Hardy upright leaves",
        "scientificName": "Dracaena trifasciata",
        "careLevel": "Easy",
        "sunlight": "Low",
        "watering": "Low",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def db(monkeypatch):
    """In-memory MongoDB installed over the module-level handle."""
    mock_db = mongomock.MongoClient()["plant_catalog_test"]
    monkeypatch.setattr(database, "db", mock_db)
    return mock_db


@pytest.fixture
def client(db):
    return TestClient(app)


@pytest.fixture
def create_plant(client):
    def _create(**overrides):
        response = client.post("/api/plants", json=plant_payload(**overrides))
        assert response.status_code == 201, response.json()
        return response.json()["data"]
    return _create


@pytest.fixture
def clock(monkeypatch):
    """Timestamps one second apart on every write."""
    ticks = iter(datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=i) for i in range(1000))
    monkeypatch.setattr(database, "_now", lambda: next(ticks))
