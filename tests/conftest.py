import json
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from fieldops.main import create_app
from fieldops.models.domain import UserRole
from fieldops.persistence.memory import InMemoryStore
from fieldops.persistence.store import get_store
from fieldops.services import clock

# Roughly a 700m x 1.1km block in central London, (lon, lat) order.
SQUARE_POLYGON = json.dumps(
    {
        "type": "Polygon",
        "coordinates": [
            [[-0.13, 51.50], [-0.12, 51.50], [-0.12, 51.51], [-0.13, 51.51], [-0.13, 51.50]],
        ],
    }
)


class TickingClock:
    """Deterministic clock that advances one second per reading."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


@pytest.fixture
def ticking_clock(monkeypatch: pytest.MonkeyPatch) -> TickingClock:
    ticker = TickingClock(datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc))
    monkeypatch.setattr(clock, "utcnow", ticker)
    return ticker


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def admin(store: InMemoryStore):
    return store.insert_user("admin@example.com", UserRole.ADMIN)


@pytest.fixture
def field_user(store: InMemoryStore):
    return store.insert_user("walker@example.com", UserRole.USER)


@pytest.fixture
def api_client(store: InMemoryStore):
    app = create_app()
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
