"""Pytest fixtures: per-test SQLite database and an in-memory stats service."""
import os
from collections import Counter
from datetime import datetime, timedelta, timezone

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
import requests
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from ewm.clients.stats_client import StatsGateway, get_stats_client
from ewm.database import Base, build_engine, get_db
from ewm.main import app

# Import all models so they register with Base.metadata
from ewm.models.user import User                        # noqa: F401
from ewm.models.category import Category                # noqa: F401
from ewm.models.event import Event                      # noqa: F401
from ewm.models.request import ParticipationRequest     # noqa: F401


class FakeStats(StatsGateway):
    """Records hits in memory and answers view queries from them."""

    def __init__(self):
        self.hits: list[dict] = []
        self.fail = False

    def record_hit(self, app, uri, ip, timestamp):
        if self.fail:
            raise requests.ConnectionError("stats down")
        self.hits.append({"app": app, "uri": uri, "ip": ip, "timestamp": timestamp})

    def query_views(self, uris, start, end, unique=False):
        if self.fail:
            raise requests.ConnectionError("stats down")
        counts = Counter()
        seen = set()
        for hit in self.hits:
            if hit["uri"] not in uris or not (start <= hit["timestamp"] <= end):
                continue
            if unique and (hit["uri"], hit["ip"]) in seen:
                continue
            seen.add((hit["uri"], hit["ip"]))
            counts[hit["uri"]] += 1
        return dict(counts)


class StubHttpResponse:
    def __init__(self, body=None, status_code=200):
        self._body = body
        self.status_code = status_code

    def json(self):
        return self._body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class StubHttpSession:
    """Stands in for ``requests.Session``: captures calls, replays one response."""

    def __init__(self, response):
        self.response = response
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append(("POST", url, json, timeout))
        return self.response

    def get(self, url, params=None, timeout=None):
        self.calls.append(("GET", url, params, timeout))
        return self.response


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """Create a fresh SQLite engine for each test."""
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session for direct service calls."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def stats():
    return FakeStats()


@pytest.fixture(scope="function")
def client(db_engine, stats):
    """FastAPI TestClient with database and stats dependencies overridden."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_stats_client] = lambda: stats
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers: build entities through the API, return the response JSON
# ---------------------------------------------------------------------------
def future(hours: float = 24) -> str:
    return (datetime.now(timezone.utc) + timedelta(hours=hours)).isoformat()


def create_test_user(client: TestClient, name: str = "Test User", email: str | None = None) -> dict:
    """Helper: POST /admin/users and return response JSON."""
    email = email or f"{name.lower().replace(' ', '.')}@example.com"
    resp = client.post("/admin/users/", json={"name": name, "email": email})
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_category(client: TestClient, name: str = "Concerts") -> dict:
    """Helper: POST /admin/categories and return response JSON."""
    resp = client.post("/admin/categories/", json={"name": name})
    assert resp.status_code == 201, resp.text
    return resp.json()


def event_payload(category_id: str, **overrides) -> dict:
    payload = {
        "annotation": "An evening of live jazz by the river",
        "category": category_id,
        "description": "Local bands play on the open-air stage until midnight.",
        "event_date": future(48),
        "location": {"lat": 55.75, "lon": 37.62},
        "title": "Jazz Night",
    }
    payload.update(overrides)
    return payload


def create_test_event(client: TestClient, user_id: str, category_id: str, **overrides) -> dict:
    """Helper: POST /users/{id}/events and return response JSON."""
    resp = client.post(f"/users/{user_id}/events/", json=event_payload(category_id, **overrides))
    assert resp.status_code == 201, resp.text
    return resp.json()


def publish(client: TestClient, event_id: str) -> dict:
    resp = client.patch(f"/admin/events/{event_id}", json={"state_action": "PUBLISH_EVENT"})
    assert resp.status_code == 200, resp.text
    return resp.json()


def create_published_event(client: TestClient, **overrides) -> tuple[dict, dict]:
    """Create an initiator, a category, and a published event. Returns (initiator, event)."""
    owner = create_test_user(client, name="Owner")
    category = create_test_category(client)
    event = create_test_event(client, owner["id"], category["id"], **overrides)
    return owner, publish(client, event["id"])


def request_participation(client: TestClient, user_id: str, event_id: str):
    return client.post(f"/users/{user_id}/requests/", params={"event_id": event_id})
