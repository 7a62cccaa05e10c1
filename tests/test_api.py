"""HTTP layer: auth, camelCase contract, error mapping, background history."""

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from src.core.config import settings
from src.core.dependencies import get_history_repository
from src.core.models.db_helper import db_helper
from src.core.security import create_access_token
from src.main import create_app
from src.nsn_search.models import ReferenceTable
from src.nsn_search.services.search_service import SearchService


class FakeHistoryRepository:
    def __init__(self, fail: bool = False):
        self.added = []
        self.fail = fail

    async def add(self, session, *, user_id, query):
        if self.fail:
            raise OperationalError("insert", {}, Exception("db down"))
        self.added.append((user_id, query))
        return SimpleNamespace(id=len(self.added), user_id=user_id, query=query)

    async def list_recent(self, session, *, user_id, limit=20):
        created = datetime(2026, 1, 1, tzinfo=timezone.utc)
        rows = [
            SimpleNamespace(id=i + 1, query=q, created_at=created)
            for i, (u, q) in enumerate(self.added)
            if u == user_id
        ]
        return list(reversed(rows))[:limit]


class FakeSession:
    def __init__(self):
        self.commits = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def commit(self):
        self.commits += 1


def _token(status="active", sub="user-1"):
    return create_access_token(subject=sub, extra={"subscription_status": status})


def _auth(status="active", sub="user-1"):
    return {"Authorization": f"Bearer {_token(status, sub)}"}


@pytest.fixture
def history_repo():
    return FakeHistoryRepository()


@pytest.fixture
def app(store, search_config, history_repo):
    # без lifespan: в БД не ходим, зависимости кладём руками
    app = create_app()
    app.state.search_service = SearchService(store, search_config)
    app.state.session_factory = FakeSession
    app.dependency_overrides[get_history_repository] = lambda: history_repo

    async def _session():
        yield FakeSession()

    app.dependency_overrides[db_helper.session_getter] = _session
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


def test_search_requires_token(client):
    assert client.get("/api/v1/search", params={"q": "015726371"}).status_code == 401


def test_search_rejects_bad_token(client):
    resp = client.get(
        "/api/v1/search",
        params={"q": "015726371"},
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert resp.status_code == 401


@pytest.mark.parametrize("status", ["canceled", "past_due", ""])
def test_search_requires_active_subscription(client, status):
    resp = client.get("/api/v1/search", params={"q": "015726371"}, headers=_auth(status))
    assert resp.status_code == 403


def test_exact_search_response_is_camel_case(client):
    resp = client.get("/api/v1/search", params={"q": "5965-01-572-6371"}, headers=_auth())

    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 1
    assert body["strategy"] == "exact_match"
    assert body["totalBasis"] == "filtered"
    item = body["results"][0]
    assert item["nsn"] == "5965015726371"
    assert item["classIX"] is True
    assert item["unitPrice"] == "125.50"
    assert item["alternateNames"] == ["HEADSET-MICROPHONE", "HANDSET"]
    assert "class_ix" not in item


def test_trialing_subscription_is_allowed(client):
    resp = client.get("/api/v1/search", params={"q": "015726371"}, headers=_auth("trialing"))
    assert resp.status_code == 200


def test_search_filters_from_query_string(client):
    resp = client.get(
        "/api/v1/search",
        params={"q": "0157263", "classIX": "true", "minPrice": "100"},
        headers=_auth(),
    )

    body = resp.json()
    assert resp.status_code == 200
    assert body["totalBasis"] == "candidates"
    assert body["total"] == 4
    assert [r["niin"] for r in body["results"]] == ["015726371"]


def test_malformed_price_filter_matches_nothing(client):
    resp = client.get(
        "/api/v1/search",
        params={"q": "015726371", "maxPrice": "cheap"},
        headers=_auth(),
    )
    assert resp.status_code == 200
    assert resp.json()["results"] == []


def test_short_query_returns_empty_page(client, store):
    resp = client.get("/api/v1/search", params={"q": "ab"}, headers=_auth())

    assert resp.status_code == 200
    assert resp.json()["results"] == []
    assert store.calls == []


@pytest.mark.parametrize("params", [{"q": "0157263", "page": 0}, {"q": "0157263", "limit": 10_000}])
def test_invalid_paging_is_rejected(client, params):
    assert client.get("/api/v1/search", params=params, headers=_auth()).status_code == 422


def test_storage_outage_maps_to_503(client, store):
    store.failures[ReferenceTable.STOCK] = OperationalError("select", {}, Exception("db down"))
    resp = client.get("/api/v1/search", params={"q": "015726371"}, headers=_auth())
    assert resp.status_code == 503


def test_search_is_recorded_in_background(client, history_repo):
    client.get("/api/v1/search", params={"q": " headset "}, headers=_auth(sub="42"))
    assert history_repo.added == [("42", "headset")]


def test_blank_query_is_not_recorded(client, history_repo):
    client.get("/api/v1/search", params={"q": "   "}, headers=_auth())
    assert history_repo.added == []


def test_history_failure_does_not_break_search(app):
    app.dependency_overrides[get_history_repository] = lambda: FakeHistoryRepository(fail=True)
    resp = TestClient(app).get("/api/v1/search", params={"q": "015726371"}, headers=_auth())
    assert resp.status_code == 200
    assert resp.json()["total"] == 1


def test_nsn_detail(client):
    resp = client.get("/api/v1/nsn/015726380", headers=_auth())

    assert resp.status_code == 200
    body = resp.json()
    assert body["nsn"] == "5965015726380"
    assert body["name"] == "Unknown Item"
    assert body["unitOfIssue"] == "PR"


def test_nsn_detail_accepts_dashed_nsn(client):
    resp = client.get("/api/v1/nsn/5965-01-572-6372", headers=_auth())
    assert resp.status_code == 200
    assert resp.json()["niin"] == "015726372"


@pytest.mark.parametrize("niin,expected", [("12345", 400), ("999999999", 404)])
def test_nsn_detail_errors(client, niin, expected):
    assert client.get(f"/api/v1/nsn/{niin}", headers=_auth()).status_code == expected


def test_nsn_detail_requires_subscription(client):
    assert client.get("/api/v1/nsn/015726371", headers=_auth("canceled")).status_code == 403


def test_history_round_trip(client):
    headers = _auth(status="canceled", sub="7")
    assert client.post("/api/v1/history", json={"query": "bolt"}, headers=headers).json() == {"success": True}
    client.post("/api/v1/history", json={"query": "nut"}, headers=headers)

    resp = client.get("/api/v1/history", headers=headers)

    assert resp.status_code == 200
    assert [h["query"] for h in resp.json()] == ["nut", "bolt"]
    assert "createdAt" in resp.json()[0]


def test_history_rejects_empty_query(client):
    assert client.post("/api/v1/history", json={"query": ""}, headers=_auth()).status_code == 422


def test_long_query_is_searched_not_rejected(client, history_repo):
    resp = client.get("/api/v1/search", params={"q": "BOLT " * 60}, headers=_auth())

    assert resp.status_code == 200
    assert resp.json()["results"] == []
    [(_, recorded)] = history_repo.added
    assert len(recorded) == 200


@pytest.mark.parametrize("value,expected", [("maybe", 422), ("", 200), ("0", 200), ("yes", 200)])
def test_class_ix_must_be_boolean(client, value, expected):
    resp = client.get("/api/v1/search", params={"q": "0157263", "classIX": value}, headers=_auth())
    assert resp.status_code == expected


def test_dashed_fsc_filter(client):
    resp = client.get("/api/v1/search", params={"q": "0157263", "fsc": "59-65"}, headers=_auth())
    assert [r["niin"] for r in resp.json()["results"]] == ["015726371", "015726372", "015726399"]


def test_history_rejects_blank_query(client, history_repo):
    resp = client.post("/api/v1/history", json={"query": "   "}, headers=_auth())
    assert resp.status_code == 422
    assert history_repo.added == []


def test_history_query_is_stripped(client, history_repo):
    client.post("/api/v1/history", json={"query": "  bolt  "}, headers=_auth(sub="9"))
    assert history_repo.added == [("9", "bolt")]


def test_openapi_points_to_login_service(client):
    schemes = client.get("/openapi.json").json()["components"]["securitySchemes"]
    [scheme] = schemes.values()
    assert scheme["flows"]["password"]["tokenUrl"] == settings.auth.token_url
