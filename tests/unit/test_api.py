"""
API tests with FastAPI's TestClient.

The application state is replaced through dependency overrides with an
in-memory store and a static candidate source: no network, no disk.
"""
import inspect

import pytest
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient
from pydantic import SecretStr

from api.dependencies import AppState, get_app_state
from api.main import app
from recommandateur.adapters.base import StaticCandidateSource
from recommandateur.recommendation.schemas import Candidate
from recommandateur.settings import Settings
from recommandateur.storage.kv import InMemoryKVStore

TOKEN = "test-token"
AUTH = {"Authorization": f"Bearer {TOKEN}"}


def _pool():
    return [
        Candidate(
            titre="Alien", annee="1979", type="film", genres=["Science fiction", "Épouvante-horreur"],
            presse=4.5, spectateurs=4.3, accroche="Dans l'espace...",
            affiche_url="https://img.example/alien.jpg", canonical_key="alien-1979",
        ),
        Candidate(
            titre="Dune", annee="2021", type="film", genres=["Science fiction"],
            presse=3.9, spectateurs=4.0, affiche_url="https://img.example/dune.jpg",
            canonical_key="dune-2021",
        ),
    ]


@pytest.fixture
def state():
    settings = Settings(api_token=SecretStr(TOKEN), kv_backend="memory")
    return AppState(settings=settings, kv=InMemoryKVStore(), source=StaticCandidateSource(_pool()))


@pytest.fixture
def client(state):
    app.dependency_overrides[get_app_state] = lambda: state
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestAuth:

    def test_health_is_public(self, client):
        assert client.get("/api/v1/health").json() == {"ok": True}

    def test_missing_token(self, client):
        assert client.get("/api/v1/lists/ratings").status_code == 401

    def test_wrong_token(self, client):
        assert client.get("/api/v1/lists/ratings", headers={"Authorization": "Bearer nope"}).status_code == 401

    @pytest.mark.parametrize("kwargs", [
        {"headers": AUTH},
        {"headers": {"X-Api-Token": TOKEN}},
        {"params": {"api_token": TOKEN}},
    ])
    def test_accepted_token_forms(self, client, kwargs):
        assert client.get("/api/v1/lists/ratings", **kwargs).status_code == 200

    def test_no_configured_token_refuses_everything(self, client, state):
        state.settings = Settings(kv_backend="memory", api_token=None)
        assert client.get("/api/v1/lists/ratings", headers=AUTH).status_code == 401


class TestLists:

    def test_add_then_read(self, client):
        resp = client.post("/api/v1/lists/ratings", json={"canonical_key": "Matrix, The", "rating": 4}, headers=AUTH)
        assert resp.status_code == 201
        assert resp.json()["added"] is True

        page = client.get("/api/v1/lists/ratings", headers=AUTH).json()
        assert page["total"] == 1
        assert page["items"][0]["canonical_key"] == "matrix-the"

    def test_duplicate_answers_200(self, client):
        body = {"canonical_key": "Alien 1979"}
        client.post("/api/v1/lists/parked", json=body, headers=AUTH)
        resp = client.post("/api/v1/lists/parked", json=body, headers=AUTH)
        assert resp.status_code == 200
        assert resp.json()["reason"] == "duplicate"

    def test_conflict_answers_409(self, client):
        client.post("/api/v1/lists/ratings", json={"canonical_key": "Matrix, The", "rating": 4}, headers=AUTH)
        resp = client.post("/api/v1/lists/parked", json={"canonical_key": "matrix-the"}, headers=AUTH)
        assert resp.status_code == 409
        assert resp.json() == {"ok": False, "conflict_with": "ratings"}

    def test_invalid_rating_answers_400(self, client):
        resp = client.post("/api/v1/lists/ratings", json={"canonical_key": "x", "rating": 7}, headers=AUTH)
        assert resp.status_code == 400
        assert "error" in resp.json()

    def test_unknown_list(self, client):
        assert client.get("/api/v1/lists/favorites", headers=AUTH).status_code == 422

    def test_pagination_is_clamped(self, client):
        page = client.get("/api/v1/lists/parked", params={"offset": -3, "limit": 0}, headers=AUTH).json()
        assert (page["offset"], page["limit"]) == (0, 1)


class TestPodium:

    def test_keys_must_be_parked(self, client):
        client.post("/api/v1/lists/parked", json={"canonical_key": "alien-1979"}, headers=AUTH)

        bad = client.put("/api/v1/lists/parked_podium", json={"keys": ["alien-1979", "dune-2021"]}, headers=AUTH)
        assert bad.status_code == 400
        assert bad.json()["missing"] == ["dune-2021"]

        ok = client.put("/api/v1/lists/parked_podium", json={"keys": ["alien-1979", "alien-1979"]}, headers=AUTH)
        assert ok.json()["keys"] == ["alien-1979"]
        assert client.get("/api/v1/lists/parked_podium", headers=AUTH).json()["keys"] == ["alien-1979"]


class TestCachePool:

    def test_bogus_names_dropped(self, client):
        resp = client.get("/api/v1/cache/pool", params={"key": ["ratings", "bogus"]}, headers=AUTH)
        assert set(resp.json()) == {"synced_at", "ratings"}

    def test_json_array_in_keys(self, client):
        resp = client.get("/api/v1/cache/pool", params={"keys": '["parked","rejects"]'}, headers=AUTH)
        assert set(resp.json()) == {"synced_at", "parked", "rejects"}

    def test_bracket_keys(self, client):
        resp = client.get("/api/v1/cache/pool", params={"keys[]": "rejects"}, headers=AUTH)
        assert set(resp.json()) == {"synced_at", "rejects"}

    def test_defaults_to_all_lists(self, client):
        resp = client.get("/api/v1/cache/pool", headers=AUTH)
        assert set(resp.json()) == {"synced_at", "ratings", "parked", "rejects"}


class TestRecommendations:

    def test_next(self, client):
        resp = client.get("/api/v1/recommendations/next", params={"type": "film", "genre": "science"}, headers=AUTH)

        assert resp.status_code == 200
        body = resp.json()
        assert body["titre"] == "Alien"
        assert body["poster_url"] == "https://img.example/alien.jpg"
        assert body["notes"] == {"spectateurs": "4.3", "presse": "4.5"}
        assert sum(body["score_breakdown"]["weights"].values()) == pytest.approx(1.0)
        assert body["intro"]

    def test_listed_title_is_skipped(self, client):
        client.post("/api/v1/lists/rejects", json={"canonical_key": "Alien (1979)"}, headers=AUTH)
        resp = client.get("/api/v1/recommendations/next", params={"type": "film", "genre": "science"}, headers=AUTH)
        assert resp.json()["titre"] == "Dune"

    def test_missing_parameters(self, client):
        assert client.get("/api/v1/recommendations/next", params={"type": "film"}, headers=AUTH).status_code == 400

    def test_catalog_failure_answers_404(self, client, state):
        """An upstream catalog error is reported like an empty result, never as a 5xx."""
        class FailingSource(StaticCandidateSource):
            def fetch_candidates(self, type, genre_query, thresholds=None):
                raise ConnectionError("catalog down")

        state.source = FailingSource([])
        resp = client.get("/api/v1/recommendations/next", params={"type": "film", "genre": "drame"}, headers=AUTH)
        assert resp.status_code == 404
        assert resp.json()["error"] == "Aucune recommandation valide trouvée."

    def test_nothing_eligible(self, client):
        resp = client.get("/api/v1/recommendations/next", params={"type": "serie", "genre": "drame"}, headers=AUTH)
        assert resp.status_code == 404
        assert resp.json()["error"] == "Aucune recommandation valide trouvée."


class TestConfig:

    def test_settings_default_and_patch(self, client):
        assert client.get("/api/v1/settings").json()["thresholds"]["default"] == 3.0

        resp = client.put("/api/v1/settings", json={"thresholds": {"default": 4.2}}, headers=AUTH)
        assert resp.status_code == 200

        stored = client.get("/api/v1/settings").json()
        assert stored["thresholds"] == {"default": 4.2, "horror": 2.5}

    def test_settings_write_needs_token(self, client):
        assert client.put("/api/v1/settings", json={}).status_code == 401

    def test_raised_threshold_changes_recommendation(self, client):
        client.put("/api/v1/settings", json={"thresholds": {"default": 4.2}}, headers=AUTH)
        resp = client.get("/api/v1/recommendations/next", params={"type": "film", "genre": "tous"}, headers=AUTH)
        assert resp.json()["titre"] == "Alien"

    def test_menu_update(self, client):
        resp = client.put("/api/v1/meta/menu", json={"menu": [{"label": "Reco"}, {"label": ""}]}, headers=AUTH)
        assert resp.status_code == 200
        assert client.get("/api/v1/meta/menu").json()["menu"] == [{"num": 1, "emoji": "1️⃣", "label": "Reco"}]


class TestBackup:

    def test_export_import_cycle(self, client):
        client.post("/api/v1/lists/parked", json={"canonical_key": "Dune 2021"}, headers=AUTH)
        dump = client.get("/api/v1/backup/export", headers=AUTH).json()
        assert dump["parked"][0]["canonical_key"] == "dune-2021"
        assert dump["parked_podium"] == []
        assert dump["ratings"] is None

        resp = client.post("/api/v1/backup/import", json={"parked": [], "rejects": "oops"}, headers=AUTH)
        assert resp.json()["imported"] == ["parked", "rejects"]
        assert client.get("/api/v1/lists/parked", headers=AUTH).json()["total"] == 0


class TestDiag:

    def test_counts(self, client):
        client.post("/api/v1/lists/rejects", json={"canonical_key": "x"}, headers=AUTH)
        body = client.get("/api/v1/diag", headers=AUTH).json()
        assert body["ok"] is True
        assert body["counts"] == {"ratings": 0, "parked": 0, "rejects": 1, "parked_podium": 0}
        assert body["versions"]["config_version"] == 4


class TestBlockingHandlers:

    # Handlers that reach the store or the catalog must run in the threadpool
    NON_BLOCKING = {"/api/v1/health", "/api/v1/ready", "/"}

    def test_store_and_catalog_handlers_are_sync(self):
        routes = [r for r in app.routes if isinstance(r, APIRoute) and r.path not in self.NON_BLOCKING]
        assert routes
        offenders = [r.path for r in routes if inspect.iscoroutinefunction(r.endpoint)]
        assert offenders == [], f"async handlers doing blocking I/O: {offenders}"
