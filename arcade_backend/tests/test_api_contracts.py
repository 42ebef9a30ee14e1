"""
API Contract Tests

These tests verify:
1. Response shapes are consistent
2. Error responses follow the standard format
3. HTTP status codes are correct
4. The cron endpoints reject calls without the scheduling credential
   before touching the ledger
"""
import time
from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from arcade_backend.config import settings
from arcade_backend.dependencies import build_services
from arcade_backend.errors import ErrorCode
from arcade_backend.main import app
from arcade_backend.stores.in_memory_store import InMemoryScoreStore
from arcade_backend.stores.profile_store import InMemoryProfileStore
from arcade_backend.tests.fakes import FakeLedger, make_tournament

CRON_SECRET = "test-cron-secret"
AUTH = {"Authorization": f"Bearer {CRON_SECRET}"}


def _flags(**overrides):
    values = {"FEATURE_TOURNAMENT_SCORE_RELAY": False, "RECONCILER_AUTO_CREATE_SUCCESSOR": False}
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.fixture
def ledger():
    now = int(time.time())
    return FakeLedger([make_tournament(tournament_id=1, start_time=now - 3600, end_time=now + 7200)])


@pytest.fixture
def services(ledger, monkeypatch):
    monkeypatch.setattr(settings, "CRON_SECRET", CRON_SECRET)
    services = build_services(
        settings,
        _flags(),
        ledger=ledger,
        score_store=InMemoryScoreStore(),
        profile_store=InMemoryProfileStore(),
    )
    app.state.services = services
    return services


@pytest_asyncio.fixture
async def client(services):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


class TestHealthEndpoints:

    @pytest.mark.asyncio
    async def test_main_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["cron_configured"] is True

    @pytest.mark.asyncio
    async def test_errors_health(self, client):
        response = await client.get("/api/errors/health")
        assert response.status_code == 200
        assert "NO_TOURNAMENT" in response.json()["error_codes"]


class TestScores:

    @pytest.mark.asyncio
    async def test_submit_and_read_history(self, client):
        for score in (10, 5, 20):
            response = await client.post("/api/scores", json={"participant": "0xAA", "score": score})
            assert response.status_code == 200
            assert response.json()["success"] is True

        response = await client.get("/api/scores", params={"participant": "0xAA"})
        data = response.json()

        assert response.status_code == 200
        assert data["best_score"] == 20
        assert [s["score"] for s in data["scores"]] == [10, 5, 20]
        assert data["achievements"] == []

    @pytest.mark.asyncio
    async def test_submit_reports_new_high_score(self, client):
        await client.post("/api/scores", json={"participant": "0xAA", "score": 60})
        response = await client.post("/api/scores", json={"participant": "0xAA", "score": 40})

        data = response.json()
        assert data["best_score"] == 60
        assert data["previous_best"] == 60
        assert data["new_high_score"] is False

    @pytest.mark.asyncio
    async def test_empty_participant_is_invalid_input(self, client, services):
        response = await client.post("/api/scores", json={"participant": "", "score": 5})

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["code"] == ErrorCode.INVALID_INPUT
        assert await services.score_store.leaderboard() == []

    @pytest.mark.asyncio
    async def test_negative_score_is_invalid_input(self, client):
        response = await client.post("/api/scores", json={"participant": "0xAA", "score": -1})
        assert response.status_code == 400
        assert response.json()["details"] == {"field": "score"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"participant": "0xAA", "score": "5"},
            {"participant": "0xAA", "score": 5.5},
            {"participant": 12, "score": 5},
            {"score": 5},
        ],
    )
    async def test_malformed_body_is_invalid_input(self, client, services, body):
        response = await client.post("/api/scores", json=body)

        assert response.status_code == 400
        assert response.json()["code"] == ErrorCode.INVALID_INPUT
        assert response.json()["details"]["errors"]
        assert await services.score_store.leaderboard() == []

    @pytest.mark.asyncio
    async def test_leaderboard_with_display_names(self, client, services):
        await services.score_store.submit("0xAA", 30)
        await services.score_store.submit("0xBB", 50)
        await services.profile_store.put("0xBB", "bee", None)

        response = await client.get("/api/scores")
        data = response.json()

        assert response.status_code == 200
        assert data["limit"] == 100
        assert [(e["rank"], e["participant"], e["display_name"]) for e in data["leaderboard"]] == [
            (1, "0xBB", "bee"),
            (2, "0xAA", None),
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [0, 101])
    async def test_leaderboard_limit_bounds(self, client, limit):
        response = await client.get("/api/scores", params={"limit": limit})
        assert response.status_code == 422


class TestTournament:

    @pytest.mark.asyncio
    async def test_current_tournament(self, client):
        response = await client.get("/api/tournament/current")
        data = response.json()

        assert response.status_code == 200
        assert data["tournament"]["id"] == "1"
        assert data["tournament"]["entry_fee"] == str(10 ** 15)
        assert data["state"] == "active"
        assert 0 < data["ends_in_seconds"] <= 7200

    @pytest.mark.asyncio
    async def test_no_tournament(self, client, ledger):
        ledger.current_id = 0
        response = await client.get("/api/tournament/current")

        assert response.status_code == 404
        assert response.json()["code"] == ErrorCode.NO_TOURNAMENT

    @pytest.mark.asyncio
    async def test_ledger_down_is_bad_gateway(self, client, ledger):
        ledger.read_error = ConnectionError("rpc down")
        response = await client.get("/api/tournament/current")

        assert response.status_code == 502
        assert response.json()["code"] == ErrorCode.UPSTREAM_READ_FAILED


class TestCron:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("headers", [{}, {"Authorization": "Bearer nope"}])
    async def test_rejects_without_credential(self, client, ledger, headers):
        response = await client.get("/api/cron/tournament", headers=headers)

        assert response.status_code == 401
        assert response.json()["success"] is False
        assert ledger.calls == []

    @pytest.mark.asyncio
    async def test_rejects_when_secret_unset(self, client, ledger, monkeypatch):
        monkeypatch.setattr(settings, "CRON_SECRET", None)
        response = await client.get("/api/cron/tournament", headers={"Authorization": "Bearer None"})

        assert response.status_code == 401
        assert ledger.calls == []

    @pytest.mark.asyncio
    async def test_active_tournament(self, client, ledger):
        response = await client.get("/api/cron/tournament", headers=AUTH)
        data = response.json()

        assert response.status_code == 200
        assert data["outcome"] == "still_active"
        assert data["message"] == "Tournament still active"
        assert data["ends_in"].endswith("hours")
        assert ledger.writes == []

    @pytest.mark.asyncio
    async def test_expired_tournament_is_finalized_and_recreated(self, client, ledger):
        now = int(time.time())
        ledger.tournaments[1] = make_tournament(tournament_id=1, start_time=now - 90000, end_time=now - 10)

        response = await client.get("/api/cron/tournament", headers=AUTH)
        data = response.json()

        assert response.status_code == 200
        assert data["success"] is True
        assert data["outcome"] == "finalized_and_recreated"
        assert data["previous_tournament_id"] == "1"
        window = data["new_tournament"]
        assert window["end_time"] - window["start_time"] == 86400
        assert window["entry_fee"] == str(10 ** 15)
        assert ledger.writes == ["finalizeTournament", "createTournament"]

    @pytest.mark.asyncio
    async def test_already_finalized(self, client, ledger):
        ledger.tournaments[1] = make_tournament(tournament_id=1, finalized=True)

        response = await client.get("/api/cron/tournament", headers=AUTH)

        assert response.status_code == 200
        assert response.json()["outcome"] == "already_finalized"
        assert ledger.writes == []

    @pytest.mark.asyncio
    async def test_no_tournament(self, client, ledger):
        ledger.current_id = 0
        response = await client.get("/api/cron/tournament", headers=AUTH)

        assert response.status_code == 404
        assert response.json()["code"] == ErrorCode.NO_TOURNAMENT

    @pytest.mark.asyncio
    async def test_successor_creation_failure(self, client, ledger):
        now = int(time.time())
        ledger.tournaments[1] = make_tournament(tournament_id=1, start_time=now - 90000, end_time=now - 10)
        ledger.reverts.add("createTournament")

        response = await client.get("/api/cron/tournament", headers=AUTH)
        data = response.json()

        assert response.status_code == 502
        assert data["code"] == ErrorCode.SUCCESSOR_CREATION_FAILED
        assert data["details"]["previous_tournament_id"] == "1"
        assert data["details"]["finalize_tx"].startswith("0x")

    @pytest.mark.asyncio
    async def test_successor_recovery(self, client, ledger):
        ledger.tournaments[1] = make_tournament(tournament_id=1, finalized=True)

        response = await client.post("/api/cron/tournament/successor", headers=AUTH)

        assert response.status_code == 200
        assert response.json()["outcome"] == "successor_created"
        assert ledger.writes == ["createTournament"]

    @pytest.mark.asyncio
    async def test_successor_recovery_refused_while_active(self, client, ledger):
        response = await client.post("/api/cron/tournament/successor", headers=AUTH)

        assert response.status_code == 409
        assert response.json()["code"] == ErrorCode.INVALID_STATE
        assert ledger.writes == []


class TestProfile:

    @pytest.mark.asyncio
    async def test_unknown_profile_has_empty_fields(self, client):
        response = await client.get("/api/profile/0xAA")
        data = response.json()

        assert response.status_code == 200
        assert data["display_name"] is None
        assert data["best_score"] == 0

    @pytest.mark.asyncio
    async def test_update_and_achievements(self, client, services):
        await services.score_store.submit("0xAA", 120)

        response = await client.put("/api/profile/0xAA", json={"display_name": "runner", "bio": "hi"})
        data = response.json()

        assert response.status_code == 200
        assert data["display_name"] == "runner"
        assert [a["name"] for a in data["achievements"]] == ["Rookie Crosser", "Bold Adventurer"]

        fetched = (await client.get("/api/profile/0xAA")).json()
        assert fetched["bio"] == "hi"

    @pytest.mark.asyncio
    async def test_display_name_too_long(self, client):
        response = await client.put("/api/profile/0xAA", json={"display_name": "x" * 33})

        assert response.status_code == 400
        assert response.json()["details"] == {"field": "display_name"}
