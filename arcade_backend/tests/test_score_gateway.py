"""
Score Submission Gateway Tests
"""
import asyncio
import pytest
from datetime import datetime, timezone

from arcade_backend.errors import InvalidInputError
from arcade_backend.services.score_submission_gateway import ScoreSubmissionGateway
from arcade_backend.services.tournament_state_reader import TournamentStateReader
from arcade_backend.services.transaction_submitter import TransactionSubmitter
from arcade_backend.stores.in_memory_store import InMemoryScoreStore
from arcade_backend.tests.fakes import NOW, FakeLedger, make_tournament

PLAYER = "0x52908400098527886E0F7030069857D2E4169EE7"


def clock():
    return datetime.fromtimestamp(NOW, tz=timezone.utc)


@pytest.fixture
def store():
    return InMemoryScoreStore()


@pytest.fixture
def ledger():
    ledger = FakeLedger([make_tournament(tournament_id=2)])
    ledger.entered.add((2, PLAYER))
    return ledger


def relay_gateway(store, ledger):
    return ScoreSubmissionGateway(
        store,
        reader=TournamentStateReader(ledger),
        submitter=TransactionSubmitter(ledger),
        relay_enabled=True,
        clock=clock,
    )


class TestSubmission:

    @pytest.mark.asyncio
    async def test_empty_participant_rejected_and_store_unchanged(self, store):
        gateway = ScoreSubmissionGateway(store)

        with pytest.raises(InvalidInputError) as exc_info:
            await gateway.submit("", 5)

        assert exc_info.value.status_code == 400
        assert await store.leaderboard() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("score", [-1, "5", 2.5, None])
    async def test_bad_score_rejected(self, store, score):
        gateway = ScoreSubmissionGateway(store)
        with pytest.raises(InvalidInputError):
            await gateway.submit(PLAYER, score)
        assert await store.history(PLAYER) == []

    @pytest.mark.asyncio
    async def test_reports_new_best(self, store):
        gateway = ScoreSubmissionGateway(store, clock=clock)

        first = await gateway.submit(PLAYER, 10)
        lower = await gateway.submit(PLAYER, 4)
        higher = await gateway.submit(PLAYER, 25)

        assert (first.previous_best, first.best_score, first.new_high_score) == (0, 10, True)
        assert (lower.previous_best, lower.best_score, lower.new_high_score) == (10, 10, False)
        assert (higher.previous_best, higher.best_score, higher.new_high_score) == (10, 25, True)

    @pytest.mark.asyncio
    async def test_observed_at_comes_from_clock(self, store):
        gateway = ScoreSubmissionGateway(store, clock=clock)
        await gateway.submit(PLAYER, 1)
        assert (await store.history(PLAYER))[0].observed_at == clock()

    @pytest.mark.asyncio
    async def test_result_payload_without_relay(self, store):
        result = await ScoreSubmissionGateway(store).submit(PLAYER, 7)
        assert result.to_dict() == {
            "accepted": True,
            "participant": PLAYER,
            "score": 7,
            "best_score": 7,
            "previous_best": 0,
            "new_high_score": True,
        }


    @pytest.mark.asyncio
    async def test_concurrent_submissions_see_each_other(self, store):
        gateway = ScoreSubmissionGateway(store, clock=clock)

        high, low = await asyncio.gather(gateway.submit(PLAYER, 100), gateway.submit(PLAYER, 90))

        assert (high.previous_best, high.new_high_score) == (0, True)
        assert (low.previous_best, low.best_score, low.new_high_score) == (100, 100, False)


class TestRelay:

    @pytest.mark.asyncio
    async def test_relays_new_best_for_entered_player(self, store, ledger):
        result = await relay_gateway(store, ledger).submit(PLAYER, 30)

        assert result.relay_tx is not None
        assert ledger.scores == [30]

    @pytest.mark.asyncio
    async def test_does_not_relay_non_best(self, store, ledger):
        gateway = relay_gateway(store, ledger)
        await gateway.submit(PLAYER, 30)
        result = await gateway.submit(PLAYER, 20)

        assert result.relay_tx is None
        assert ledger.scores == [30]

    @pytest.mark.asyncio
    async def test_does_not_relay_zero(self, store, ledger):
        await relay_gateway(store, ledger).submit(PLAYER, 0)
        assert ledger.writes == []

    @pytest.mark.asyncio
    async def test_skips_player_who_has_not_entered(self, store, ledger):
        ledger.entered.clear()
        result = await relay_gateway(store, ledger).submit(PLAYER, 30)

        assert result.relay_tx is None
        assert result.relay_error is None
        assert ledger.writes == []

    @pytest.mark.asyncio
    async def test_skips_when_tournament_not_active(self, store):
        ledger = FakeLedger([make_tournament(tournament_id=2, end_time=NOW - 1)])
        ledger.entered.add((2, PLAYER))

        await relay_gateway(store, ledger).submit(PLAYER, 30)

        assert ledger.writes == []

    @pytest.mark.asyncio
    async def test_concurrent_submissions_relay_once(self, store, ledger):
        gateway = relay_gateway(store, ledger)

        await asyncio.gather(gateway.submit(PLAYER, 100), gateway.submit(PLAYER, 90))

        assert ledger.scores == [100]
        assert ledger.writes == ["submitScore"]

    @pytest.mark.asyncio
    async def test_relay_failure_is_reported_not_raised(self, store, ledger):
        ledger.send_errors["submitScore"] = ValueError("gas required exceeds allowance")

        result = await relay_gateway(store, ledger).submit(PLAYER, 30)

        assert result.accepted is True
        assert result.best_score == 30
        assert "submitScore submission failed" in result.relay_error
        assert await store.best_score(PLAYER) == 30

    @pytest.mark.asyncio
    async def test_relay_disabled_never_touches_ledger(self, store, ledger):
        gateway = ScoreSubmissionGateway(
            store,
            reader=TournamentStateReader(ledger),
            submitter=TransactionSubmitter(ledger),
            relay_enabled=False,
        )
        await gateway.submit(PLAYER, 30)
        assert ledger.calls == []
