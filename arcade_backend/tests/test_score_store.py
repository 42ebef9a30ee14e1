"""
Score Store Tests

Append-only history, best-score derivation and leaderboard ranking on the
in-memory backing.
"""
import asyncio
import pytest
from datetime import datetime, timedelta, timezone

from arcade_backend.errors import InvalidInputError
from arcade_backend.stores.in_memory_store import InMemoryScoreStore
from arcade_backend.stores.score_store import best_of, ScoreRecord


T0 = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store():
    return InMemoryScoreStore()


class TestSubmitAndHistory:

    @pytest.mark.asyncio
    async def test_best_score_after_three_submissions(self, store):
        await store.submit("0xAA", 10)
        await store.submit("0xAA", 5)
        await store.submit("0xAA", 20)

        assert await store.best_score("0xAA") == 20
        assert len(await store.history("0xAA")) == 3

    @pytest.mark.asyncio
    async def test_history_preserves_insertion_order(self, store):
        for score in (7, 3, 9):
            await store.submit("0xBB", score)

        history = await store.history("0xBB")
        assert [r.score for r in history] == [7, 3, 9]
        assert [r.sequence for r in history] == sorted(r.sequence for r in history)

    @pytest.mark.asyncio
    async def test_unknown_participant_has_zero_best_and_empty_history(self, store):
        assert await store.best_score("0xnobody") == 0
        assert await store.history("0xnobody") == []

    @pytest.mark.asyncio
    async def test_zero_score_is_accepted(self, store):
        record = await store.submit("0xAA", 0)
        assert record.score == 0
        assert await store.history("0xAA") == [record]

    @pytest.mark.asyncio
    async def test_naive_timestamp_treated_as_utc(self, store):
        record = await store.submit("0xAA", 1, datetime(2025, 1, 1, 12, 0))
        assert record.observed_at == T0

    @pytest.mark.asyncio
    async def test_offset_timestamp_converted_to_utc(self, store):
        plus_two = timezone(timedelta(hours=2))
        record = await store.submit("0xAA", 1, datetime(2025, 1, 1, 14, 0, tzinfo=plus_two))

        assert record.observed_at == T0
        assert record.observed_at.utcoffset() == timedelta(0)

    @pytest.mark.asyncio
    async def test_concurrent_submissions_are_all_recorded(self, store):
        await asyncio.gather(*(store.submit("0xAA", n) for n in range(50)))

        history = await store.history("0xAA")
        assert len(history) == 50
        assert len({r.sequence for r in history}) == 50
        assert await store.best_score("0xAA") == 49


class TestValidation:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("participant", ["", "   ", None, 42])
    async def test_rejects_bad_participant(self, store, participant):
        with pytest.raises(InvalidInputError):
            await store.submit(participant, 5)
        assert await store.leaderboard() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("score", [-1, 1.5, "10", True, None])
    async def test_rejects_bad_score(self, store, score):
        with pytest.raises(InvalidInputError) as exc_info:
            await store.submit("0xAA", score)
        assert exc_info.value.details == {"field": "score"}
        assert await store.history("0xAA") == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [0, -3, "5"])
    async def test_rejects_bad_limit(self, store, limit):
        with pytest.raises(InvalidInputError):
            await store.leaderboard(limit)


class TestLeaderboard:

    @pytest.mark.asyncio
    async def test_one_entry_per_participant_ranked_by_best(self, store):
        await store.submit("0xAA", 10, T0)
        await store.submit("0xBB", 30, T0 + timedelta(seconds=1))
        await store.submit("0xAA", 40, T0 + timedelta(seconds=2))
        await store.submit("0xCC", 20, T0 + timedelta(seconds=3))

        board = await store.leaderboard()

        assert [(e.rank, e.participant, e.score) for e in board] == [
            (1, "0xAA", 40),
            (2, "0xBB", 30),
            (3, "0xCC", 20),
        ]

    @pytest.mark.asyncio
    async def test_ties_go_to_earliest_achiever(self, store):
        await store.submit("0xLATE", 50, T0 + timedelta(minutes=5))
        await store.submit("0xEARLY", 50, T0)

        board = await store.leaderboard()
        assert [e.participant for e in board] == ["0xEARLY", "0xLATE"]

    @pytest.mark.asyncio
    async def test_tie_at_same_instant_falls_back_to_insertion(self, store):
        await store.submit("0xFIRST", 50, T0)
        await store.submit("0xSECOND", 50, T0)

        board = await store.leaderboard()
        assert [e.participant for e in board] == ["0xFIRST", "0xSECOND"]

    @pytest.mark.asyncio
    async def test_best_uses_time_first_achieved(self, store):
        await store.submit("0xAA", 50, T0 + timedelta(minutes=1))
        await store.submit("0xBB", 50, T0 + timedelta(minutes=2))
        await store.submit("0xAA", 50, T0 + timedelta(minutes=3))

        board = await store.leaderboard()
        assert board[0].participant == "0xAA"
        assert board[0].observed_at == T0 + timedelta(minutes=1)

    @pytest.mark.asyncio
    async def test_limit_truncates(self, store):
        for n in range(150):
            await store.submit(f"0x{n:02x}", n)

        board = await store.leaderboard()
        assert len(board) == 100
        assert board[0].score == 149
        assert len(await store.leaderboard(3)) == 3

    @pytest.mark.asyncio
    async def test_empty_store_has_empty_leaderboard(self, store):
        assert await store.leaderboard() == []

    @pytest.mark.asyncio
    async def test_entry_serialization(self, store):
        await store.submit("0xAA", 12, T0)
        entry = (await store.leaderboard())[0]
        assert entry.to_dict() == {
            "rank": 1,
            "participant": "0xAA",
            "score": 12,
            "observed_at": T0.isoformat(),
        }


def test_best_of_prefers_earliest_max():
    records = [
        ScoreRecord("0xAA", 5, T0, 1),
        ScoreRecord("0xAA", 9, T0 + timedelta(seconds=2), 2),
        ScoreRecord("0xAA", 9, T0 + timedelta(seconds=1), 3),
    ]
    assert best_of(records).sequence == 3
    assert best_of([]) is None
