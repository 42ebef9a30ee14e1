"""
In-Memory Score Store (development and tests)

Volatile: contents are lost on restart. Writes are serialized with an
asyncio.Lock so concurrent sessions never lose a record.
"""
import asyncio
from datetime import datetime
from typing import Dict, List, Optional

from .score_store import (
    DEFAULT_LEADERBOARD_LIMIT,
    LeaderboardEntry,
    ScoreRecord,
    ScoreStore,
    best_of,
    ensure_utc,
    rank_best_records,
    validate_limit,
    validate_participant,
    validate_score,
)


class InMemoryScoreStore(ScoreStore):

    def __init__(self):
        self._records: Dict[str, List[ScoreRecord]] = {}
        self._sequence = 0
        self._lock = asyncio.Lock()

    async def submit(self, participant: str, score: int, now: Optional[datetime] = None) -> ScoreRecord:
        validate_participant(participant)
        validate_score(score)
        observed_at = ensure_utc(now)

        async with self._lock:
            self._sequence += 1
            record = ScoreRecord(
                participant=participant,
                score=score,
                observed_at=observed_at,
                sequence=self._sequence,
            )
            self._records.setdefault(participant, []).append(record)
        return record

    async def history(self, participant: str) -> List[ScoreRecord]:
        async with self._lock:
            return list(self._records.get(participant, []))

    async def leaderboard(self, limit: int = DEFAULT_LEADERBOARD_LIMIT) -> List[LeaderboardEntry]:
        validate_limit(limit)
        async with self._lock:
            best_records = [best_of(records) for records in self._records.values() if records]
        return rank_best_records(best_records, limit)
