"""
Score Store Interface

Abstract base class for score storage backings.

Guarantees:
- Full history retained per participant (append-only)
- Best score = maximum ever submitted, recomputed on read
- Deterministic leaderboard ordering: score DESC, observed_at ASC, sequence ASC
"""
import abc
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from arcade_backend.errors import InvalidInputError

DEFAULT_LEADERBOARD_LIMIT = 100


@dataclass(frozen=True)
class ScoreRecord:
    participant: str
    score: int
    observed_at: datetime
    sequence: int

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["observed_at"] = self.observed_at.isoformat()
        return data


@dataclass(frozen=True)
class LeaderboardEntry:
    """One participant's best record, positioned in the ranking."""
    rank: int
    participant: str
    score: int
    observed_at: datetime
    sequence: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rank": self.rank,
            "participant": self.participant,
            "score": self.score,
            "observed_at": self.observed_at.isoformat(),
        }


def validate_participant(participant: Any) -> str:
    if not isinstance(participant, str) or not participant.strip():
        raise InvalidInputError("participant cannot be empty", field="participant")
    return participant


def validate_score(score: Any) -> int:
    # bool is an int subclass; a JSON `true` is not a score
    if isinstance(score, bool) or not isinstance(score, int):
        raise InvalidInputError("score must be an integer", field="score")
    if score < 0:
        raise InvalidInputError("score must be non-negative", field="score")
    return score


def validate_limit(limit: Any) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise InvalidInputError("limit must be a positive integer", field="limit")
    return limit


def ensure_utc(moment: Optional[datetime]) -> datetime:
    """Default to now; treat naive datetimes as UTC and convert aware ones to UTC."""
    if moment is None:
        return datetime.now(timezone.utc)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _ranking_key(record: ScoreRecord):
    return (-record.score, record.observed_at, record.sequence)


def best_of(records: Iterable[ScoreRecord]) -> Optional[ScoreRecord]:
    """Highest score; among equal scores the earliest achieved."""
    best = None
    for record in records:
        if best is None or _ranking_key(record) < _ranking_key(best):
            best = record
    return best


def rank_best_records(best_records: Iterable[ScoreRecord], limit: int) -> List[LeaderboardEntry]:
    ordered = sorted(best_records, key=_ranking_key)[:limit]
    return [
        LeaderboardEntry(
            rank=position,
            participant=record.participant,
            score=record.score,
            observed_at=record.observed_at,
            sequence=record.sequence,
        )
        for position, record in enumerate(ordered, start=1)
    ]


class ScoreStore(abc.ABC):
    """
    Abstract base class for score stores.

    Backings:
    - InMemoryScoreStore: in-process map (tests, development)
    - SqlScoreStore: SQLAlchemy async (production, survives restarts)
    """

    @abc.abstractmethod
    async def submit(self, participant: str, score: int, now: Optional[datetime] = None) -> ScoreRecord:
        """
        Append a ScoreRecord.

        Raises:
            InvalidInputError: empty participant, negative or non-integer score
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def history(self, participant: str) -> List[ScoreRecord]:
        """All records for participant, insertion order. Empty if unknown."""
        raise NotImplementedError

    @abc.abstractmethod
    async def leaderboard(self, limit: int = DEFAULT_LEADERBOARD_LIMIT) -> List[LeaderboardEntry]:
        """One entry per participant (their best), ranked, truncated to limit."""
        raise NotImplementedError

    async def best_record(self, participant: str) -> Optional[ScoreRecord]:
        return best_of(await self.history(participant))

    async def best_score(self, participant: str) -> int:
        """0 when the participant has no records (absence is not an error)."""
        record = await self.best_record(participant)
        return record.score if record else 0

    async def close(self) -> None:
        """Release backing resources."""
        return None
