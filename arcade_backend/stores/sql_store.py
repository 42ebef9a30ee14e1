"""
SQL-backed stores (SQLAlchemy async).

Score rows are append-only; best-per-participant is aggregated on read.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from arcade_backend.orm.player_profile import PlayerProfileRow
from arcade_backend.orm.score_record import ScoreRecordRow
from .profile_store import PlayerProfile, ProfileStore, validate_profile_fields
from .score_store import (
    DEFAULT_LEADERBOARD_LIMIT,
    LeaderboardEntry,
    ScoreRecord,
    ScoreStore,
    ensure_utc,
    rank_best_records,
    validate_limit,
    validate_participant,
    validate_score,
)

logger = logging.getLogger(__name__)


def _to_record(row: ScoreRecordRow) -> ScoreRecord:
    return ScoreRecord(
        participant=row.participant,
        score=row.score,
        observed_at=ensure_utc(row.observed_at),
        sequence=row.id,
    )


class SqlScoreStore(ScoreStore):

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def submit(self, participant: str, score: int, now: Optional[datetime] = None) -> ScoreRecord:
        validate_participant(participant)
        validate_score(score)

        row = ScoreRecordRow(
            participant=participant,
            score=score,
            observed_at=ensure_utc(now),
        )
        async with self.session_factory() as session:
            session.add(row)
            await session.commit()
            await session.refresh(row)
        return _to_record(row)

    async def history(self, participant: str) -> List[ScoreRecord]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(ScoreRecordRow)
                .where(ScoreRecordRow.participant == participant)
                .order_by(ScoreRecordRow.id)
            )
            return [_to_record(row) for row in result.scalars().all()]

    async def best_score(self, participant: str) -> int:
        async with self.session_factory() as session:
            result = await session.execute(
                select(func.max(ScoreRecordRow.score))
                .where(ScoreRecordRow.participant == participant)
            )
            best = result.scalar_one_or_none()
        return best or 0

    async def leaderboard(self, limit: int = DEFAULT_LEADERBOARD_LIMIT) -> List[LeaderboardEntry]:
        validate_limit(limit)
        # Rows arrive in ranking order, so the first row seen per participant is its best.
        best_records = {}
        async with self.session_factory() as session:
            result = await session.execute(
                select(ScoreRecordRow).order_by(
                    ScoreRecordRow.score.desc(),
                    ScoreRecordRow.observed_at.asc(),
                    ScoreRecordRow.id.asc(),
                )
            )
            for row in result.scalars():
                if row.participant in best_records:
                    continue
                best_records[row.participant] = _to_record(row)
                if len(best_records) >= limit:
                    break
        return rank_best_records(best_records.values(), limit)


class SqlProfileStore(ProfileStore):

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    @staticmethod
    def _to_profile(row: PlayerProfileRow) -> PlayerProfile:
        return PlayerProfile(
            participant=row.participant,
            display_name=row.display_name,
            bio=row.bio,
            updated_at=ensure_utc(row.updated_at),
        )

    async def _get_row(self, session: AsyncSession, participant: str) -> Optional[PlayerProfileRow]:
        result = await session.execute(
            select(PlayerProfileRow).where(PlayerProfileRow.participant == participant)
        )
        return result.scalar_one_or_none()

    async def get(self, participant: str) -> Optional[PlayerProfile]:
        async with self.session_factory() as session:
            row = await self._get_row(session, participant)
            return self._to_profile(row) if row else None

    async def put(
        self,
        participant: str,
        display_name: Optional[str],
        bio: Optional[str],
        now: Optional[datetime] = None,
    ) -> PlayerProfile:
        validate_participant(participant)
        display_name, bio = validate_profile_fields(display_name, bio)
        updated_at = ensure_utc(now)

        async with self.session_factory() as session:
            row = await self._get_row(session, participant)
            if row is None:
                row = PlayerProfileRow(participant=participant)
                session.add(row)
            row.display_name = display_name
            row.bio = bio
            row.updated_at = updated_at
            await session.commit()
            await session.refresh(row)
            return self._to_profile(row)

    async def display_names(self, participants: List[str]) -> dict:
        if not participants:
            return {}
        async with self.session_factory() as session:
            result = await session.execute(
                select(PlayerProfileRow.participant, PlayerProfileRow.display_name)
                .where(PlayerProfileRow.participant.in_(participants))
            )
            return {participant: name for participant, name in result.all() if name}
