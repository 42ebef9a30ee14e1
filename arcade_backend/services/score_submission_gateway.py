"""
Score submission gateway - the boundary for gameplay score reports.

Validates, writes through to the ScoreStore and reports the participant's
updated best. Optionally relays new personal bests to the tournament
contract when the participant has entered the current tournament.

Known gap: the submitting identity is not verified. Any caller can claim any
score for any participant until a signature over (participant, score, nonce)
is checked here.
"""
import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from arcade_backend.errors import ConfigurationError, TransactionFailedError, UpstreamReadError
from arcade_backend.services.tournament_state_reader import TournamentStateReader
from arcade_backend.services.transaction_submitter import TransactionSubmitter
from arcade_backend.state_machines.tournament_window import (
    TournamentWindowState,
    derive_window_state,
)
from arcade_backend.stores.score_store import ScoreStore, validate_participant, validate_score

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SubmissionResult:
    accepted: bool
    participant: str
    score: int
    best_score: int
    previous_best: int
    relay_tx: Optional[str] = None
    relay_error: Optional[str] = None

    @property
    def new_high_score(self) -> bool:
        return self.score > self.previous_best

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "accepted": self.accepted,
            "participant": self.participant,
            "score": self.score,
            "best_score": self.best_score,
            "previous_best": self.previous_best,
            "new_high_score": self.new_high_score,
        }
        if self.relay_tx:
            data["relay_tx"] = self.relay_tx
        if self.relay_error:
            data["relay_error"] = self.relay_error
        return data


class ScoreSubmissionGateway:

    def __init__(
        self,
        store: ScoreStore,
        reader: Optional[TournamentStateReader] = None,
        submitter: Optional[TransactionSubmitter] = None,
        relay_enabled: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.reader = reader
        self.submitter = submitter
        self.relay_enabled = relay_enabled and reader is not None and submitter is not None
        self.clock = clock
        # Per-participant serialization of read-best, write, read-best
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def submit(self, participant: Any, score: Any) -> SubmissionResult:
        """
        Raises:
            InvalidInputError: empty participant, negative or non-integer score
        """
        validate_participant(participant)
        validate_score(score)

        async with self._locks[participant]:
            previous_best = await self.store.best_score(participant)
            await self.store.submit(participant, score, self.clock())
            best = await self.store.best_score(participant)

        result = SubmissionResult(
            accepted=True,
            participant=participant,
            score=score,
            best_score=best,
            previous_best=previous_best,
        )
        logger.info(f"Score {score} accepted for {participant} (best {best})")

        if self.relay_enabled and result.new_high_score and score > 0:
            await self._relay(result)
        return result

    async def _relay(self, result: SubmissionResult) -> None:
        """Relay to the tournament contract. Failures are reported, not raised."""
        try:
            tournament = await self.reader.current_tournament()
            if tournament is None:
                return
            state = derive_window_state(
                int(self.clock().timestamp()),
                tournament.start_time,
                tournament.end_time,
                tournament.finalized,
            )
            if state != TournamentWindowState.ACTIVE:
                return
            if not await self.reader.has_player_entered(tournament.id, result.participant):
                return
            result.relay_tx = await self.submitter.submit_score(result.score, tournament_id=tournament.id)
        except (UpstreamReadError, TransactionFailedError, ConfigurationError) as e:
            logger.warning(f"Tournament relay failed for {result.participant}: {e.message}")
            result.relay_error = e.message
