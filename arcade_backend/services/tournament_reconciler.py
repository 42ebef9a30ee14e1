"""
Tournament Reconciler - scheduled finalize-and-recreate engine.

Decides, from a fresh ledger read, whether the current tournament must be
finalized and a successor created, and drives the two writes in order.

Invariants:
- State is re-derived from a fresh ledger read before acting; there is no
  local lock
- Finalize is confirmed strictly before create is submitted
- A successor is never created while the current tournament is pending,
  active or awaiting finalization
- Nothing is retried inside one invocation
"""
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional

from web3 import Web3

from arcade_backend.errors import (
    APIError,
    InvalidStateError,
    NoTournamentError,
    SuccessorCreationFailedError,
    TransactionFailedError,
    UpstreamReadError,
)
from arcade_backend.ledger.contract import TournamentInfo
from arcade_backend.services.tournament_state_reader import TournamentStateReader
from arcade_backend.services.transaction_submitter import TransactionSubmitter
from arcade_backend.state_machines.tournament_window import (
    TournamentWindowState,
    derive_window_state,
    requires_action,
)

logger = logging.getLogger(__name__)

TOURNAMENT_DURATION_SECONDS = 24 * 60 * 60
ENTRY_FEE_WEI = Web3.to_wei("0.001", "ether")


class ReconcileOutcome(str, Enum):
    ALREADY_FINALIZED = "already_finalized"
    STILL_ACTIVE = "still_active"
    PENDING = "pending"
    FINALIZED_AND_RECREATED = "finalized_and_recreated"
    SUCCESSOR_CREATED = "successor_created"
    BOOTSTRAPPED = "bootstrapped"
    BOOTSTRAP_SKIPPED = "bootstrap_skipped"


_MESSAGES = {
    ReconcileOutcome.ALREADY_FINALIZED: "Tournament already finalized",
    ReconcileOutcome.STILL_ACTIVE: "Tournament still active",
    ReconcileOutcome.PENDING: "Tournament has not started yet",
    ReconcileOutcome.FINALIZED_AND_RECREATED: "Tournament finalized and new one created",
    ReconcileOutcome.SUCCESSOR_CREATED: "Successor tournament created",
    ReconcileOutcome.BOOTSTRAPPED: "First tournament created",
    ReconcileOutcome.BOOTSTRAP_SKIPPED: "Tournament already exists",
}

_WRITE_OUTCOMES = (
    ReconcileOutcome.FINALIZED_AND_RECREATED,
    ReconcileOutcome.SUCCESSOR_CREATED,
    ReconcileOutcome.BOOTSTRAPPED,
)


@dataclass
class ReconcileResult:
    outcome: ReconcileOutcome
    tournament_id: Optional[int] = None
    state: Optional[TournamentWindowState] = None
    ends_in_seconds: Optional[int] = None
    starts_in_seconds: Optional[int] = None
    finalize_tx: Optional[str] = None
    create_tx: Optional[str] = None
    previous_tournament_id: Optional[int] = None
    winner: Optional[str] = None
    prize_pool: Optional[int] = None
    new_window: Dict[str, int] = field(default_factory=dict)

    @property
    def message(self) -> str:
        return _MESSAGES[self.outcome]

    @property
    def ends_in(self) -> Optional[str]:
        if self.ends_in_seconds is None:
            return None
        return f"{self.ends_in_seconds // 3600} hours"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "success": self.outcome in _WRITE_OUTCOMES,
            "outcome": self.outcome.value,
            "message": self.message,
        }
        if self.tournament_id is not None:
            data["tournament_id"] = str(self.tournament_id)
        if self.state is not None:
            data["state"] = self.state.value
        if self.ends_in_seconds is not None:
            data["ends_in_seconds"] = self.ends_in_seconds
            data["ends_in"] = self.ends_in
        if self.starts_in_seconds is not None:
            data["starts_in_seconds"] = self.starts_in_seconds
        if self.finalize_tx:
            data["finalize_tx"] = self.finalize_tx
        if self.create_tx:
            data["create_tx"] = self.create_tx
        if self.previous_tournament_id is not None:
            data["previous_tournament_id"] = str(self.previous_tournament_id)
        if self.winner is not None:
            data["winner"] = self.winner
        if self.prize_pool is not None:
            data["prize_pool"] = str(self.prize_pool)
        if self.new_window:
            data["new_tournament"] = {
                "start_time": self.new_window["start_time"],
                "end_time": self.new_window["end_time"],
                "entry_fee": str(self.new_window["entry_fee"]),
            }
        return data


def _unix_now() -> int:
    return int(time.time())


class TournamentReconciler:
    """
    Scheduled decision engine over the ledger's current tournament.

    Operations:
    - reconcile: the scheduled run (finalize + create when expired)
    - create_successor: create-only recovery after SuccessorCreationFailed
    - bootstrap: create the very first tournament
    """

    def __init__(
        self,
        reader: TournamentStateReader,
        submitter: TransactionSubmitter,
        duration_seconds: int = TOURNAMENT_DURATION_SECONDS,
        entry_fee_wei: int = ENTRY_FEE_WEI,
        auto_create_successor: bool = False,
        clock: Callable[[], int] = _unix_now,
    ):
        self.reader = reader
        self.submitter = submitter
        self.duration_seconds = duration_seconds
        self.entry_fee_wei = entry_fee_wei
        self.auto_create_successor = auto_create_successor
        self.clock = clock

    def _now(self, now: Optional[int]) -> int:
        return int(now) if now is not None else self.clock()

    def successor_window(self, now: int) -> Dict[str, int]:
        return {
            "start_time": now,
            "end_time": now + self.duration_seconds,
            "entry_fee": self.entry_fee_wei,
        }

    async def _read_current(self) -> TournamentInfo:
        tournament = await self.reader.current_tournament()
        if tournament is None:
            logger.warning("No current tournament on the ledger - bootstrap required")
            raise NoTournamentError()
        return tournament

    # ==========================================================================
    # Scheduled run
    # ==========================================================================

    async def reconcile(self, now: Optional[int] = None) -> ReconcileResult:
        now = self._now(now)
        tournament = await self._read_current()
        state = derive_window_state(
            now, tournament.start_time, tournament.end_time, tournament.finalized
        )
        logger.info(f"Tournament {tournament.id} is {state.value} at {now}")

        if requires_action(state):
            return await self._finalize_and_recreate(tournament, now)

        if state == TournamentWindowState.FINALIZED:
            if self.auto_create_successor:
                logger.info(f"Tournament {tournament.id} finalized without successor - creating one")
                return await self._create_successor_for(tournament, now)
            return ReconcileResult(
                outcome=ReconcileOutcome.ALREADY_FINALIZED,
                tournament_id=tournament.id,
                state=state,
            )

        if state == TournamentWindowState.ACTIVE:
            return ReconcileResult(
                outcome=ReconcileOutcome.STILL_ACTIVE,
                tournament_id=tournament.id,
                state=state,
                ends_in_seconds=tournament.end_time - now,
            )

        return ReconcileResult(
            outcome=ReconcileOutcome.PENDING,
            tournament_id=tournament.id,
            state=state,
            starts_in_seconds=tournament.start_time - now,
        )

    async def _finalize_and_recreate(self, tournament: TournamentInfo, now: int) -> ReconcileResult:
        logger.info(f"Finalizing tournament {tournament.id}...")
        try:
            finalize_tx = await self.submitter.finalize_tournament(tournament.id)
        except TransactionFailedError as e:
            if not await self._finalize_landed(tournament, e):
                raise
            finalize_tx = e.tx_hash

        logger.info(f"Tournament {tournament.id} finalized! TX: {finalize_tx}")

        window = self.successor_window(now)
        logger.info("Creating new tournament...")
        try:
            create_tx = await self.submitter.create_tournament(
                window["start_time"], window["end_time"], window["entry_fee"]
            )
        except Exception as e:
            logger.error(f"Tournament {tournament.id} finalized but successor creation failed: {e}")
            raise SuccessorCreationFailedError(tournament.id, finalize_tx, e) from e

        logger.info(f"New tournament created! TX: {create_tx}")
        return ReconcileResult(
            outcome=ReconcileOutcome.FINALIZED_AND_RECREATED,
            tournament_id=tournament.id,
            state=TournamentWindowState.FINALIZED,
            finalize_tx=finalize_tx,
            create_tx=create_tx,
            previous_tournament_id=tournament.id,
            winner=tournament.winner,
            prize_pool=tournament.prize_pool,
            new_window=window,
        )

    async def _finalize_landed(self, tournament: TournamentInfo, failure: TransactionFailedError) -> bool:
        """
        After a finalize that did not confirm locally, re-read the ledger.

        True only if the same tournament now reports finalized, meaning the
        write landed despite the local failure and create-only is safe.
        Only an unknown outcome (confirmation timeout, RPC error) qualifies:
        a finalize with no tx hash was never broadcast by this run, and a
        reverted receipt proves this run's finalize did not land. In both
        cases a finalized flag seen afterwards belongs to another run.
        """
        if failure.tx_hash is None or failure.reverted:
            return False

        try:
            fresh = await self.reader.current_tournament()
        except UpstreamReadError as e:
            logger.error(f"Re-read after failed finalize of {tournament.id} failed: {e.message}")
            return False

        if fresh is None or fresh.id != tournament.id or not fresh.finalized:
            return False

        logger.warning(
            f"Finalize of tournament {tournament.id} landed despite local failure "
            f"({failure.message}) - proceeding to create only"
        )
        return True

    # ==========================================================================
    # Recovery & bootstrap
    # ==========================================================================

    async def create_successor(self, now: Optional[int] = None) -> ReconcileResult:
        """Create-only recovery. Allowed only when the current tournament is finalized."""
        now = self._now(now)
        tournament = await self._read_current()
        state = derive_window_state(
            now, tournament.start_time, tournament.end_time, tournament.finalized
        )
        if state != TournamentWindowState.FINALIZED:
            raise InvalidStateError(
                f"Tournament {tournament.id} is {state.value}; successor can only follow a finalized tournament",
                details={"tournament_id": str(tournament.id), "state": state.value},
            )
        return await self._create_successor_for(tournament, now)

    async def _create_successor_for(self, tournament: TournamentInfo, now: int) -> ReconcileResult:
        window = self.successor_window(now)
        create_tx = await self.submitter.create_tournament(
            window["start_time"], window["end_time"], window["entry_fee"]
        )
        logger.info(f"Successor of tournament {tournament.id} created! TX: {create_tx}")
        return ReconcileResult(
            outcome=ReconcileOutcome.SUCCESSOR_CREATED,
            tournament_id=tournament.id,
            state=TournamentWindowState.FINALIZED,
            create_tx=create_tx,
            previous_tournament_id=tournament.id,
            winner=tournament.winner,
            prize_pool=tournament.prize_pool,
            new_window=window,
        )

    async def bootstrap(self, now: Optional[int] = None) -> ReconcileResult:
        """Create the first tournament if the ledger has none."""
        now = self._now(now)
        existing = await self.reader.current_tournament()
        if existing is not None:
            logger.warning(f"Tournament already exists! Current ID: {existing.id}")
            return ReconcileResult(
                outcome=ReconcileOutcome.BOOTSTRAP_SKIPPED,
                tournament_id=existing.id,
            )

        window = self.successor_window(now)
        create_tx = await self.submitter.create_tournament(
            window["start_time"], window["end_time"], window["entry_fee"]
        )
        logger.info(f"First tournament created! TX: {create_tx}")
        return ReconcileResult(
            outcome=ReconcileOutcome.BOOTSTRAPPED,
            create_tx=create_tx,
            new_window=window,
        )


def describe_failure(error: APIError) -> Dict[str, Any]:
    """Structured payload for a failed scheduled run (logged and returned)."""
    payload = error.to_dict()
    payload["outcome"] = "error"
    return payload
