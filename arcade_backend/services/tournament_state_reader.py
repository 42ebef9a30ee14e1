"""
Tournament state reader.

Pure reads against the ledger. Failures surface as UpstreamReadError with the
ledger's raw error text; retries are the caller's responsibility.
"""
import logging
from typing import Optional

from arcade_backend.errors import UpstreamReadError
from arcade_backend.ledger.client import LedgerClient
from arcade_backend.ledger.contract import TournamentInfo

logger = logging.getLogger(__name__)


class TournamentStateReader:

    def __init__(self, ledger: LedgerClient):
        self.ledger = ledger

    async def current_tournament(self) -> Optional[TournamentInfo]:
        """Current tournament, or None when the ledger has none (id 0)."""
        try:
            tournament_id = await self.ledger.current_tournament_id()
        except Exception as e:
            logger.error(f"currentTournamentId read failed: {e}")
            raise UpstreamReadError(str(e), operation="currentTournamentId") from e

        if not tournament_id:
            return None

        try:
            return await self.ledger.get_tournament_info(tournament_id)
        except Exception as e:
            logger.error(f"getTournamentInfo({tournament_id}) read failed: {e}")
            raise UpstreamReadError(
                str(e), operation="getTournamentInfo", tournament_id=tournament_id
            ) from e

    async def has_player_entered(self, tournament_id: int, participant: str) -> bool:
        try:
            return await self.ledger.has_player_entered(tournament_id, participant)
        except Exception as e:
            raise UpstreamReadError(
                str(e), operation="hasPlayerEntered", tournament_id=tournament_id
            ) from e
