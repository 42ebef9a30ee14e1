"""
Tournament Router

Read-only view of the ledger's current tournament for clients.
"""
import logging
import time

from fastapi import APIRouter, Depends

from arcade_backend.dependencies import get_reader
from arcade_backend.errors import NoTournamentError
from arcade_backend.services.tournament_state_reader import TournamentStateReader
from arcade_backend.state_machines.tournament_window import (
    TournamentWindowState,
    derive_window_state,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/tournament", tags=["tournament"])


@router.get("/current")
async def get_current_tournament(reader: TournamentStateReader = Depends(get_reader)):
    tournament = await reader.current_tournament()
    if tournament is None:
        raise NoTournamentError()

    now = int(time.time())
    state = derive_window_state(now, tournament.start_time, tournament.end_time, tournament.finalized)

    response = {
        "success": True,
        "tournament": tournament.to_dict(),
        "state": state.value,
    }
    if state == TournamentWindowState.ACTIVE:
        response["ends_in_seconds"] = tournament.end_time - now
    elif state == TournamentWindowState.PENDING:
        response["starts_in_seconds"] = tournament.start_time - now
    return response
