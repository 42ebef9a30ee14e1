"""
Tournament Window State Machine

The state of a ledger tournament is never stored locally; it is derived on
every read from (now, start_time, end_time, finalized).

State flow (forward only):
pending -> active -> expired_unfinalized -> finalized
"""
from enum import Enum


class TournamentWindowState(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    EXPIRED_UNFINALIZED = "expired_unfinalized"
    FINALIZED = "finalized"


def derive_window_state(now: int, start_time: int, end_time: int, finalized: bool) -> TournamentWindowState:
    """
    Derive the window state. All times are unix seconds.

    The finalized flag wins over the clock: a finalized tournament stays
    FINALIZED even if the ledger was finalized early.
    """
    if finalized:
        return TournamentWindowState.FINALIZED
    if now < start_time:
        return TournamentWindowState.PENDING
    if now < end_time:
        return TournamentWindowState.ACTIVE
    return TournamentWindowState.EXPIRED_UNFINALIZED


def requires_action(state: TournamentWindowState) -> bool:
    """Only an expired, unfinalized tournament needs a ledger write."""
    return state == TournamentWindowState.EXPIRED_UNFINALIZED
