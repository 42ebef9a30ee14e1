"""
Tournament contract surface: ABI fragments and the TournamentInfo view.

Only the functions this backend reads or writes are declared.
"""
from dataclasses import dataclass
from typing import Any, Dict, Sequence

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

_UINT = "uint256"

TOURNAMENT_INFO_COMPONENTS = [
    {"internalType": _UINT, "name": "id", "type": _UINT},
    {"internalType": _UINT, "name": "startTime", "type": _UINT},
    {"internalType": _UINT, "name": "endTime", "type": _UINT},
    {"internalType": _UINT, "name": "entryFee", "type": _UINT},
    {"internalType": _UINT, "name": "prizePool", "type": _UINT},
    {"internalType": "address", "name": "winner", "type": "address"},
    {"internalType": _UINT, "name": "winningScore", "type": _UINT},
    {"internalType": "bool", "name": "finalized", "type": "bool"},
    {"internalType": _UINT, "name": "participantCount", "type": _UINT},
]

TOURNAMENT_ABI = [
    {
        "inputs": [],
        "name": "currentTournamentId",
        "outputs": [{"internalType": _UINT, "name": "", "type": _UINT}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"internalType": _UINT, "name": "_tournamentId", "type": _UINT}],
        "name": "getTournamentInfo",
        "outputs": [
            {
                "components": TOURNAMENT_INFO_COMPONENTS,
                "internalType": "struct CrossyRoadTournament.TournamentInfo",
                "name": "",
                "type": "tuple",
            }
        ],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"internalType": _UINT, "name": "_tournamentId", "type": _UINT},
            {"internalType": "address", "name": "_player", "type": "address"},
        ],
        "name": "hasPlayerEntered",
        "outputs": [{"internalType": "bool", "name": "", "type": "bool"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"internalType": _UINT, "name": "_tournamentId", "type": _UINT}],
        "name": "finalizeTournament",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [
            {"internalType": _UINT, "name": "_startTime", "type": _UINT},
            {"internalType": _UINT, "name": "_endTime", "type": _UINT},
            {"internalType": _UINT, "name": "_entryFee", "type": _UINT},
        ],
        "name": "createTournament",
        "outputs": [{"internalType": _UINT, "name": "", "type": _UINT}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [{"internalType": _UINT, "name": "_score", "type": _UINT}],
        "name": "submitScore",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]


@dataclass(frozen=True)
class TournamentInfo:
    """Read-only snapshot of a tournament as the ledger reports it. Amounts in wei."""
    id: int
    start_time: int
    end_time: int
    entry_fee: int
    prize_pool: int
    winner: str
    winning_score: int
    finalized: bool
    participant_count: int

    @classmethod
    def from_ledger(cls, raw: Sequence[Any]) -> "TournamentInfo":
        """Build from the positional struct tuple returned by getTournamentInfo."""
        (tournament_id, start_time, end_time, entry_fee, prize_pool,
         winner, winning_score, finalized, participant_count) = raw
        return cls(
            id=int(tournament_id),
            start_time=int(start_time),
            end_time=int(end_time),
            entry_fee=int(entry_fee),
            prize_pool=int(prize_pool),
            winner=str(winner),
            winning_score=int(winning_score),
            finalized=bool(finalized),
            participant_count=int(participant_count),
        )

    @property
    def has_winner(self) -> bool:
        return self.winner.lower() != ZERO_ADDRESS

    def to_dict(self) -> Dict[str, Any]:
        # uint256 values can exceed JSON-safe integers
        return {
            "id": str(self.id),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "entry_fee": str(self.entry_fee),
            "prize_pool": str(self.prize_pool),
            "winner": self.winner,
            "winning_score": self.winning_score,
            "finalized": self.finalized,
            "participant_count": self.participant_count,
        }
