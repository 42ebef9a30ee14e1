from .contract import TOURNAMENT_ABI, TournamentInfo, ZERO_ADDRESS
from .client import LedgerClient, Web3LedgerClient, TxReceipt, build_ledger_client

__all__ = [
    "TOURNAMENT_ABI",
    "TournamentInfo",
    "ZERO_ADDRESS",
    "LedgerClient",
    "Web3LedgerClient",
    "TxReceipt",
    "build_ledger_client",
]
