"""
Ledger client: the external tournament contract as an async collaborator.

Reads go through eth_call; writes are signed locally with the tournament
manager key and return a transaction hash that must be awaited with
wait_for_confirmation before the write is considered durable.
"""
import abc
import logging
from dataclasses import dataclass
from typing import Optional

from eth_account import Account
from web3 import AsyncWeb3

from arcade_backend.errors import ConfigurationError
from .contract import TOURNAMENT_ABI, TournamentInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TxReceipt:
    tx_hash: str
    status: int
    block_number: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.status == 1


class LedgerClient(abc.ABC):
    """
    Abstract tournament contract client.

    Implementations raise their transport's own exceptions; callers translate
    them into UpstreamReadError / TransactionFailedError.
    """

    @abc.abstractmethod
    async def current_tournament_id(self) -> int:
        """Current tournament id, 0 when none was ever created."""
        raise NotImplementedError

    @abc.abstractmethod
    async def get_tournament_info(self, tournament_id: int) -> TournamentInfo:
        raise NotImplementedError

    @abc.abstractmethod
    async def has_player_entered(self, tournament_id: int, participant: str) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    async def finalize_tournament(self, tournament_id: int) -> str:
        """Submit finalizeTournament; returns the tx hash."""
        raise NotImplementedError

    @abc.abstractmethod
    async def create_tournament(self, start_time: int, end_time: int, entry_fee: int) -> str:
        """Submit createTournament; returns the tx hash."""
        raise NotImplementedError

    @abc.abstractmethod
    async def submit_score(self, score: int) -> str:
        """Submit submitScore; returns the tx hash."""
        raise NotImplementedError

    @abc.abstractmethod
    async def wait_for_confirmation(self, tx_hash: str) -> TxReceipt:
        """Block until the transaction is included. Raises on timeout."""
        raise NotImplementedError


class Web3LedgerClient(LedgerClient):
    """LedgerClient over JSON-RPC using web3.py's AsyncWeb3."""

    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        private_key: Optional[str] = None,
        chain_id: Optional[int] = None,
        gas_limit: int = 500000,
        confirmation_timeout: int = 120,
        missing_key_message: str = "TOURNAMENT_MANAGER_PRIVATE_KEY not configured",
    ):
        self.w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))
        self.contract = self.w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(contract_address),
            abi=TOURNAMENT_ABI,
        )
        self._account = Account.from_key(private_key) if private_key else None
        self.chain_id = chain_id
        self.gas_limit = gas_limit
        self.confirmation_timeout = confirmation_timeout
        self._missing_key_message = missing_key_message

    @property
    def manager_address(self) -> Optional[str]:
        return self._account.address if self._account else None

    async def current_tournament_id(self) -> int:
        return int(await self.contract.functions.currentTournamentId().call())

    async def get_tournament_info(self, tournament_id: int) -> TournamentInfo:
        raw = await self.contract.functions.getTournamentInfo(tournament_id).call()
        return TournamentInfo.from_ledger(raw)

    async def has_player_entered(self, tournament_id: int, participant: str) -> bool:
        player = AsyncWeb3.to_checksum_address(participant)
        return bool(await self.contract.functions.hasPlayerEntered(tournament_id, player).call())

    async def finalize_tournament(self, tournament_id: int) -> str:
        return await self._send(self.contract.functions.finalizeTournament(tournament_id))

    async def create_tournament(self, start_time: int, end_time: int, entry_fee: int) -> str:
        return await self._send(self.contract.functions.createTournament(start_time, end_time, entry_fee))

    async def submit_score(self, score: int) -> str:
        return await self._send(self.contract.functions.submitScore(score))

    async def wait_for_confirmation(self, tx_hash: str) -> TxReceipt:
        receipt = await self.w3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=self.confirmation_timeout
        )
        return TxReceipt(
            tx_hash=tx_hash,
            status=int(receipt["status"]),
            block_number=receipt.get("blockNumber"),
        )

    async def _send(self, fn) -> str:
        if self._account is None:
            raise ConfigurationError(self._missing_key_message)

        chain_id = self.chain_id or await self.w3.eth.chain_id
        nonce = await self.w3.eth.get_transaction_count(self._account.address, "pending")
        tx = await fn.build_transaction(
            {
                "from": self._account.address,
                "nonce": nonce,
                "gas": self.gas_limit,
                "gasPrice": await self.w3.eth.gas_price,
                "chainId": chain_id,
            }
        )
        signed = self._account.sign_transaction(tx)
        tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        return AsyncWeb3.to_hex(tx_hash)


def build_ledger_client(settings) -> Web3LedgerClient:
    """Construct the production client from Settings."""
    raw_key = settings.TOURNAMENT_MANAGER_PRIVATE_KEY
    private_key = settings.manager_private_key()
    missing_key_message = "TOURNAMENT_MANAGER_PRIVATE_KEY not configured"
    if raw_key and private_key is None:
        missing_key_message = "Invalid private key format"
        logger.error("TOURNAMENT_MANAGER_PRIVATE_KEY is malformed - ledger writes disabled")
    elif not private_key:
        logger.warning("TOURNAMENT_MANAGER_PRIVATE_KEY not set - ledger writes disabled")
    return Web3LedgerClient(
        rpc_url=settings.LEDGER_RPC_URL,
        contract_address=settings.TOURNAMENT_CONTRACT_ADDRESS,
        private_key=private_key,
        chain_id=settings.LEDGER_CHAIN_ID,
        gas_limit=settings.TX_GAS_LIMIT,
        confirmation_timeout=settings.TX_CONFIRMATION_TIMEOUT,
        missing_key_message=missing_key_message,
    )
