"""
Transaction submitter.

Every write is submitted and then awaited until the ledger confirms
inclusion. There is no fire-and-forget path and no retry: a write that does
not confirm raises TransactionFailedError carrying the tx hash, if any.
"""
import logging
from typing import Awaitable, Callable, Optional

from arcade_backend.errors import APIError, TransactionFailedError
from arcade_backend.ledger.client import LedgerClient

logger = logging.getLogger(__name__)


class TransactionSubmitter:

    def __init__(self, ledger: LedgerClient):
        self.ledger = ledger

    async def finalize_tournament(self, tournament_id: int) -> str:
        return await self._submit_and_confirm(
            "finalizeTournament",
            lambda: self.ledger.finalize_tournament(tournament_id),
            tournament_id=tournament_id,
        )

    async def create_tournament(self, start_time: int, end_time: int, entry_fee: int) -> str:
        return await self._submit_and_confirm(
            "createTournament",
            lambda: self.ledger.create_tournament(start_time, end_time, entry_fee),
        )

    async def submit_score(self, score: int, tournament_id: Optional[int] = None) -> str:
        return await self._submit_and_confirm(
            "submitScore",
            lambda: self.ledger.submit_score(score),
            tournament_id=tournament_id,
        )

    async def _submit_and_confirm(
        self,
        action: str,
        send: Callable[[], Awaitable[str]],
        tournament_id: Optional[int] = None,
    ) -> str:
        try:
            tx_hash = await send()
        except APIError:
            raise
        except Exception as e:
            logger.error(f"{action} submission failed: {e}")
            raise TransactionFailedError(
                f"{action} submission failed: {e}", action=action, tournament_id=tournament_id
            ) from e

        logger.info(f"{action} submitted. TX: {tx_hash}")

        try:
            receipt = await self.ledger.wait_for_confirmation(tx_hash)
        except Exception as e:
            logger.error(f"{action} TX {tx_hash} not confirmed: {e}")
            raise TransactionFailedError(
                f"{action} transaction not confirmed: {e}",
                action=action,
                tx_hash=tx_hash,
                tournament_id=tournament_id,
            ) from e

        if not receipt.succeeded:
            logger.error(f"{action} TX {tx_hash} reverted")
            raise TransactionFailedError(
                f"{action} transaction reverted",
                action=action,
                tx_hash=tx_hash,
                tournament_id=tournament_id,
                reverted=True,
            )

        logger.info(f"{action} confirmed in block {receipt.block_number}. TX: {tx_hash}")
        return tx_hash
