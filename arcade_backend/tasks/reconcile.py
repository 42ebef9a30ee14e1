"""
arcade_backend/tasks/reconcile.py
In-process periodic tournament reconciliation (FEATURE_BACKGROUND_RECONCILER)

An alternative to the external scheduler hitting /api/cron/tournament. Each
cycle is one independent reconcile; failures are logged and the next cycle
re-reads the ledger from scratch.
"""

import logging
import asyncio
from typing import Optional

from arcade_backend.errors import APIError
from arcade_backend.services.tournament_reconciler import (
    ReconcileResult,
    TournamentReconciler,
    describe_failure,
)

logger = logging.getLogger(__name__)


async def run_reconcile_once(reconciler: TournamentReconciler) -> Optional[ReconcileResult]:
    """Run a single reconcile cycle."""
    try:
        result = await reconciler.reconcile()
        logger.info(f"Reconcile completed: {result.message}")
        return result
    except APIError as e:
        logger.error(f"Reconcile failed: {describe_failure(e)}")
        return None


async def reconcile_loop(reconciler: TournamentReconciler, interval_seconds: int = 3600):
    """
    Background reconcile loop.
    Runs every interval_seconds (default 1 hour).
    """
    logger.info(f"Starting reconcile loop with interval {interval_seconds}s")

    while True:
        try:
            await run_reconcile_once(reconciler)
        except Exception as e:
            logger.error(f"Reconcile loop error: {str(e)}")

        await asyncio.sleep(interval_seconds)


def start_reconcile_task(reconciler: TournamentReconciler, interval_seconds: int = 3600):
    """Start the reconcile loop as a background coroutine."""
    return asyncio.create_task(reconcile_loop(reconciler, interval_seconds))
