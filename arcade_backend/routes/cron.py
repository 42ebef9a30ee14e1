"""
Cron Router - scheduled tournament reconciliation

Both endpoints require `Authorization: Bearer <CRON_SECRET>`.

GET  /api/cron/tournament            - scheduled run (finalize + recreate when expired)
POST /api/cron/tournament/successor  - create-only recovery after a failed successor creation
"""
import logging

from fastapi import APIRouter, Depends

from arcade_backend.dependencies import get_reconciler
from arcade_backend.errors import APIError
from arcade_backend.security.cron_auth import require_cron_secret
from arcade_backend.services.tournament_reconciler import TournamentReconciler, describe_failure

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/cron/tournament",
    tags=["cron"],
    dependencies=[Depends(require_cron_secret)],
)


@router.get("")
async def reconcile_tournament(reconciler: TournamentReconciler = Depends(get_reconciler)):
    try:
        result = await reconciler.reconcile()
    except APIError as e:
        logger.error(f"Scheduled tournament run failed: {describe_failure(e)}")
        raise
    logger.info(f"Scheduled tournament run: {result.message}")
    return result.to_dict()


@router.post("/successor")
async def create_successor(reconciler: TournamentReconciler = Depends(get_reconciler)):
    try:
        result = await reconciler.create_successor()
    except APIError as e:
        logger.error(f"Successor recovery failed: {describe_failure(e)}")
        raise
    return result.to_dict()
