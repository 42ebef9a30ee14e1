"""
Service wiring for the FastAPI app.

Services are built once in the app lifespan and stored on app.state; route
dependencies read them from there so tests can swap any of them.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from web3 import Web3

from arcade_backend.ledger.client import LedgerClient, build_ledger_client
from arcade_backend.services.score_submission_gateway import ScoreSubmissionGateway
from arcade_backend.services.tournament_reconciler import TournamentReconciler
from arcade_backend.services.tournament_state_reader import TournamentStateReader
from arcade_backend.services.transaction_submitter import TransactionSubmitter
from arcade_backend.stores.in_memory_store import InMemoryScoreStore
from arcade_backend.stores.profile_store import InMemoryProfileStore, ProfileStore
from arcade_backend.stores.score_store import ScoreStore

logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    score_store: ScoreStore
    profile_store: ProfileStore
    ledger: LedgerClient
    reader: TournamentStateReader
    submitter: TransactionSubmitter
    reconciler: TournamentReconciler
    gateway: ScoreSubmissionGateway


def build_stores(settings, session_factory=None):
    """Pick the store backing from SCORE_STORE_BACKEND (memory | sql)."""
    if settings.SCORE_STORE_BACKEND == "sql":
        from arcade_backend.stores.sql_store import SqlProfileStore, SqlScoreStore
        if session_factory is None:
            from arcade_backend.database import AsyncSessionLocal
            session_factory = AsyncSessionLocal
        logger.info("Using SQL score store")
        return SqlScoreStore(session_factory), SqlProfileStore(session_factory)

    logger.warning("Using in-memory score store - scores reset on restart")
    return InMemoryScoreStore(), InMemoryProfileStore()


def build_services(
    settings,
    feature_flags,
    ledger: Optional[LedgerClient] = None,
    score_store: Optional[ScoreStore] = None,
    profile_store: Optional[ProfileStore] = None,
) -> AppServices:
    if score_store is None or profile_store is None:
        built_scores, built_profiles = build_stores(settings)
        score_store = score_store or built_scores
        profile_store = profile_store or built_profiles

    ledger = ledger or build_ledger_client(settings)
    reader = TournamentStateReader(ledger)
    submitter = TransactionSubmitter(ledger)
    reconciler = TournamentReconciler(
        reader,
        submitter,
        duration_seconds=settings.TOURNAMENT_DURATION_SECONDS,
        entry_fee_wei=Web3.to_wei(settings.TOURNAMENT_ENTRY_FEE_ETHER, "ether"),
        auto_create_successor=feature_flags.RECONCILER_AUTO_CREATE_SUCCESSOR,
    )
    gateway = ScoreSubmissionGateway(
        score_store,
        reader=reader,
        submitter=submitter,
        relay_enabled=feature_flags.FEATURE_TOURNAMENT_SCORE_RELAY,
    )
    return AppServices(
        score_store=score_store,
        profile_store=profile_store,
        ledger=ledger,
        reader=reader,
        submitter=submitter,
        reconciler=reconciler,
        gateway=gateway,
    )


def get_services(request: Request) -> AppServices:
    return request.app.state.services


def get_score_store(request: Request) -> ScoreStore:
    return get_services(request).score_store


def get_profile_store(request: Request) -> ProfileStore:
    return get_services(request).profile_store


def get_gateway(request: Request) -> ScoreSubmissionGateway:
    return get_services(request).gateway


def get_reader(request: Request) -> TournamentStateReader:
    return get_services(request).reader


def get_reconciler(request: Request) -> TournamentReconciler:
    return get_services(request).reconciler
