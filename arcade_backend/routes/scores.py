"""
Scores Router

POST /api/scores  - accept a finished-game score
GET  /api/scores  - participant history or the global leaderboard
"""
import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from arcade_backend.config import settings
from arcade_backend.dependencies import get_gateway, get_profile_store, get_score_store
from arcade_backend.schemas.scores import ScoreSubmitRequest
from arcade_backend.security.rate_limit import limiter
from arcade_backend.services.score_submission_gateway import ScoreSubmissionGateway
from arcade_backend.stores.profile_store import ProfileStore, unlocked_achievements
from arcade_backend.stores.score_store import DEFAULT_LEADERBOARD_LIMIT, ScoreStore, validate_participant

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/scores", tags=["scores"])


@router.post("")
@limiter.limit(settings.SCORE_RATE_LIMIT)
async def submit_score(
    request: Request,
    body: ScoreSubmitRequest,
    gateway: ScoreSubmissionGateway = Depends(get_gateway),
):
    """
    Record a score for a participant.

    Returns the participant's best after the write and whether this
    submission is a new personal best.
    """
    result = await gateway.submit(body.participant, body.score)
    return {"success": True, **result.to_dict()}


@router.get("")
async def get_scores(
    participant: Optional[str] = Query(None, description="Return this participant's history instead of the leaderboard"),
    limit: int = Query(DEFAULT_LEADERBOARD_LIMIT, ge=1, le=DEFAULT_LEADERBOARD_LIMIT),
    store: ScoreStore = Depends(get_score_store),
    profiles: ProfileStore = Depends(get_profile_store),
):
    if participant is not None:
        validate_participant(participant)
        records = await store.history(participant)
        best = await store.best_score(participant)
        names = await profiles.display_names([participant])
        return {
            "success": True,
            "participant": participant,
            "display_name": names.get(participant),
            "best_score": best,
            "scores": [
                {"participant": r.participant, "score": r.score, "observed_at": r.observed_at.isoformat()}
                for r in records
            ],
            "achievements": [asdict(a) for a in unlocked_achievements(best)],
        }

    entries = await store.leaderboard(limit)
    names = await profiles.display_names([e.participant for e in entries])
    leaderboard = []
    for entry in entries:
        row = entry.to_dict()
        row["display_name"] = names.get(entry.participant)
        leaderboard.append(row)

    return {
        "success": True,
        "limit": limit,
        "leaderboard": leaderboard,
    }
