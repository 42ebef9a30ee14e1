"""
Profile Router

Player display names, bios and unlocked achievements.
"""
import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends

from arcade_backend.dependencies import get_profile_store, get_score_store
from arcade_backend.schemas.profile import ProfileUpdateRequest
from arcade_backend.stores.profile_store import PlayerProfile, ProfileStore, unlocked_achievements
from arcade_backend.stores.score_store import ScoreStore, validate_participant

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/profile", tags=["profile"])


async def _profile_payload(participant: str, profile, store: ScoreStore) -> dict:
    best = await store.best_score(participant)
    return {
        "success": True,
        "participant": participant,
        "display_name": profile.display_name if profile else None,
        "bio": profile.bio if profile else None,
        "updated_at": profile.updated_at.isoformat() if profile else None,
        "best_score": best,
        "achievements": [asdict(a) for a in unlocked_achievements(best)],
    }


@router.get("/{participant}")
async def get_profile(
    participant: str,
    profiles: ProfileStore = Depends(get_profile_store),
    store: ScoreStore = Depends(get_score_store),
):
    """Profile for a participant. Participants without a saved profile get empty fields."""
    validate_participant(participant)
    profile = await profiles.get(participant)
    return await _profile_payload(participant, profile, store)


@router.put("/{participant}")
async def update_profile(
    participant: str,
    body: ProfileUpdateRequest,
    profiles: ProfileStore = Depends(get_profile_store),
    store: ScoreStore = Depends(get_score_store),
):
    profile: PlayerProfile = await profiles.put(participant, body.display_name, body.bio)
    logger.info(f"Profile updated for {participant}")
    return await _profile_payload(participant, profile, store)
