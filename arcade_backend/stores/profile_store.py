"""
Player profile storage and achievement derivation.

Profiles used to live only in browser storage; the server copy is now the
authoritative one and clients may cache it read-through.
"""
import abc
import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from arcade_backend.errors import InvalidInputError
from .score_store import ensure_utc, validate_participant

MAX_DISPLAY_NAME_LENGTH = 32
MAX_BIO_LENGTH = 280


@dataclass(frozen=True)
class Achievement:
    key: str
    name: str
    description: str
    threshold: int


ACHIEVEMENTS: Tuple[Achievement, ...] = (
    Achievement("ROOKIE", "Rookie Crosser", "Score 50 points", 50),
    Achievement("ADVENTURER", "Bold Adventurer", "Score 100 points", 100),
    Achievement("EXPERT", "Road Expert", "Score 150 points", 150),
    Achievement("MASTER", "Crossing Master", "Score 200 points", 200),
    Achievement("LEGEND", "Legendary Crosser", "Score 250 points", 250),
)


def unlocked_achievements(best_score: int) -> List[Achievement]:
    return [a for a in ACHIEVEMENTS if best_score >= a.threshold]


@dataclass(frozen=True)
class PlayerProfile:
    participant: str
    display_name: Optional[str]
    bio: Optional[str]
    updated_at: datetime


def validate_profile_fields(display_name: Optional[str], bio: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    if display_name is not None:
        display_name = display_name.strip() or None
        if display_name and len(display_name) > MAX_DISPLAY_NAME_LENGTH:
            raise InvalidInputError(
                f"display_name must be at most {MAX_DISPLAY_NAME_LENGTH} characters",
                field="display_name",
            )
    if bio is not None:
        bio = bio.strip() or None
        if bio and len(bio) > MAX_BIO_LENGTH:
            raise InvalidInputError(f"bio must be at most {MAX_BIO_LENGTH} characters", field="bio")
    return display_name, bio


class ProfileStore(abc.ABC):

    @abc.abstractmethod
    async def get(self, participant: str) -> Optional[PlayerProfile]:
        raise NotImplementedError

    @abc.abstractmethod
    async def put(
        self,
        participant: str,
        display_name: Optional[str],
        bio: Optional[str],
        now: Optional[datetime] = None,
    ) -> PlayerProfile:
        raise NotImplementedError

    @abc.abstractmethod
    async def display_names(self, participants: List[str]) -> Dict[str, str]:
        """Map of participant -> display name, only for participants that set one."""
        raise NotImplementedError


class InMemoryProfileStore(ProfileStore):

    def __init__(self):
        self._profiles: Dict[str, PlayerProfile] = {}
        self._lock = asyncio.Lock()

    async def get(self, participant: str) -> Optional[PlayerProfile]:
        async with self._lock:
            return self._profiles.get(participant)

    async def put(
        self,
        participant: str,
        display_name: Optional[str],
        bio: Optional[str],
        now: Optional[datetime] = None,
    ) -> PlayerProfile:
        validate_participant(participant)
        display_name, bio = validate_profile_fields(display_name, bio)
        profile = PlayerProfile(
            participant=participant,
            display_name=display_name,
            bio=bio,
            updated_at=ensure_utc(now),
        )
        async with self._lock:
            self._profiles[participant] = profile
        return profile

    async def display_names(self, participants: List[str]) -> Dict[str, str]:
        async with self._lock:
            return {
                p: self._profiles[p].display_name
                for p in participants
                if p in self._profiles and self._profiles[p].display_name
            }
