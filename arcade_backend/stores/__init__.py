from .score_store import ScoreStore, ScoreRecord, LeaderboardEntry, DEFAULT_LEADERBOARD_LIMIT
from .in_memory_store import InMemoryScoreStore
from .profile_store import (
    ProfileStore,
    InMemoryProfileStore,
    PlayerProfile,
    Achievement,
    ACHIEVEMENTS,
    unlocked_achievements,
)

__all__ = [
    "ScoreStore",
    "ScoreRecord",
    "LeaderboardEntry",
    "DEFAULT_LEADERBOARD_LIMIT",
    "InMemoryScoreStore",
    "ProfileStore",
    "InMemoryProfileStore",
    "PlayerProfile",
    "Achievement",
    "ACHIEVEMENTS",
    "unlocked_achievements",
]
