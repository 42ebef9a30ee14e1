from .base import Base

from .score_record import ScoreRecordRow
from .player_profile import PlayerProfileRow

__all__ = ["Base", "ScoreRecordRow", "PlayerProfileRow"]
