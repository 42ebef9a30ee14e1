"""
Player profile ORM model (display name and bio per participant).
"""
from sqlalchemy import Column, String, Text, DateTime

from arcade_backend.orm.base import BaseModel, utcnow


class PlayerProfileRow(BaseModel):
    __tablename__ = "player_profiles"

    participant = Column(String(128), nullable=False, unique=True, index=True)
    display_name = Column(String(32), nullable=True)
    bio = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
