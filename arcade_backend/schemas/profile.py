"""
Pydantic schemas for player profiles
"""
from typing import Optional
from pydantic import BaseModel, Field


class ProfileUpdateRequest(BaseModel):
    """
    Used by: PUT /api/profile/{participant}
    """
    display_name: Optional[str] = Field(None, description="Public name shown on leaderboards")
    bio: Optional[str] = Field(None, description="Short player bio")

    class Config:
        json_schema_extra = {
            "example": {
                "display_name": "chicken_runner",
                "bio": "Crossing roads since 2024"
            }
        }
