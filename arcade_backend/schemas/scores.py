"""
arcade_backend/schemas/scores.py
Pydantic schemas for score ingestion and leaderboard queries

Endpoints use the standardized response format:
{
    "success": bool,
    ...payload
}
"""
from typing import Optional
from pydantic import BaseModel, Field, StrictInt, StrictStr


# ================= REQUEST SCHEMAS =================

class ScoreSubmitRequest(BaseModel):
    """
    Score report from a finished game session.

    Used by: POST /api/scores

    Emptiness and sign are checked by the gateway so those failures surface
    as INVALID_INPUT rather than schema validation errors.
    """
    participant: StrictStr = Field(..., description="Participant identity, e.g. an account address")
    score: StrictInt = Field(..., description="Final score (non-negative integer)")

    class Config:
        json_schema_extra = {
            "example": {
                "participant": "0x52908400098527886E0F7030069857D2E4169EE7",
                "score": 42
            }
        }
