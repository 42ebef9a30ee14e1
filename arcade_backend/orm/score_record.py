"""
Score history ORM model.

Append-only: one row per submitted score. A participant's best score is
aggregated on read, so concurrent submissions never race on an update.
"""
from sqlalchemy import Column, String, BigInteger, DateTime, Index

from arcade_backend.orm.base import BaseModel


class ScoreRecordRow(BaseModel):
    """Persisted ScoreRecord. `id` doubles as the insertion sequence."""
    __tablename__ = "score_records"

    participant = Column(String(128), nullable=False)
    score = Column(BigInteger, nullable=False)
    observed_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index('idx_score_records_participant', 'participant'),
        Index('idx_score_records_ranking', 'score', 'observed_at'),
    )

    def __repr__(self):
        return f"<ScoreRecordRow {self.participant} score={self.score}>"
