# app/models/vote.py
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.sql import func
from app.database import Base
import uuid

class Vote(Base):
    """투표/평점 모델 (참가자당 대회별 1개, 다시 투표하면 덮어씀)"""
    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint("competition_id", "participant_id", name="uq_votes_competition_participant"),
        CheckConstraint("score BETWEEN 1 AND 10", name="ck_votes_score_range"),
    )
    
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    competition_id = Column(String, ForeignKey("competitions.id", ondelete="CASCADE"), nullable=False, index=True)
    participant_id = Column(String, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False)
    dish_id = Column(String, ForeignKey("dishes.id", ondelete="CASCADE"), nullable=False, index=True)
    
    # 1표 방식이면 항상 1, 평점 방식이면 1~10
    score = Column(Integer, nullable=False, default=1)
    
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    
    def __repr__(self):
        return f"<Vote {self.participant_id} -> {self.dish_id} ({self.score})>"
