# app/models/participant.py
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import uuid

ROLE_ADMIN = "admin"
ROLE_PARTICIPANT = "participant"

class Participant(Base):
    """참가자 모델 (닉네임은 대회 안에서만 유일)"""
    __tablename__ = "participants"
    __table_args__ = (
        UniqueConstraint("competition_id", "nickname", name="uq_participants_competition_nickname"),
    )
    
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    competition_id = Column(String, ForeignKey("competitions.id", ondelete="CASCADE"), nullable=False, index=True)
    
    nickname = Column(String, nullable=False)
    pin_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default=ROLE_PARTICIPANT)  # admin / participant
    
    joined_at = Column(DateTime(timezone=True), server_default=func.now())
    
    # 관계
    competition = relationship("Competition", back_populates="participants")
    
    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
    
    def __repr__(self):
        return f"<Participant {self.nickname} ({self.role})>"
