# app/models/login_attempt.py
from sqlalchemy import Column, String, DateTime, Index
from app.database import Base
from datetime import datetime, timezone
import uuid

class LoginAttempt(Base):
    """참가 시도 기록 (추가만 함, 시도 횟수 제한용)"""
    __tablename__ = "login_attempts"
    __table_args__ = (
        Index("idx_login_attempts_lookup", "competition_code", "nickname", "attempted_at"),
    )
    
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    competition_code = Column(String(6), nullable=False)
    nickname = Column(String, nullable=False)
    attempted_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    
    def __repr__(self):
        return f"<LoginAttempt {self.competition_code}/{self.nickname}>"
