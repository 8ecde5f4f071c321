# app/schemas/session.py
from datetime import datetime

from app.schemas.base import CamelModel

class SessionResponse(CamelModel):
    """세션 토큰 내용"""
    competition_id: str
    participant_id: str
    nickname: str
    role: str
    authenticated_at: datetime
    expires_at: datetime
