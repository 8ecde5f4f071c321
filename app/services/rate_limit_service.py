# app/services/rate_limit_service.py
from sqlalchemy.orm import Session
from datetime import datetime, timedelta, timezone
from app.config import settings
from app.core.errors import RateLimited
from app.core.logger import logger
from app.models.login_attempt import LoginAttempt

def _window_start(now: datetime | None = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return now - timedelta(minutes=settings.join_attempt_window_minutes)

def count_recent_attempts(db: Session, code: str, nickname: str, now: datetime | None = None) -> int:
    """최근 N분 동안의 참가 시도 횟수"""
    return db.query(LoginAttempt)\
        .filter(
            LoginAttempt.competition_code == code,
            LoginAttempt.nickname == nickname,
            LoginAttempt.attempted_at >= _window_start(now)
        )\
        .count()

def check_join_limit(db: Session, code: str, nickname: str, now: datetime | None = None) -> None:
    """
    참가 시도 제한 체크 후 이번 시도 기록
    - 같은 (코드, 닉네임)으로 15분에 5번까지
    - 초과하면 기록도 하지 않고 429
    """
    attempts = count_recent_attempts(db, code, nickname, now)
    
    if attempts >= settings.join_attempt_limit:
        logger.warning(f"참가 시도 제한 초과: {code}/{nickname} ({attempts}회)")
        raise RateLimited(
            f"Troppi tentativi. Riprova tra {settings.join_attempt_window_minutes} minuti."
        )
    
    db.add(LoginAttempt(
        competition_code=code,
        nickname=nickname,
        attempted_at=now or datetime.now(timezone.utc)
    ))
    db.commit()

