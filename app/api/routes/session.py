# app/api/routes/session.py
from fastapi import APIRouter, Depends

from app.api.deps import get_session_claims
from app.schemas.session import SessionResponse

router = APIRouter(prefix="/api/v1/session", tags=["sessione"])

@router.get("", response_model=SessionResponse)
def read_session(claims: dict = Depends(get_session_claims)):
    """세션 토큰 확인 (만료면 401 → 재인증)"""
    return claims
