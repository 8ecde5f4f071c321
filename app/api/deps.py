# app/api/deps.py
from datetime import datetime, timezone
from typing import Iterator

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.errors import Unauthorized
from app.core.events import EventBus, event_bus
from app.core.security import decode_session_token
from app.services.storage_service import PhotoStorage, build_photo_storage

# 세션 토큰 Bearer 스킴 (없으면 직접 401 처리)
security = HTTPBearer(auto_error=False)

def get_event_bus() -> EventBus:
    return event_bus

def get_photo_storage() -> Iterator[PhotoStorage | None]:
    """요청마다 만들고 끝나면 HTTP 클라이언트 정리"""
    storage = build_photo_storage()
    try:
        yield storage
    finally:
        if storage is not None:
            storage.close()

def get_session_claims(
    token: HTTPAuthorizationCredentials | None = Depends(security),
) -> dict:
    """세션 토큰 검증 (권한 판단에는 쓰지 않음, 재인증 필요 여부 확인용)"""
    credentials_exception = Unauthorized("Sessione scaduta, inserisci di nuovo il PIN")
    
    if token is None:
        raise credentials_exception
    
    payload = decode_session_token(token.credentials)
    if payload is None or not payload.get("sub"):
        raise credentials_exception
    
    return {
        "competition_id": payload["competition_id"],
        "participant_id": payload["sub"],
        "nickname": payload["nickname"],
        "role": payload["role"],
        "authenticated_at": datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
        "expires_at": datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    }
