# app/core/security.py
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from app.config import settings

# 클라이언트가 보낸 PIN 해시를 한 번 더 해싱해서 저장
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_pin(pin_hash: str) -> str:
    return pwd_context.hash(pin_hash)


def verify_pin(pin_hash: str, stored_hash: str | None) -> bool:
    """PIN 검증 (저장된 해시가 없거나 형식이 다르면 False)"""
    if not stored_hash:
        return False
    try:
        return pwd_context.verify(pin_hash, stored_hash)
    except ValueError:
        return False


def create_session_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """세션 토큰 생성 (기본 2시간)"""
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.session_ttl_minutes))
    to_encode.update({"exp": expire, "iat": now})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_session_token(token: str) -> dict | None:
    """세션 토큰 디코드 (만료/위조면 None)"""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
