# app/client/session_store.py
"""
클라이언트 세션 캐시

대회 코드별로 마지막 인증 정보를 보관한다. 서버 권한 판단에는 쓰지 않고
(서버가 매번 DB에서 다시 확인), 재인증 화면을 띄울지 결정하는 용도.
"""
import time
from datetime import timedelta
from typing import Callable, Optional

from pydantic import BaseModel

SESSION_TTL = timedelta(hours=2)


class ClientSession(BaseModel):
    competition_id: str
    competition_code: str
    competition_name: str = ""
    participant_id: str
    nickname: str
    role: str
    authenticated_at: float  # epoch seconds
    session_token: Optional[str] = None


class SessionStore:
    def __init__(self, ttl: timedelta = SESSION_TTL, clock: Callable[[], float] = time.time):
        self.ttl = ttl
        self._clock = clock
        self._sessions: dict[str, ClientSession] = {}
        # 만료돼서 빠진 세션 (재인증 때 닉네임 확인용)
        self._expired: dict[str, ClientSession] = {}

    def _is_expired(self, session: ClientSession) -> bool:
        return self._clock() - session.authenticated_at > self.ttl.total_seconds()

    def _retire(self, code: str) -> None:
        self._expired[code] = self._sessions.pop(code)

    def add(self, session: ClientSession) -> None:
        self._expired.pop(session.competition_code, None)
        self._sessions[session.competition_code] = session

    def get(self, code: str) -> ClientSession | None:
        """만료된 세션은 읽는 순간 유효 목록에서 빠짐"""
        code = code.upper()
        session = self._sessions.get(code)
        if session is None:
            return None
        if self._is_expired(session):
            self._retire(code)
            return None
        return session

    def peek(self, code: str) -> ClientSession | None:
        """만료 여부와 상관없이 조회 (재인증 때 닉네임 확인용)"""
        code = code.upper()
        return self._sessions.get(code) or self._expired.get(code)

    def remove(self, code: str) -> None:
        self._sessions.pop(code.upper(), None)
        self._expired.pop(code.upper(), None)

    def clear_expired(self) -> None:
        for code in [c for c, s in self._sessions.items() if self._is_expired(s)]:
            self._retire(code)

    def all_sessions(self) -> list[ClientSession]:
        return [s for s in self._sessions.values() if not self._is_expired(s)]

    def now(self) -> float:
        return self._clock()
