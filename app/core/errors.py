# app/core/errors.py
"""
도메인 에러 → HTTP 상태 코드 매핑

서비스 레이어에서 바로 raise 하면 FastAPI가 그대로 응답으로 변환한다.
"""
from fastapi import HTTPException, status


class InvalidInput(HTTPException):
    """잘못된 입력 / 허용되지 않는 상태 전이 (400)"""

    def __init__(self, detail: str = "Dati non validi"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class Unauthorized(HTTPException):
    """PIN 불일치, 세션 만료 (401)"""

    def __init__(self, detail: str = "Non autenticato"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class Forbidden(HTTPException):
    """인증은 되었지만 권한/단계/소유권 위반 (403)"""

    def __init__(self, detail: str = "Non autorizzato"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Non trovato"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class RateLimited(HTTPException):
    def __init__(self, detail: str = "Troppi tentativi. Riprova tra 15 minuti."):
        super().__init__(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=detail)


class Internal(HTTPException):
    """스토리지/DB 장애 (500)"""

    def __init__(self, detail: str = "Errore interno del server"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
