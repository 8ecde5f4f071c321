# app/config.py
from pydantic_settings import BaseSettings
from pydantic import field_validator

class Settings(BaseSettings):
    """환경변수 설정"""
    
    # API 기본 설정
    app_name: str = "Fornelli API"
    debug: bool = True
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
    
    # Database
    database_url: str
    
    # 세션 토큰 (JWT)
    secret_key: str
    algorithm: str = "HS256"
    session_ttl_minutes: int = 120  # 2시간
    
    # 투표 방식: "vote" (1인 1표) 또는 "rating" (1~10점)
    voting_model: str = "rating"
    
    # 참가 시도 제한
    join_attempt_limit: int = 5
    join_attempt_window_minutes: int = 15
    
    # 대회 코드 생성 재시도 횟수
    code_generation_attempts: int = 5
    
    # 사진 스토리지 (없으면 blob 정리 생략)
    storage_url: str = ""
    storage_service_key: str = ""
    storage_bucket: str = "dish-photos"
    
    @field_validator('secret_key')
    def validate_secret_key(cls, v):
        if len(v) < 32:
            raise ValueError('SECRET_KEY는 최소 32자 이상이어야 합니다')
        return v
    
    @field_validator('voting_model')
    def validate_voting_model(cls, v):
        if v not in ("vote", "rating"):
            raise ValueError('VOTING_MODEL은 "vote" 또는 "rating"이어야 합니다')
        return v
    
    class Config:
        env_file = ".env"
        case_sensitive = False

# 싱글톤 인스턴스
settings = Settings()
