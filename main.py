# main.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.config import settings
from app.api.routes import competition, dishes, votes, session
from app.core.logging_middleware import log_requests
from app.core.logger import logger

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug
)

# ===== 로깅 미들웨어 (가장 먼저) =====
@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    return await log_requests(request, call_next)

# 요청 크기 제한 (JSON만 받음, 사진은 스토리지로 직접 업로드)
MAX_REQUEST_SIZE = 1 * 1024 * 1024

@app.middleware("http")
async def limit_request_size(request: Request, call_next):
    """요청 크기 제한"""
    if request.method in ["POST", "PUT", "PATCH"]:
        content_length = request.headers.get("content-length")
        if content_length and int(content_length) > MAX_REQUEST_SIZE:
            return JSONResponse(
                status_code=413,
                content={"detail": f"Richiesta troppo grande. Massimo: {MAX_REQUEST_SIZE // 1024} KB"}
            )
    return await call_next(request)

# 입력 검증 실패는 422 대신 400 + 첫 번째 에러 메시지
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = first.get("msg", "Dati non validi")
    logger.debug(f"입력 검증 실패 {request.url.path}: {errors}")
    return JSONResponse(
        status_code=400,
        content={"detail": f"{field}: {message}" if field else message}
    )

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 라우터 등록
app.include_router(competition.router)
app.include_router(dishes.router)
app.include_router(votes.router)
app.include_router(session.router)

@app.on_event("startup")
async def startup_event():
    logger.info(f"Fornelli API 서버 시작 (투표 방식: {settings.voting_model})")

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Fornelli API 서버 종료")

@app.get("/health")
def health_check():
    """헬스체크"""
    return {
        "status": "healthy",
        "service": settings.app_name
    }
