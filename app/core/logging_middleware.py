# app/core/logging_middleware.py
from fastapi import Request
from app.core.logger import logger
import time

async def log_requests(request: Request, call_next):
    """요청/응답 로깅 (상태 코드별 레벨 구분)"""
    
    start_time = time.perf_counter()
    client = request.client.host if request.client else "-"
    
    logger.debug(f"-> {request.method} {request.url.path} from {client}")
    
    try:
        response = await call_next(request)
    except Exception as e:
        elapsed = (time.perf_counter() - start_time) * 1000
        logger.error(
            f"{request.method} {request.url.path} "
            f"- Error: {e!r} - Time: {elapsed:.2f}ms"
        )
        logger.exception("Exception details:")
        raise
    
    elapsed = (time.perf_counter() - start_time) * 1000
    message = (
        f"<- {request.method} {request.url.path} "
        f"- Status: {response.status_code} - Time: {elapsed:.2f}ms"
    )
    
    # 4xx는 경고, 5xx는 에러
    if response.status_code >= 500:
        logger.error(message)
    elif response.status_code >= 400:
        logger.warning(message)
    else:
        logger.info(message)
    
    return response
