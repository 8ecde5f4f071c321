# app/core/logger.py
from loguru import logger
import sys
import os

from app.config import settings

# 로그 디렉토리 (테스트에서는 LOG_DIR로 변경)
LOG_DIR = os.getenv("LOG_DIR", "logs")
os.makedirs(LOG_DIR, exist_ok=True)

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"

# 기본 로거 제거
logger.remove()

# 콘솔: debug 모드면 DEBUG까지
logger.add(
    sys.stdout,
    colorize=True,
    format=CONSOLE_FORMAT,
    level="DEBUG" if settings.debug else "INFO"
)

# 전체 로그 (10MB 회전, 30일 보관)
logger.add(
    f"{LOG_DIR}/fornelli.log",
    rotation="10 MB",
    retention="30 days",
    compression="zip",
    format=FILE_FORMAT,
    level="DEBUG"
)

# 에러 전용
logger.add(
    f"{LOG_DIR}/error.log",
    rotation="10 MB",
    retention="30 days",
    compression="zip",
    format=FILE_FORMAT,
    level="ERROR",
    backtrace=True
)
