"""
로깅 설정

장부 서버(web)와 관리 스크립트(scripts) 공통.
콘솔과 logs/{process_name}/{process_name}.log 에 같은 형식으로 기록하며
파일은 자정마다 교체.
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.constants import Paths


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_BACKUP_COUNT = 7

# 전기마다 쿼리/요청 로그를 남기는 로거 (WARNING 이상만)
NOISY_LOGGERS = [
    "aiosqlite",
    "asyncio",
    "httpcore",
    "httpx",
    "uvicorn.access",
]


def get_log_file_path(process_name: str, log_dir: Path | None = None) -> Path:
    """로그 파일 경로 (기본: logs/{process_name}/{process_name}.log)"""
    if log_dir is None:
        log_dir = Paths.LOGS_DIR / process_name
    return log_dir / f"{process_name}.log"


def _file_handler(log_file: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = TimedRotatingFileHandler(
        filename=log_file,
        when="midnight",
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.suffix = "%Y-%m-%d"  # web.log.2026-03-01
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    process_name: str,
    console_level: int = logging.INFO,
    file_level: int = logging.INFO,
    log_dir: Path | None = None,
) -> logging.Logger:
    """루트 로거에 콘솔/파일 핸들러 설정

    여러 번 호출해도 핸들러가 중복되지 않음 (기존 핸들러 교체).

    Args:
        process_name: "web", "scripts" 등. 로그 디렉토리/파일 이름으로 사용
        console_level: 콘솔 레벨
        file_level: 파일 레벨
        log_dir: 로그 디렉토리 (None이면 logs/{process_name})

    Returns:
        루트 Logger
    """
    log_file = get_log_file_path(process_name, log_dir)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(min(console_level, file_level))
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)
    root_logger.addHandler(_file_handler(log_file, file_level, formatter))

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root_logger.debug(f"로깅 초기화: {process_name} → {log_file}")
    return root_logger
