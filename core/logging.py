"""
로깅 설정 유틸리티

Web과 스크립트에서 사용하는 공통 로깅 설정.
- 콘솔: 설정 레벨 (기본 INFO)
- 파일: 일 단위 롤링 (TimedRotatingFileHandler)

모듈은 logger.info("계정 생성", extra={"book_id": ...}) 형태로 문맥을 남기며
ContextFormatter가 extra 값을 메시지 뒤에 key=value로 붙인다.

사용법:
    from core.logging import setup_logging
    setup_logging("web", level=settings.log_level)
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.constants import Paths


# 로그 설정 상수
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_BACKUP_COUNT = 7  # 최대 7일치 파일 유지

# 불필요한 로그를 생성하는 로거 목록 (레벨 조정 대상)
NOISY_LOGGERS = [
    "aiosqlite",      # DB 쿼리마다 executing/completed 로그 (매우 많음)
    "httpcore",
    "httpx",
    "asyncio",
    "uvicorn.access", # 요청마다 access 로그
]

# LogRecord 기본 속성 (extra 문맥과 구분)
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


class ContextFormatter(logging.Formatter):
    """extra 문맥을 메시지 뒤에 붙이는 포맷터

    예: "... | core.ledger.engine | 거래 생성 [book_id=book_default amount=300]"
    """

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = {
            key: value
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{line} [{pairs}]"


def resolve_level(level: int | str) -> int:
    """로그 레벨 변환 ("debug", "INFO", logging.INFO 모두 허용)

    Raises:
        ValueError: 알 수 없는 레벨 이름
    """
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def get_log_dir(process_name: str) -> Path:
    """프로세스별 로그 디렉토리 반환"""
    if process_name == "web":
        return Paths.WEB_LOGS_DIR
    return Paths.LOGS_DIR


def setup_logging(
    process_name: str,
    level: int | str = logging.INFO,
    file_level: int | str = logging.INFO,
    log_dir: Path | None = None,
    to_file: bool = True,
) -> logging.Logger:
    """로깅 설정 초기화

    Args:
        process_name: 프로세스 이름 ("web" 또는 스크립트 이름)
        level: 콘솔 로그 레벨
        file_level: 파일 로그 레벨
        log_dir: 로그 디렉토리 (None이면 프로세스별 기본 경로)
        to_file: 파일 핸들러 사용 여부

    Returns:
        설정된 루트 Logger
    """
    console_level = resolve_level(level)
    formatter = ContextFormatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # 핸들러에서 필터링

    # 재호출 시 핸들러 중복 방지
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    log_file: Path | None = None
    if to_file:
        directory = log_dir or get_log_dir(process_name)
        directory.mkdir(parents=True, exist_ok=True)
        log_file = directory / f"{process_name}.log"

        file_handler = TimedRotatingFileHandler(
            filename=log_file,
            when="midnight",
            interval=1,
            backupCount=LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.suffix = "%Y-%m-%d"  # 백업 파일 형식: web.log.2026-02-21
        file_handler.setLevel(resolve_level(file_level))
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root_logger.info(
        f"로깅 초기화 완료: {process_name}",
        extra={
            "console_level": logging.getLevelName(console_level),
            "log_file": str(log_file) if log_file else None,
        },
    )
    return root_logger
