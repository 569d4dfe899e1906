"""
타임존 유틸리티

내부 저장: UTC 원칙 준수를 위한 헬퍼 함수.
DB에는 고정 폭 ISO 8601 문자열로 저장하여 문자열 정렬 = 시간 정렬이 되도록 함.
"""

from datetime import datetime, timezone

# DB 저장 포맷 (마이크로초 6자리 고정, 항상 +00:00)
DB_TS_FORMAT = "%Y-%m-%dT%H:%M:%S.%f+00:00"


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)

    datetime.now(timezone.utc)의 축약형.

    Returns:
        현재 UTC 시간 (tzinfo=timezone.utc)
    """
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """datetime을 UTC로 변환

    Args:
        dt: datetime 객체 (naive면 UTC로 간주)

    Returns:
        UTC 타임존의 datetime
    """
    if dt.tzinfo is None:
        # naive datetime은 UTC로 간주
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_db_text(dt: datetime) -> str:
    """DB 저장용 고정 폭 문자열로 변환

    Example:
        >>> to_db_text(datetime(2026, 1, 5, 9, 30, tzinfo=timezone.utc))
        '2026-01-05T09:30:00.000000+00:00'
    """
    return to_utc(dt).strftime(DB_TS_FORMAT)


def from_db_text(value: str) -> datetime:
    """DB 문자열을 UTC datetime으로 변환"""
    return to_utc(datetime.fromisoformat(value))


def format_date(dt: datetime, fmt: str = "%d/%m/%Y") -> str:
    """화면 표시용 날짜 포맷 (기본: dd/MM/yyyy)"""
    return to_utc(dt).strftime(fmt)
