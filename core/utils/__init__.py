"""
유틸리티 패키지

타임존 처리 등 공통 유틸리티
"""

from core.utils.timezone import (
    format_date,
    from_db_text,
    now_utc,
    to_db_text,
    to_utc,
)

__all__ = [
    "now_utc",
    "to_utc",
    "to_db_text",
    "from_db_text",
    "format_date",
]
