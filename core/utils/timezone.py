"""
타임존 유틸리티

내부 저장은 항상 UTC (ISO-8601, 타임존 명시)
"""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)

    datetime.now(timezone.utc)의 축약형.

    Returns:
        현재 UTC 시간 (tzinfo=timezone.utc)
    """
    return datetime.now(timezone.utc)


def now_utc_iso() -> str:
    """현재 UTC 시간 ISO-8601 문자열 (마이크로초 고정 자릿수)

    자릿수를 고정해야 TEXT 컬럼 정렬이 시간 순서와 일치함.
    """
    return now_utc().isoformat(timespec="microseconds")
