"""시각 유틸리티 (공유)

저장/비교하는 시각은 모두 tz 없는 UTC로 통일한다.
"""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """현재 UTC 시각 (tz 없음)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """tz가 있는 시각은 UTC로 변환 후 tz 제거"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
