"""최근 세션 이력 스냅샷

추천 요청 1회에 저장소를 한 번만 읽고, 점수 계산/선택이 같은 스냅샷을 공유한다.
"""

from typing import List
from datetime import datetime, timedelta

from adaptive_workout.models import FeedbackRecord
from adaptive_workout.stores import FeedbackStore


class RecentHistory:
    """사용자의 최근 세션 피드백 (오래된 순)"""

    def __init__(self, records: List[FeedbackRecord], now: datetime):
        self.records = sorted(records, key=lambda r: r.timestamp)
        self.now = now

    @classmethod
    def load(
        cls, store: FeedbackStore, user_id: str, now: datetime, days: int
    ) -> "RecentHistory":
        since = now - timedelta(days=days)
        return cls(store.list_recent_feedback(user_id, since), now)

    @classmethod
    def empty(cls, now: datetime) -> "RecentHistory":
        return cls([], now)

    def within(self, days: int) -> List[FeedbackRecord]:
        """최근 days일 세션 (최신순)"""
        since = self.now - timedelta(days=days)
        return [r for r in reversed(self.records) if r.timestamp >= since]

    def sessions_including(self, exercise_id: str, days: int) -> List[FeedbackRecord]:
        """해당 운동이 포함된 최근 세션 (최신순)"""
        return [r for r in self.within(days) if r.includes(exercise_id)]

    def performance_count(self, exercise_id: str, days: int) -> int:
        """최근 days일 동안 해당 운동을 수행한 세션 수"""
        return len(self.sessions_including(exercise_id, days))

    def performed_within(self, exercise_id: str, days: int) -> bool:
        return self.performance_count(exercise_id, days) > 0
