"""저장소 인터페이스

엔진은 피드백 이력과 선호도 행을 이 계약으로만 읽고 쓴다.
구현: memory.py (인메모리), sql.py (SQLAlchemy)
"""

from typing import List, Optional, Protocol
from datetime import datetime

from adaptive_workout.models import ExerciseExecution, ExercisePreference, FeedbackRecord


class FeedbackStore(Protocol):
    """세션 피드백 이력 (추가 전용)"""

    def add_feedback(self, record: FeedbackRecord) -> None:
        """세션 피드백 저장 (세션 완료 워크플로우 전용)"""
        ...

    def list_recent_feedback(self, user_id: str, since: datetime) -> List[FeedbackRecord]:
        """since 이후 피드백 (오래된 순)"""
        ...

    def list_recent_executions(
        self, user_id: str, exercise_name: str, since: datetime
    ) -> List[ExerciseExecution]:
        """since 이후 특정 운동 실행 기록 (최신순)"""
        ...

    def list_recent_exercise_names(self, user_id: str, limit: int) -> List[str]:
        """최근 실행 기록의 운동 ID (최신순, 실행 단위, 최대 limit개)"""
        ...

    def get_feedback(self, session_id: str) -> Optional[FeedbackRecord]:
        ...

    def pending_executions(self, session_id: str) -> List[int]:
        """선호도 학습이 끝나지 않은 실행 기록 위치 (세션 내 순서)"""
        ...

    def mark_learned(self, session_id: str, position: int) -> None:
        """실행 기록 1건의 선호도 학습 완료 표시"""
        ...


class PreferenceStore(Protocol):
    """사용자+운동 단위 선호도 (낙관적 동시성 제어)"""

    def get(self, user_id: str, exercise_name: str) -> Optional[ExercisePreference]:
        ...

    def upsert(
        self, preference: ExercisePreference, expected_version: Optional[int]
    ) -> ExercisePreference:
        """선호도 저장

        Args:
            preference: 저장할 선호도 (version 필드는 무시)
            expected_version: 읽을 때의 버전 (None이면 행이 없어야 함)

        Returns:
            새 버전이 부여된 선호도

        Raises:
            ConcurrencyConflictError: 저장된 버전이 expected_version과 다름
        """
        ...

    def list_for_user(self, user_id: str) -> List[ExercisePreference]:
        ...
