"""세션 피드백 학습 서비스

세션 완료 후 피드백을 저장하고, 운동별 관측값으로 선호도를 갱신한다.
"""

import logging
from typing import Callable, List, Optional
from datetime import datetime

from langsmith import traceable

from shared.models import UserContext
from shared.utils import clamp, optional_clamp, to_naive_utc, utcnow
from adaptive_workout.exceptions import DuplicateSessionError
from adaptive_workout.models import (
    ExerciseExecution,
    FeedbackRecord,
    PreferenceUpdate,
    SessionFeedbackInput,
    SessionFeedbackResult,
)
from adaptive_workout.services.preference_ledger import PreferenceLedger
from adaptive_workout.stores import FeedbackStore

logger = logging.getLogger(__name__)


def preference_observation(
    satisfaction: Optional[float],
    would_repeat: Optional[bool],
    completion_rate: Optional[float],
) -> float:
    """선호 관측값 (-1 ~ 1)

    만족도 40% + 재선택 의향 30% + 완료율 30%, 값이 있는 항목만 반영
    """
    score = 0.0
    satisfaction = optional_clamp(satisfaction, 1.0, 5.0)
    completion_rate = optional_clamp(completion_rate, 0.0, 1.0)

    if satisfaction is not None:
        score += (satisfaction - 3.0) / 2.0 * 0.4
    if would_repeat is not None:
        score += (0.5 if would_repeat else -0.5) * 0.3
    if completion_rate is not None:
        score += (completion_rate - 0.5) * 2.0 * 0.3

    return clamp(score, -1.0, 1.0)


def effectiveness_observation(
    perceived_exertion: Optional[float], completion_rate: Optional[float]
) -> float:
    """효과 관측값 (0 ~ 1)

    RPE 6-8이 가장 효과적, 완료율이 높을수록 효과적
    """
    score = 0.5
    rpe = optional_clamp(perceived_exertion, 1.0, 10.0)
    completion_rate = optional_clamp(completion_rate, 0.0, 1.0)

    if rpe is not None:
        if 6 <= rpe <= 8:
            score += 0.3
        elif 4 <= rpe <= 9:
            score += 0.1

    if completion_rate is not None:
        if completion_rate >= 0.9:
            score += 0.2
        elif completion_rate >= 0.7:
            score += 0.1
        elif completion_rate < 0.5:
            score -= 0.2

    return clamp(score, 0.0, 1.0)


class SessionFeedbackService:
    """세션 피드백 저장 + 선호도 학습

    사용 예시:
        service = SessionFeedbackService(feedback_store, ledger)
        result = service.record(user, feedback_input)
    """

    def __init__(
        self,
        feedback_store: FeedbackStore,
        ledger: PreferenceLedger,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.feedback_store = feedback_store
        self.ledger = ledger
        self.clock = clock

    def to_record(self, user: UserContext, data: SessionFeedbackInput) -> FeedbackRecord:
        """입력 → 저장용 피드백 기록"""
        completed_at = to_naive_utc(data.completed_at) or self.clock()
        executions = [
            ExerciseExecution(performed_at=completed_at, **ex.model_dump())
            for ex in data.exercises
        ]
        return FeedbackRecord(
            session_id=data.session_id,
            user_id=user.user_id,
            timestamp=completed_at,
            completion_rate=data.completion_rate,
            overall_difficulty=data.overall_difficulty,
            satisfaction=data.satisfaction,
            energy_after=data.energy_after,
            muscle_soreness=data.muscle_soreness,
            would_repeat=data.would_repeat,
            comments=data.comments,
            executions=executions,
        )

    @traceable(name="session_feedback_learning")
    def record(self, user: UserContext, data: SessionFeedbackInput) -> SessionFeedbackResult:
        """
        세션 피드백 저장 및 선호도 학습

        학습 도중 실패한 세션을 같은 session_id로 다시 제출하면
        저장된 기록 기준으로 남은 운동만 학습한다.

        Args:
            user: 사용자 정보
            data: 세션 피드백 입력

        Returns:
            SessionFeedbackResult

        Raises:
            DuplicateSessionError: 이미 학습까지 끝난 세션 (또는 다른 사용자의 세션)
            PreferenceUpdateConflictError: 선호도 갱신 충돌이 재시도 후에도 지속
        """
        record = self.to_record(user, data)
        try:
            self.feedback_store.add_feedback(record)
            pending = list(range(len(record.executions)))
        except DuplicateSessionError:
            stored = self.feedback_store.get_feedback(record.session_id)
            pending = self.feedback_store.pending_executions(record.session_id)
            if stored is None or stored.user_id != user.user_id or not pending:
                raise
            logger.info(
                f"미완료 세션 학습 재개: session={record.session_id}, 남은 운동 {len(pending)}개"
            )
            record = stored

        for position in pending:
            execution = record.executions[position]
            completion = execution.completion_rate
            if completion is None:
                completion = record.clamped_completion_rate

            self.ledger.update(
                user.user_id,
                execution.exercise_name,
                preference_observation(record.satisfaction, record.would_repeat, completion),
                effectiveness_observation(execution.perceived_exertion, completion),
                performed_at=record.timestamp,
            )
            self.feedback_store.mark_learned(record.session_id, position)

        updates: List[PreferenceUpdate] = []
        for exercise_name in record.exercise_names:
            saved = self.ledger.get(user.user_id, exercise_name)
            updates.append(
                PreferenceUpdate(
                    exercise_name=saved.exercise_name,
                    preference_score=saved.preference_score,
                    effectiveness_score=saved.effectiveness_score,
                    data_points=saved.data_points,
                    confidence_score=saved.confidence_score,
                    preference_label=saved.preference_label,
                )
            )

        logger.info(
            f"세션 피드백 저장: user={user.user_id}, session={record.session_id}, "
            f"운동 {len(pending)}개 학습"
        )
        return SessionFeedbackResult(
            session_id=record.session_id,
            user_id=user.user_id,
            recorded_at=record.timestamp,
            success_score=record.success_score,
            preferences=updates,
        )
