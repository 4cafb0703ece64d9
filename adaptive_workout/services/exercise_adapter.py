"""운동 조정 서비스

프로필 적응 팩터와 운동별 최근 진행도로 세트/반복/휴식/강도를 조정한다.
같은 입력이면 항상 같은 결과를 낸다.
"""

import logging
from typing import Callable, Optional, Tuple
from datetime import datetime, timedelta

from langsmith import traceable

from shared.models import UserContext
from shared.utils import clamp, recency_weight, round_half_up, utcnow, weighted_mean_or
from adaptive_workout.config import settings
from adaptive_workout.models import (
    AdaptedExercise,
    ExerciseProgress,
    ExerciseTemplate,
    FitnessProfile,
    ScoredExercise,
)
from adaptive_workout.services.catalog import ExerciseCatalog, get_catalog
from adaptive_workout.stores import FeedbackStore

logger = logging.getLogger(__name__)

MIN_SETS = 2
MAX_SETS = 6
MIN_REPS = 5
MIN_REST_SECONDS = 30
MIN_INTENSITY = 2.0
PROGRESS_RECENCY_DECAY = 0.15
NEUTRAL_RECOVERY = 3.0

TIP_CHALLENGE = "이전보다 조금 더 도전적으로 설정했어요! 💪"
TIP_EASE = "무리하지 않게 강도를 조절했어요 😊"
TIP_MATCH = "현재 수준에 맞게 설정했어요 👍"


class ExerciseAdapter:
    """운동별 볼륨/강도 조정"""

    def __init__(
        self,
        feedback_store: FeedbackStore,
        catalog: Optional[ExerciseCatalog] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.feedback_store = feedback_store
        self.catalog = catalog or get_catalog()
        self.clock = clock

    @traceable(name="exercise_progress")
    def progress(self, user: UserContext, exercise_id: str) -> ExerciseProgress:
        """운동별 최근 3주 진행도 (최신 기록 가중)"""
        since = self.clock() - timedelta(days=settings.feedback_window_days)
        executions = self.feedback_store.list_recent_executions(user.user_id, exercise_id, since)
        if not executions:
            return ExerciseProgress(exercise_name=exercise_id)

        completion_pairs = []
        difficulty_pairs = []
        for i, execution in enumerate(executions):
            weight = recency_weight(i, PROGRESS_RECENCY_DECAY)
            if execution.completion_rate is not None:
                completion_pairs.append((execution.completion_rate, weight))
            if execution.difficulty is not None:
                difficulty_pairs.append((execution.difficulty, weight))

        return ExerciseProgress(
            exercise_name=exercise_id,
            average_completion_rate=clamp(weighted_mean_or(completion_pairs, 0.8), 0.0, 1.0),
            average_difficulty=clamp(weighted_mean_or(difficulty_pairs, 3.0), 1.0, 5.0),
            data_points=len(executions),
        )

    @traceable(name="exercise_adaptation")
    def adapt(
        self,
        user: UserContext,
        profile: FitnessProfile,
        exercise_id: str,
        base_template: Optional[ExerciseTemplate] = None,
        score: Optional[ScoredExercise] = None,
        progress: Optional[ExerciseProgress] = None,
    ) -> AdaptedExercise:
        """
        운동 조정

        Args:
            user: 사용자 정보
            profile: 피트니스 프로필
            exercise_id: 운동 ID
            base_template: 기본 템플릿 (없으면 카탈로그 조회)
            score: 선택 단계의 점수 정보 (선택)
            progress: 운동별 진행도 (없으면 조회)

        Returns:
            AdaptedExercise
        """
        template = base_template or self.catalog.get_template(exercise_id)
        progress = progress or self.progress(user, exercise_id)
        personalized = profile.is_personalized
        factor = profile.adaptation_factor if personalized else 0.0
        recovery = profile.recovery_pattern if personalized else NEUTRAL_RECOVERY

        sets, sets_direction = adapt_sets(template.sets, factor, progress)
        reps, reps_direction = adapt_reps(template.reps, factor, progress)

        direction = sets_direction or reps_direction
        if direction > 0:
            tip = TIP_CHALLENGE
        elif direction < 0:
            tip = TIP_EASE
        else:
            tip = tip_for_factor(factor)

        adapted = AdaptedExercise(
            exercise_id=exercise_id,
            name=template.display_name,
            name_en=template.name_en,
            target=template.target,
            sets=sets,
            reps=reps,
            unit=template.unit,
            rest_seconds=adapt_rest(template.rest_seconds, recovery),
            intensity=adapt_intensity(template.mets, factor),
            motion_coaching=template.motion_coaching,
            score=score.score if score is not None else None,
            personalized_tip=tip,
            adjusted_by_progress=direction != 0,
            backfilled=score.backfilled if score is not None else False,
            is_generic=template.is_generic,
        )
        logger.debug(
            f"운동 조정: {exercise_id} sets {template.sets}->{sets}, reps {template.reps}->{reps}, "
            f"factor={factor:.2f}, progress_n={progress.data_points}"
        )
        return adapted


def tip_for_factor(factor: float) -> str:
    if factor > 0.1:
        return TIP_CHALLENGE
    elif factor < -0.1:
        return TIP_EASE
    return TIP_MATCH


def adapt_sets(base: int, factor: float, progress: ExerciseProgress) -> Tuple[int, int]:
    """세트 수 조정 (2-6)

    Returns:
        (세트 수, 진행도 조정 방향: 1 증가 / -1 감소 / 0 없음)
    """
    factor = clamp(factor, -0.3, 0.3)
    if progress.has_history:
        cr = progress.average_completion_rate
        difficulty = progress.average_difficulty
        if cr > 0.9 and difficulty < 2.5:
            return int(clamp(base + 1, MIN_SETS, MAX_SETS)), 1
        if cr < 0.7 or difficulty > 4.0:
            return int(clamp(base - 1, MIN_SETS, MAX_SETS)), -1
    return int(clamp(base + round_half_up(factor * 2), MIN_SETS, MAX_SETS)), 0


def adapt_reps(base: int, factor: float, progress: ExerciseProgress) -> Tuple[int, int]:
    """반복 수 조정 (최소 5)

    Returns:
        (반복 수, 진행도 조정 방향)
    """
    factor = clamp(factor, -0.3, 0.3)
    direction = 0
    multiplier = 1 + factor * 0.3
    if progress.has_history:
        cr = progress.average_completion_rate
        difficulty = progress.average_difficulty
        if cr > 0.95 and difficulty < 2.5:
            multiplier, direction = 1.2, 1
        elif cr < 0.6 or difficulty > 4.0:
            multiplier, direction = 0.8, -1
    return max(MIN_REPS, round_half_up(base * multiplier)), direction


def adapt_rest(base: int, recovery_pattern: float) -> int:
    """휴식 시간 조정 (회복이 빠를수록 짧게, 최소 30초)"""
    recovery = clamp(recovery_pattern, 1.0, 5.0)
    adjusted = base * (1 - ((recovery - 3.0) / 2.0) * 0.2)
    return max(MIN_REST_SECONDS, round_half_up(adjusted))


def adapt_intensity(base_mets: float, factor: float) -> float:
    """강도(METs) 조정 (최소 2.0)"""
    factor = clamp(factor, -0.3, 0.3)
    return max(MIN_INTENSITY, round(base_mets * (1 + factor * 0.15), 2))
