"""피트니스 프로필 계산 서비스

최근 4주 세션 피드백으로 사용자의 현재 상태를 계산한다.
피드백이 3개 미만이면 경험 수준 기반 기본 프로필을 반환한다.
"""

import logging
import math
from typing import Callable, List, Optional
from datetime import datetime, timedelta

from langsmith import traceable

from shared.models import UserContext
from shared.utils import clamp, mean_or, utcnow
from adaptive_workout.config import settings
from adaptive_workout.exceptions import InvalidInputError
from adaptive_workout.models import FeedbackRecord, FitnessProfile
from adaptive_workout.services.catalog import ExerciseCatalog, get_catalog
from adaptive_workout.stores import FeedbackStore

logger = logging.getLogger(__name__)

# 지표별 데이터가 없을 때의 기본값
DEFAULT_COMPLETION_RATE = 0.8
DEFAULT_SATISFACTION = 3.0
DEFAULT_DIFFICULTY = 3.0
DEFAULT_REPEAT_RATE = 0.7
DEFAULT_NORMALIZED_SATISFACTION = 0.5
DEFAULT_MOTIVATION = 0.5
DEFAULT_RECOVERY = 3.0
DEFAULT_CONSISTENCY = 0.2
TREND_SAMPLE_SIZE = 3


def _values(records: List[FeedbackRecord], attr: str) -> List[float]:
    """지표 값 목록 (값이 없는 기록은 건너뜀)"""
    values = []
    for record in records:
        value = getattr(record, attr)
        if value is not None:
            values.append(value)
    return values


def _population_std(values: List[float]) -> Optional[float]:
    if not values:
        return None
    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return math.sqrt(variance)


class FitnessProfileCalculator:
    """피트니스 프로필 계산

    사용 예시:
        calculator = FitnessProfileCalculator(feedback_store)
        profile = calculator.calculate(user)
    """

    def __init__(
        self,
        feedback_store: FeedbackStore,
        catalog: Optional[ExerciseCatalog] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.feedback_store = feedback_store
        self.catalog = catalog or get_catalog()
        self.clock = clock

    @traceable(name="fitness_profile_calculation")
    def calculate(
        self,
        user: UserContext,
        history_window_days: Optional[int] = None,
        goal: Optional[str] = None,
    ) -> FitnessProfile:
        """
        피트니스 프로필 계산

        Args:
            user: 사용자 정보
            history_window_days: 분석 기간 (기본값: 28일)
            goal: 프로필에 기록할 목표 (없으면 사용자 기본 목표)

        Returns:
            FitnessProfile
        """
        window = (
            settings.profile_window_days if history_window_days is None else history_window_days
        )
        if window < 0:
            raise InvalidInputError(f"history_window_days는 0 이상이어야 합니다: {window}")
        since = self.clock() - timedelta(days=window)
        records = sorted(
            self.feedback_store.list_recent_feedback(user.user_id, since),
            key=lambda r: r.timestamp,
        )
        return self.calculate_from_records(user, records, goal=goal)

    def calculate_from_records(
        self,
        user: UserContext,
        records: List[FeedbackRecord],
        goal: Optional[str] = None,
    ) -> FitnessProfile:
        """이미 조회한 기록(오래된 순)으로 프로필 계산"""
        resolved_goal = goal or user.goal or settings.default_goal

        if len(records) < settings.min_data_points:
            logger.info(
                f"피드백 부족 ({len(records)}개) - 기본 프로필 사용: user={user.user_id}"
            )
            return self._default_profile(user, resolved_goal, len(records))

        completion_rates = _values(records, "clamped_completion_rate")
        satisfactions = _values(records, "clamped_satisfaction")
        difficulties = _values(records, "clamped_difficulty")

        avg_completion = mean_or(completion_rates, DEFAULT_COMPLETION_RATE)
        normalized_satisfaction = mean_or(
            [(s - 1.0) / 4.0 for s in satisfactions], DEFAULT_NORMALIZED_SATISFACTION
        )
        avg_difficulty = mean_or(difficulties, DEFAULT_DIFFICULTY)

        profile = FitnessProfile(
            user_id=user.user_id,
            goal=resolved_goal,
            experience_level=user.experience,
            current_fitness_level=self._fitness_level(
                avg_completion, normalized_satisfaction, avg_difficulty
            ),
            average_completion_rate=clamp(avg_completion, 0.0, 1.0),
            preferred_difficulty=self._preferred_difficulty(records),
            progress_trend=self._progress_trend(records),
            recovery_pattern=self._recovery_pattern(records),
            motivation_level=self._motivation_level(records, normalized_satisfaction),
            confidence_score=self._confidence(len(records), satisfactions),
            data_points=len(records),
        )

        logger.info(
            f"피트니스 프로필 계산 완료: user={user.user_id}, "
            f"신뢰도={profile.confidence_score:.2f}, 피트니스레벨={profile.current_fitness_level:.2f}"
        )
        return profile

    def _default_profile(self, user: UserContext, goal: str, count: int) -> FitnessProfile:
        """데이터가 부족한 사용자용 기본 프로필"""
        tier = self.catalog.experience_tier(user.experience)
        confidence = min(0.5, 0.5 * count / settings.min_data_points)
        return FitnessProfile(
            user_id=user.user_id,
            goal=goal,
            experience_level=user.experience,
            current_fitness_level=tier.base_fitness_level,
            average_completion_rate=DEFAULT_COMPLETION_RATE,
            preferred_difficulty=DEFAULT_DIFFICULTY,
            progress_trend=0.0,
            recovery_pattern=DEFAULT_RECOVERY,
            motivation_level=DEFAULT_MOTIVATION,
            confidence_score=confidence,
            data_points=count,
        )

    @staticmethod
    def _fitness_level(
        avg_completion: float, normalized_satisfaction: float, avg_difficulty: float
    ) -> float:
        """완료율 40% + 만족도 30% + 난이도 적합성 30%"""
        difficulty_fit = 1.0 - abs(avg_difficulty - 3.0) / 2.0
        score = avg_completion * 0.4 + normalized_satisfaction * 0.3 + difficulty_fit * 0.3
        return clamp(score, 0.0, 1.0)

    @staticmethod
    def _preferred_difficulty(records: List[FeedbackRecord]) -> float:
        """만족도 4 이상 세션의 평균 난이도"""
        liked = [
            r.clamped_difficulty
            for r in records
            if r.clamped_satisfaction is not None
            and r.clamped_satisfaction >= 4
            and r.clamped_difficulty is not None
        ]
        return clamp(mean_or(liked, DEFAULT_DIFFICULTY), 1.0, 5.0)

    @staticmethod
    def _progress_trend(records: List[FeedbackRecord]) -> float:
        """최근 3개 성공도 평균 - 가장 오래된 3개 성공도 평균"""
        scores = [r.success_score for r in records if r.success_score is not None]
        if len(scores) < TREND_SAMPLE_SIZE:
            return 0.0

        oldest = sum(scores[:TREND_SAMPLE_SIZE]) / TREND_SAMPLE_SIZE
        recent = sum(scores[-TREND_SAMPLE_SIZE:]) / TREND_SAMPLE_SIZE
        return clamp(recent - oldest, -1.0, 1.0)

    @staticmethod
    def _recovery_pattern(records: List[FeedbackRecord]) -> float:
        """운동 후 에너지와 근육통 기반 회복 능력"""
        energies = _values(records, "clamped_energy_after")
        soreness = _values(records, "clamped_muscle_soreness")

        score = DEFAULT_RECOVERY
        if energies:
            score += (sum(energies) / len(energies) - 3.0) * 0.5
        if soreness:
            score -= (sum(soreness) / len(soreness) - 3.0) * 0.3
        return clamp(score, 1.0, 5.0)

    @staticmethod
    def _motivation_level(
        records: List[FeedbackRecord], normalized_satisfaction: float
    ) -> float:
        """재선택 의향 40% + 만족도 40% + 참여 일관성 20% (주 2회 기준)"""
        repeats = [1.0 if r.would_repeat else 0.0 for r in records if r.would_repeat is not None]
        repeat_rate = mean_or(repeats, DEFAULT_REPEAT_RATE)
        participation_weeks = min(len(records) // 2, 4)
        consistency = participation_weeks / 4.0

        score = repeat_rate * 0.4 + normalized_satisfaction * 0.4 + consistency * 0.2
        return clamp(score, 0.0, 1.0)

    @staticmethod
    def _confidence(count: int, satisfactions: List[float]) -> float:
        """데이터 수 (최대 0.8) + 만족도 일관성"""
        point_score = min(count / 10.0, 0.8)
        std = _population_std(satisfactions)
        consistency = DEFAULT_CONSISTENCY if std is None else max(0.1, 1.0 - std / 2.0)
        return clamp(point_score + consistency, 0.0, 1.0)
