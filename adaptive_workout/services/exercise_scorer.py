"""운동 점수 계산 서비스

목표 적합도 25% + 모션 품질 20% + 학습된 선호도 20%
+ 피트니스 레벨 적합도 15% + 최근 세션 피드백 10% + 다양성 보너스 10%

각 항목을 범위 제한 → 가중 → 합산 → 최종 점수 범위 제한 순서로 계산한다.
"""

import logging
from typing import Callable, Dict, List, Optional
from datetime import datetime

from langsmith import traceable

from shared.models import UserContext
from shared.utils import clamp, recency_weight, utcnow, weighted_mean_or
from adaptive_workout.config import settings
from adaptive_workout.models import (
    FitnessProfile,
    MotionQuality,
    ScoreBreakdown,
    ScoredExercise,
)
from adaptive_workout.services.catalog import ExerciseCatalog, get_catalog
from adaptive_workout.services.history import RecentHistory
from adaptive_workout.services.preference_ledger import PreferenceLedger
from adaptive_workout.stores import FeedbackStore

logger = logging.getLogger(__name__)

# 가중치 (%, 합계 100)
SCORE_WEIGHTS: Dict[str, int] = {
    "goal_fit": 25,
    "quality": 20,
    "preference": 20,
    "fitness_fit": 15,
    "recent_feedback": 10,
    "novelty": 10,
}
WEIGHT_TOTAL = 100

# 항목별 범위
COMPONENT_BOUNDS = {
    "goal_fit": (0.0, 1.0),
    "quality": (0.0, 1.0),
    "preference": (-1.0, 1.0),
    "fitness_fit": (0.0, 1.0),
    "recent_feedback": (0.0, 1.0),
    "novelty": (0.0, 1.0),
}

NEUTRAL_QUALITY = 0.5
NEUTRAL_FEEDBACK = 0.5
FEEDBACK_RECENCY_DECAY = 0.1

# (최근 수행 횟수 상한, 보너스)
NOVELTY_STEPS = ((0, 1.0), (2, 0.7), (4, 0.3))


def novelty_bonus(performance_count: int) -> float:
    """최근 2주 수행 횟수 기반 다양성 보너스"""
    for upper, bonus in NOVELTY_STEPS:
        if performance_count <= upper:
            return bonus
    return 0.0


def combine(breakdown: ScoreBreakdown) -> float:
    """항목 점수 → 최종 점수 (0-1)"""
    components = breakdown.as_dict()
    total = 0.0
    for name, weight in SCORE_WEIGHTS.items():
        lower, upper = COMPONENT_BOUNDS[name]
        total += clamp(components[name], lower, upper) * weight
    return clamp(total / WEIGHT_TOTAL, 0.0, 1.0)


class ExerciseScorer:
    """후보 운동 점수 계산

    사용 예시:
        scorer = ExerciseScorer(ledger, feedback_store)
        scored = scorer.score_candidates(user, profile, "diet", pool)
    """

    def __init__(
        self,
        ledger: PreferenceLedger,
        feedback_store: FeedbackStore,
        catalog: Optional[ExerciseCatalog] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.ledger = ledger
        self.feedback_store = feedback_store
        self.catalog = catalog or get_catalog()
        self.clock = clock

    def load_history(self, user: UserContext) -> RecentHistory:
        """점수 계산에 필요한 최근 이력 (최근 피드백 기간 기준 1회 조회)"""
        days = max(settings.feedback_window_days, settings.novelty_window_days)
        return RecentHistory.load(self.feedback_store, user.user_id, self.clock(), days)

    def breakdown(
        self,
        user: UserContext,
        profile: FitnessProfile,
        exercise_id: str,
        goal: str,
        history: RecentHistory,
        quality: Optional[MotionQuality] = None,
    ) -> ScoreBreakdown:
        """항목별 점수 (가중 전)"""
        personalized = profile.is_personalized

        if personalized:
            preference = self.ledger.reliable_preference(user.user_id, exercise_id)
            fitness_level = profile.current_fitness_level
            recent_feedback = self._recent_feedback_quality(exercise_id, history)
        else:
            preference = 0.0
            fitness_level = self.catalog.experience_tier(profile.experience_level).base_fitness_level
            recent_feedback = NEUTRAL_FEEDBACK

        rating = self.catalog.difficulty_rating(exercise_id)

        return ScoreBreakdown(
            goal_fit=self.catalog.goal_fit(goal, exercise_id),
            quality=quality.normalized_score if quality is not None else NEUTRAL_QUALITY,
            preference=preference,
            fitness_fit=1.0 - abs(fitness_level - rating),
            recent_feedback=recent_feedback,
            novelty=novelty_bonus(
                history.performance_count(exercise_id, settings.novelty_window_days)
            ),
        )

    @traceable(name="exercise_scoring")
    def score(
        self,
        user: UserContext,
        profile: FitnessProfile,
        exercise_id: str,
        goal: str,
        history: Optional[RecentHistory] = None,
        quality: Optional[MotionQuality] = None,
    ) -> float:
        """
        운동 점수 계산

        Args:
            user: 사용자 정보
            profile: 피트니스 프로필
            exercise_id: 운동 ID
            goal: 운동 목표
            history: 최근 이력 스냅샷 (없으면 조회)
            quality: 모션 품질 신호 (없으면 중립 0.5)

        Returns:
            0-1 점수
        """
        history = history or self.load_history(user)
        return combine(self.breakdown(user, profile, exercise_id, goal, history, quality))

    @traceable(name="exercise_candidate_scoring")
    def score_candidates(
        self,
        user: UserContext,
        profile: FitnessProfile,
        goal: str,
        candidates: List[str],
        history: Optional[RecentHistory] = None,
        qualities: Optional[Dict[str, MotionQuality]] = None,
    ) -> List[ScoredExercise]:
        """후보 전체 점수 (후보 순서 유지, 정렬하지 않음)"""
        history = history or self.load_history(user)
        qualities = qualities or {}

        scored = []
        for exercise_id in candidates:
            breakdown = self.breakdown(
                user, profile, exercise_id, goal, history, qualities.get(exercise_id)
            )
            score = combine(breakdown)
            scored.append(
                ScoredExercise(
                    exercise_id=exercise_id,
                    score=score,
                    breakdown=breakdown,
                    target=self.catalog.get_template(exercise_id).target,
                )
            )
            logger.debug(f"점수: {exercise_id}={score:.3f} {breakdown.as_dict()}")
        return scored

    @staticmethod
    def _recent_feedback_quality(exercise_id: str, history: RecentHistory) -> float:
        """해당 운동이 포함된 최근 3주 세션 피드백 (최신 세션 가중)

        만족도 40% + 난이도 적정성 30% + 재선택 의향 30%
        """
        sessions = history.sessions_including(exercise_id, settings.feedback_window_days)
        if not sessions:
            return NEUTRAL_FEEDBACK

        satisfaction_pairs = []
        difficulty_pairs = []
        repeat_pairs = []
        for i, record in enumerate(sessions):
            weight = recency_weight(i, FEEDBACK_RECENCY_DECAY)
            if record.clamped_satisfaction is not None:
                satisfaction_pairs.append((record.clamped_satisfaction, weight))
            if record.clamped_difficulty is not None:
                difficulty_pairs.append((record.clamped_difficulty, weight))
            if record.would_repeat is not None:
                repeat_pairs.append((1.0 if record.would_repeat else 0.0, weight))

        satisfaction = weighted_mean_or(satisfaction_pairs, 3.0)
        difficulty = weighted_mean_or(difficulty_pairs, 3.0)
        repeat = weighted_mean_or(repeat_pairs, 0.5)

        score = (
            (satisfaction - 1.0) / 4.0 * 0.4
            + max(0.0, 1.0 - abs(difficulty - 3.0) / 2.0) * 0.3
            + repeat * 0.3
        )
        return clamp(score, 0.0, 1.0)
