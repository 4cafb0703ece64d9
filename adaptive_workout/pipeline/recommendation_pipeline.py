"""적응형 운동 추천 파이프라인

전체 흐름:
1. 피트니스 프로필 계산
2. 최근 피드백 분석 + 운동 시간 조정
3. 운동 점수 계산 / 선택
4. 운동별 조정
5. 운동 계획 구성
"""

import logging
from typing import Callable, Optional
from datetime import datetime

from langsmith import traceable

from shared.utils import utcnow
from adaptive_workout.config import settings
from adaptive_workout.models import (
    SessionFeedbackInput,
    SessionFeedbackResult,
    WorkoutRecommendation,
    WorkoutRecommendationInput,
)
from adaptive_workout.services import (
    ExerciseAdapter,
    ExerciseCatalog,
    ExerciseScorer,
    ExerciseSelector,
    FeedbackAnalyzer,
    FitnessProfileCalculator,
    PlanAssembler,
    PreferenceLedger,
    SessionFeedbackService,
    get_catalog,
)
from adaptive_workout.stores import FeedbackStore, PreferenceStore, create_stores
from shared.models import UserContext

logger = logging.getLogger(__name__)


class WorkoutRecommendationPipeline:
    """적응형 운동 추천 파이프라인

    사용 예시:
        pipeline = WorkoutRecommendationPipeline()
        recommendation = pipeline.run(input_data)
    """

    def __init__(
        self,
        feedback_store: Optional[FeedbackStore] = None,
        preference_store: Optional[PreferenceStore] = None,
        catalog: Optional[ExerciseCatalog] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        if feedback_store is None or preference_store is None:
            default_feedback, default_preference = create_stores()
            feedback_store = feedback_store or default_feedback
            preference_store = preference_store or default_preference

        self.feedback_store = feedback_store
        self.preference_store = preference_store
        self.catalog = catalog or get_catalog()
        self.clock = clock

        self.ledger = PreferenceLedger(preference_store, clock=clock)
        self.profile_calculator = FitnessProfileCalculator(feedback_store, self.catalog, clock)
        self.feedback_analyzer = FeedbackAnalyzer(feedback_store, clock)
        self.scorer = ExerciseScorer(self.ledger, feedback_store, self.catalog, clock)
        self.selector = ExerciseSelector(self.scorer, self.ledger, self.catalog)
        self.adapter = ExerciseAdapter(feedback_store, self.catalog, clock)
        self.assembler = PlanAssembler(self.catalog, clock)
        self.feedback_service = SessionFeedbackService(feedback_store, self.ledger, clock)

    @traceable(name="workout_recommendation_pipeline")
    def run(self, input_data: WorkoutRecommendationInput) -> WorkoutRecommendation:
        """
        운동 추천 실행

        Args:
            input_data: 운동 추천 입력

        Returns:
            WorkoutRecommendation
        """
        user = input_data.user
        goal = input_data.resolved_goal or settings.default_goal
        logger.info(f"적응형 운동 추천 시작: user={user.user_id}, goal={goal}")

        # Step 1: 피트니스 프로필
        profile = self.profile_calculator.calculate(user, goal=goal)

        # Step 2: 최근 피드백 분석 + 운동 시간 조정
        analysis = self.feedback_analyzer.analyze(user)
        duration = self.feedback_analyzer.adjust_duration(
            input_data.target_duration_minutes, analysis
        )

        # Step 3: 운동 선택
        history = self.scorer.load_history(user)
        selected = self.selector.select(
            user,
            profile,
            goal,
            duration,
            qualities=input_data.motion_quality,
            history=history,
        )

        # Step 4: 운동별 조정
        adapted = [
            self.adapter.adapt(user, profile, scored.exercise_id, score=scored)
            for scored in selected
        ]

        # Step 5: 운동 계획 구성
        recommendation = self.assembler.assemble(
            user,
            profile,
            goal,
            adapted,
            duration,
            requested_duration_minutes=input_data.target_duration_minutes,
            feedback_insights=self.feedback_analyzer.insights(analysis),
            score_breakdown={s.exercise_id: s.breakdown.as_dict() for s in selected},
        )

        logger.info(
            f"적응형 운동 추천 완료: user={user.user_id}, 신뢰도={profile.confidence_score:.2f}, "
            f"유형={recommendation.recommendation_type}, 추천운동수={len(adapted)}"
        )
        return recommendation

    def record_feedback(
        self, user: UserContext, feedback: SessionFeedbackInput
    ) -> SessionFeedbackResult:
        """세션 피드백 저장 및 선호도 학습"""
        return self.feedback_service.record(user, feedback)
