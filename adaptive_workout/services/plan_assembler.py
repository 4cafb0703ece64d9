"""운동 계획 구성 서비스

준비운동 + 메인운동 + 마무리운동을 묶고
예상 칼로리, 프로필 요약, 프로필 기반 팁을 만든다.
"""

import logging
from typing import Callable, Dict, List, Optional
from datetime import datetime

from langsmith import traceable

from shared.models import UserContext
from shared.utils import utcnow
from adaptive_workout.config import settings
from adaptive_workout.models import (
    AdaptationInfo,
    AdaptedExercise,
    ExerciseTemplate,
    FeedbackInsights,
    FitnessProfile,
    ProfileSummary,
    WorkoutPhase,
    WorkoutPlan,
    WorkoutRecommendation,
)
from adaptive_workout.services.catalog import ExerciseCatalog, get_catalog

logger = logging.getLogger(__name__)

STANDING_TIPS = [
    "🤖 모션 코치와 함께 운동하면 더 정확한 자세 피드백을 받을 수 있어요",
    "📊 운동 후 피드백을 남겨주시면 더 정확한 추천이 가능합니다",
]


def work_minutes(unit: str, sets: int, reps: int, seconds_per_rep: float) -> float:
    """휴식 제외 운동 시간 (분), 시간 기반 운동은 reps가 초 단위"""
    if unit == "seconds":
        return sets * reps / 60.0
    return sets * reps * seconds_per_rep / 60.0


def calories_per_minute(mets: float, body_weight_kg: float) -> float:
    return mets * body_weight_kg * 3.5 / 200.0


def profile_tips(profile: FitnessProfile) -> List[str]:
    """프로필 값만으로 결정되는 팁"""
    tips = []

    if profile.current_fitness_level < 0.4:
        tips.append("💪 천천히 시작하세요. 꾸준함이 가장 중요합니다")
        tips.append("⏰ 무리하지 말고 점진적으로 운동량을 늘려가세요")
    elif profile.current_fitness_level > 0.7:
        tips.append("🔥 높은 수준의 도전을 위해 운동 강도를 조절했습니다")
        tips.append("💫 복합 운동으로 더 큰 효과를 노려보세요")

    if profile.progress_trend < -0.1:
        tips.append("🎯 새로운 자극을 위해 운동을 변경했습니다")
        tips.append("💪 정체기 극복을 위한 강도 조절을 적용했습니다")
    elif profile.progress_trend > 0.2:
        tips.append("📈 훌륭한 발전을 보이고 있어요! 이 속도를 유지하세요")

    if profile.motivation_level < 0.5:
        tips.append("🌟 다양한 운동으로 재미를 더했습니다")
        tips.append("🎵 좋아하는 음악과 함께 운동해보세요")

    if profile.recovery_pattern < 2.5:
        tips.append("😴 충분한 휴식이 필요해 보입니다. 휴식 시간을 늘렸어요")
        tips.append("💧 운동 후 스트레칭과 수분 보충을 잊지 마세요")

    tips.extend(STANDING_TIPS)
    return tips


def confidence_level_label(confidence: float) -> str:
    if confidence >= 0.7:
        return "높음"
    elif confidence >= 0.4:
        return "보통"
    return "낮음"


class PlanAssembler:
    """추천 결과 구성

    사용 예시:
        assembler = PlanAssembler()
        recommendation = assembler.assemble(user, profile, "diet", adapted, 45)
    """

    def __init__(
        self,
        catalog: Optional[ExerciseCatalog] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.catalog = catalog or get_catalog()
        self.clock = clock

    def _with_estimates(self, exercise: AdaptedExercise, body_weight_kg: float) -> AdaptedExercise:
        minutes = work_minutes(exercise.unit, exercise.sets, exercise.reps, settings.seconds_per_rep)
        calories = calories_per_minute(exercise.intensity, body_weight_kg) * minutes
        return exercise.model_copy(
            update={
                "estimated_minutes": round(minutes, 2),
                "estimated_calories": round(calories, 1),
            }
        )

    @staticmethod
    def _fixed_exercise(template: ExerciseTemplate) -> AdaptedExercise:
        """준비/마무리 운동 (조정 없음)"""
        return AdaptedExercise(
            exercise_id=template.id,
            name=template.display_name,
            name_en=template.name_en,
            target=template.target,
            sets=template.sets,
            reps=template.reps,
            unit=template.unit,
            rest_seconds=template.rest_seconds,
            intensity=template.mets,
            motion_coaching=template.motion_coaching,
        )

    def build_plan(
        self,
        main_exercises: List[AdaptedExercise],
        target_duration_minutes: int,
        body_weight_kg: float,
    ) -> WorkoutPlan:
        """준비운동 + 메인운동 + 마무리운동"""
        warmup_cfg = self.catalog.phase("warmup")
        main_cfg = self.catalog.phase("main")
        cooldown_cfg = self.catalog.phase("cooldown")

        warmup = WorkoutPhase(
            phase="warmup",
            name=warmup_cfg.name,
            duration_minutes=warmup_cfg.duration_minutes or 0,
            exercises=[
                self._with_estimates(self._fixed_exercise(t), body_weight_kg)
                for t in self.catalog.warmup
            ],
        )
        main = WorkoutPhase(
            phase="main",
            name=main_cfg.name,
            duration_minutes=self.catalog.main_duration(target_duration_minutes),
            exercises=[self._with_estimates(ex, body_weight_kg) for ex in main_exercises],
        )
        cooldown = WorkoutPhase(
            phase="cooldown",
            name=cooldown_cfg.name,
            duration_minutes=cooldown_cfg.duration_minutes or 0,
            exercises=[
                self._with_estimates(self._fixed_exercise(t), body_weight_kg)
                for t in self.catalog.cooldown
            ],
        )

        phases = [warmup, main, cooldown]
        return WorkoutPlan(
            warmup=warmup,
            main=main,
            cooldown=cooldown,
            total_duration_minutes=sum(p.duration_minutes for p in phases),
            estimated_calories=int(round(sum(p.estimated_calories for p in phases))),
        )

    @staticmethod
    def profile_summary(user: UserContext, profile: FitnessProfile) -> ProfileSummary:
        return ProfileSummary(
            goal=profile.goal,
            experience=user.experience,
            fitness_level=profile.fitness_level_label,
            progress_trend=profile.progress_trend_label,
            motivation_level=profile.motivation_level_label,
            confidence=f"{round(profile.confidence_score * 100)}%",
            data_points=profile.data_points,
        )

    @staticmethod
    def adaptation_info(profile: FitnessProfile) -> AdaptationInfo:
        personalized = profile.is_personalized
        return AdaptationInfo(
            adaptation_factor=profile.adaptation_factor if personalized else 0.0,
            confidence_level=confidence_level_label(profile.confidence_score),
            recommendation_type="adaptive" if personalized else "template",
            recommendation_label="개인화 추천" if personalized else "일반 추천",
            learning_status="충분한 학습" if profile.confidence_score >= 0.7 else "학습 중",
        )

    @traceable(name="workout_plan_assembly")
    def assemble(
        self,
        user: UserContext,
        profile: FitnessProfile,
        goal: str,
        main_exercises: List[AdaptedExercise],
        target_duration_minutes: int,
        requested_duration_minutes: Optional[int] = None,
        feedback_insights: Optional[FeedbackInsights] = None,
        score_breakdown: Optional[Dict[str, Dict[str, float]]] = None,
    ) -> WorkoutRecommendation:
        """
        추천 결과 구성

        Args:
            user: 사용자 정보
            profile: 피트니스 프로필
            goal: 운동 목표
            main_exercises: 조정된 메인 운동
            target_duration_minutes: 피드백 반영 운동 시간 (분)
            requested_duration_minutes: 요청 운동 시간 (분)
            feedback_insights: 최근 피드백 인사이트
            score_breakdown: 운동별 점수 구성

        Returns:
            WorkoutRecommendation
        """
        body_weight = user.weight_kg or settings.default_body_weight_kg
        plan = self.build_plan(main_exercises, target_duration_minutes, body_weight)
        adaptation = self.adaptation_info(profile)

        recommendation = WorkoutRecommendation(
            user_id=user.user_id,
            goal=goal,
            recommendation_type=adaptation.recommendation_type,
            profile=self.profile_summary(user, profile),
            plan=plan,
            tips=profile_tips(profile),
            adaptation=adaptation,
            feedback_insights=feedback_insights or FeedbackInsights(),
            requested_duration_minutes=requested_duration_minutes or target_duration_minutes,
            adjusted_duration_minutes=target_duration_minutes,
            score_breakdown=score_breakdown or {},
            recommended_at=self.clock(),
        )

        logger.info(
            f"운동 계획 구성 완료: user={user.user_id}, 메인 {len(main_exercises)}개, "
            f"{plan.total_duration_minutes}분, {plan.estimated_calories}kcal"
        )
        return recommendation
