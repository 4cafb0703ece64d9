"""적응형 운동 추천 입력 모델

추천 요청과 세션 피드백 제출 - 호출하는 쪽(앱/API)에서 전달받음
"""

import re
from typing import Dict, List, Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator, model_validator

from shared.models import UserContext
from shared.utils import clamp
from adaptive_workout.config import settings
from adaptive_workout.exceptions import InvalidInputError

GOAL_PATTERN = re.compile(r"^[a-z][a-z_]{0,31}$")


def normalize_goal(goal: Optional[str]) -> Optional[str]:
    """목표 문자열 정규화/검증

    - None / 빈 문자열 → None (사용자 기본 목표 사용)
    - 소문자 식별자만 허용 ("diet", "strength" ...)
    - 형식이 잘못되면 InvalidInputError
    """
    if goal is None:
        return None
    if not isinstance(goal, str):
        raise InvalidInputError(f"goal은 문자열이어야 합니다: {goal!r}")
    normalized = goal.strip().lower()
    if not normalized:
        return None
    if not GOAL_PATTERN.match(normalized):
        raise InvalidInputError(f"잘못된 goal 형식: {goal!r}")
    return normalized


class MotionQuality(BaseModel):
    """모션/자세 분석 협력자가 제공하는 운동별 품질 신호 (선택)"""

    completion_rate: float = Field(default=0.8, ge=0, le=1, description="평균 완료율")
    form_accuracy: float = Field(default=0.8, ge=0, le=1, description="평균 자세 정확도")
    improvement_trend: float = Field(
        default=0.0, ge=-1, le=1, description="개선 추세 (최근 절반 - 이전 절반)"
    )
    sessions: int = Field(default=1, ge=0, description="측정된 세션 수")

    @property
    def normalized_score(self) -> float:
        """품질 점수 (0-1), 측정 세션이 없으면 중립 0.5

        완료율 40% + 자세 정확도 40% + 개선 추세 20%
        """
        if self.sessions == 0:
            return 0.5
        trend_score = clamp(0.5 + self.improvement_trend * 0.5, 0.0, 1.0)
        score = (
            self.completion_rate * 0.4
            + self.form_accuracy * 0.4
            + trend_score * 0.2
        )
        return clamp(score, 0.0, 1.0)


class WorkoutRecommendationInput(BaseModel):
    """운동 추천 입력

    API 엔드포인트: POST /api/v1/recommend-workout

    예시:
    {
        "user": {"user_id": "user_123", "experience": "beginner", "weight_kg": 68},
        "goal": "diet",
        "target_duration_minutes": 45,
        "motion_quality": {"squat": {"completion_rate": 0.9, "form_accuracy": 0.85}}
    }
    """

    user: UserContext = Field(..., description="사용자 정보")
    goal: Optional[str] = Field(
        default=None, description="운동 목표 (없으면 사용자 기본 목표)"
    )
    target_duration_minutes: int = Field(
        default_factory=lambda: settings.default_duration_minutes,
        ge=settings.min_duration_minutes,
        le=settings.max_duration_minutes,
        description="목표 운동 시간 (분)",
    )
    motion_quality: Optional[Dict[str, MotionQuality]] = Field(
        default=None, description="운동별 모션 품질 신호 (선택)"
    )

    @field_validator("goal", mode="before")
    @classmethod
    def validate_goal(cls, v):
        return normalize_goal(v)

    @property
    def resolved_goal(self) -> Optional[str]:
        """요청 목표 → 사용자 기본 목표 순서로 결정"""
        return self.goal or normalize_goal(self.user.goal)


class ExerciseFeedbackInput(BaseModel):
    """개별 운동 피드백 (세션 피드백 제출 시)"""

    exercise_name: str = Field(..., min_length=1, max_length=100, description="운동 ID")
    planned_sets: Optional[int] = Field(default=None, ge=0, le=20)
    completed_sets: Optional[int] = Field(default=None, ge=0, le=20)
    planned_reps: Optional[int] = Field(default=None, ge=0, le=1000)
    completed_reps: Optional[int] = Field(default=None, ge=0, le=1000)
    planned_duration_seconds: Optional[int] = Field(default=None, ge=0)
    actual_duration_seconds: Optional[int] = Field(default=None, ge=0)
    perceived_exertion: Optional[int] = Field(
        default=None, ge=1, le=10, description="RPE (1-10)"
    )
    reported_completion_rate: Optional[float] = Field(default=None, ge=0, le=1)
    form_accuracy: Optional[float] = Field(default=None, ge=0, le=1)

    @field_validator("exercise_name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("exercise_name이 비어 있습니다")
        return v


class SessionFeedbackInput(BaseModel):
    """세션 피드백 제출

    API 엔드포인트: POST /api/v1/session-feedback
    """

    session_id: str = Field(..., min_length=1, max_length=64, description="세션 ID")
    completed_at: Optional[datetime] = Field(
        default=None, description="세션 완료 시각 (없으면 현재 시각)"
    )
    completion_rate: Optional[float] = Field(default=None, ge=0, le=1)
    overall_difficulty: Optional[int] = Field(
        default=None, ge=1, le=5, description="1: 너무 쉬움 ~ 5: 너무 어려움"
    )
    satisfaction: Optional[int] = Field(
        default=None, ge=1, le=5, description="1: 별로 ~ 5: 매우 만족"
    )
    energy_after: Optional[int] = Field(
        default=None, ge=1, le=5, description="1: 완전 지침 ~ 5: 에너지 충만"
    )
    muscle_soreness: Optional[int] = Field(
        default=None, ge=1, le=5, description="1: 전혀 없음 ~ 5: 심한 통증"
    )
    would_repeat: Optional[bool] = Field(default=None, description="재선택 의향")
    comments: Optional[str] = Field(default=None, max_length=2000)
    exercises: List[ExerciseFeedbackInput] = Field(
        default_factory=list, description="운동별 피드백"
    )

    @model_validator(mode="after")
    def check_sets(self):
        for ex in self.exercises:
            if (
                ex.planned_sets is not None
                and ex.completed_sets is not None
                and ex.completed_sets > ex.planned_sets * 2
            ):
                raise InvalidInputError(
                    f"{ex.exercise_name}: 완료 세트({ex.completed_sets})가 계획 대비 비정상적으로 큽니다"
                )
        return self


class SessionFeedbackRequest(BaseModel):
    """세션 피드백 제출 요청 (사용자 + 피드백)"""

    user: UserContext = Field(..., description="사용자 정보")
    feedback: SessionFeedbackInput = Field(..., description="세션 피드백")
