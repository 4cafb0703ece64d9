"""적응형 운동 추천 출력 모델"""

from typing import Dict, List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field

PhaseKey = Literal["warmup", "main", "cooldown"]


class AdaptedExercise(BaseModel):
    """사용자에게 맞게 조정된 운동"""

    exercise_id: str = Field(..., description="운동 ID")
    name: str = Field(..., description="운동명 (한글)")
    name_en: str = Field(default="", description="운동명 (영문)")
    target: str = Field(..., description="대상 근육군")

    sets: int = Field(..., ge=1, description="세트 수")
    reps: int = Field(..., ge=1, description="반복 수 또는 유지 시간(초)")
    unit: Literal["reps", "seconds"] = Field(default="reps", description="반복 단위")
    rest_seconds: int = Field(..., ge=0, description="휴식 시간 (초)")
    intensity: float = Field(..., gt=0, description="운동 강도 (METs)")

    motion_coaching: bool = Field(default=False, description="모션 코칭 지원 여부")
    score: Optional[float] = Field(default=None, ge=0, le=1, description="추천 점수")
    personalized_tip: Optional[str] = Field(default=None, description="개인화 팁")
    adjusted_by_progress: bool = Field(
        default=False, description="운동별 진행도로 조정됨"
    )
    backfilled: bool = Field(default=False, description="최소 개수 보장용 추가 운동")
    is_generic: bool = Field(default=False, description="기본 템플릿 사용 (카탈로그 미등록)")

    estimated_minutes: float = Field(default=0.0, ge=0, description="휴식 제외 운동 시간 (분)")
    estimated_calories: float = Field(default=0.0, ge=0, description="예상 소모 칼로리")


class WorkoutPhase(BaseModel):
    """운동 단계 (준비/메인/마무리)"""

    phase: PhaseKey = Field(..., description="단계 키")
    name: str = Field(..., description="단계명")
    duration_minutes: int = Field(..., ge=0, description="단계 소요 시간 (분)")
    exercises: List[AdaptedExercise] = Field(default_factory=list)

    @property
    def estimated_calories(self) -> float:
        return sum(ex.estimated_calories for ex in self.exercises)


class WorkoutPlan(BaseModel):
    """운동 계획 (준비운동 + 메인운동 + 마무리운동)"""

    warmup: WorkoutPhase
    main: WorkoutPhase
    cooldown: WorkoutPhase
    total_duration_minutes: int = Field(..., ge=0, description="총 운동 시간 (분)")
    estimated_calories: int = Field(..., ge=0, description="예상 소모 칼로리 (kcal)")

    @property
    def phases(self) -> List[WorkoutPhase]:
        return [self.warmup, self.main, self.cooldown]

    @property
    def main_exercise_ids(self) -> List[str]:
        return [ex.exercise_id for ex in self.main.exercises]


class ProfileSummary(BaseModel):
    """사용자 프로필 요약 (표시용)"""

    goal: str
    experience: str
    fitness_level: str = Field(..., description="피트니스 레벨 라벨")
    progress_trend: str = Field(..., description="진행 추세 라벨")
    motivation_level: str = Field(..., description="동기 수준 라벨")
    confidence: str = Field(..., description="신뢰도 (예: '40%')")
    data_points: int = Field(default=0, ge=0)


class AdaptationInfo(BaseModel):
    """적응 정보"""

    adaptation_factor: float = Field(..., ge=-0.3, le=0.3)
    confidence_level: str = Field(..., description="신뢰 수준 (높음/보통/낮음)")
    recommendation_type: Literal["adaptive", "template"] = Field(
        ..., description="adaptive: 개인화 추천, template: 일반 추천"
    )
    recommendation_label: str = Field(..., description="추천 유형 라벨")
    learning_status: str = Field(..., description="학습 상태 (충분한 학습/학습 중)")


class FeedbackInsights(BaseModel):
    """최근 피드백 인사이트"""

    sessions_analyzed: int = Field(default=0, ge=0)
    recent_satisfaction: Optional[str] = Field(default=None, description="예: '4.2/5.0'")
    difficulty_trend: Optional[str] = None
    completion_trend: Optional[str] = Field(default=None, description="예: '87.5%'")
    motivation_level: Optional[str] = None
    best_performing_exercise: Optional[str] = None
    recent_exercises: List[str] = Field(default_factory=list)
    tips: List[str] = Field(default_factory=list, description="피드백 기반 팁")
    message: Optional[str] = Field(default=None, description="데이터 부족 안내")


class WorkoutRecommendation(BaseModel):
    """운동 추천 결과

    API 응답: POST /api/v1/recommend-workout
    """

    user_id: str
    goal: str
    recommendation_type: Literal["adaptive", "template"]

    profile: ProfileSummary
    plan: WorkoutPlan
    tips: List[str] = Field(default_factory=list, description="프로필 기반 팁")
    adaptation: AdaptationInfo
    feedback_insights: FeedbackInsights

    requested_duration_minutes: int = Field(..., description="요청 운동 시간 (분)")
    adjusted_duration_minutes: int = Field(..., description="피드백 반영 운동 시간 (분)")
    score_breakdown: Dict[str, Dict[str, float]] = Field(
        default_factory=dict, description="운동별 점수 구성 (디버깅용)"
    )

    recommended_at: datetime = Field(..., description="추천 시각")


class PreferenceUpdate(BaseModel):
    """세션 학습 후 선호도 변화"""

    exercise_name: str
    preference_score: float
    effectiveness_score: float
    data_points: int
    confidence_score: float
    preference_label: str


class SessionFeedbackResult(BaseModel):
    """세션 피드백 처리 결과

    API 응답: POST /api/v1/session-feedback
    """

    session_id: str
    user_id: str
    recorded_at: datetime
    success_score: Optional[float] = Field(default=None, ge=0, le=1)
    preferences: List[PreferenceUpdate] = Field(default_factory=list)
    message: str = "운동 세션이 저장되었습니다. 수고하셨어요!"
