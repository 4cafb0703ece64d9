"""피트니스 프로필 모델

요청마다 피드백 이력에서 다시 계산되며 저장하지 않는다.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from shared.models import ExperienceLevel
from shared.utils import clamp

# 이 신뢰도 미만이면 소비자는 비개인화 기본값을 사용해야 한다
PERSONALIZATION_THRESHOLD = 0.3


class FitnessProfile(BaseModel):
    """사용자 피트니스 프로필 - 적응형 추천을 위한 현재 상태"""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., description="사용자 ID")
    goal: str = Field(..., description="운동 목표")
    experience_level: ExperienceLevel = Field(default="beginner", description="경험 수준")

    current_fitness_level: float = Field(
        default=0.5, ge=0, le=1, description="현재 피트니스 레벨 (0: 매우 낮음 ~ 1: 매우 높음)"
    )
    average_completion_rate: float = Field(
        default=0.8, ge=0, le=1, description="최근 세션 평균 완료율"
    )
    preferred_difficulty: float = Field(
        default=3.0, ge=1, le=5, description="만족도가 높았던 세션의 평균 난이도"
    )
    progress_trend: float = Field(
        default=0.0, ge=-1, le=1, description="진행 추세 (-1: 급격한 하락 ~ 1: 급격한 상승)"
    )
    recovery_pattern: float = Field(
        default=3.0, ge=1, le=5, description="회복 패턴 (높을수록 빠른 회복)"
    )
    motivation_level: float = Field(
        default=0.5, ge=0, le=1, description="동기 수준"
    )
    confidence_score: float = Field(
        default=0.0, ge=0, le=1, description="프로필 계산 데이터의 신뢰도"
    )
    data_points: int = Field(default=0, ge=0, description="분석된 피드백 수")

    @property
    def is_personalized(self) -> bool:
        """개인화 값을 신뢰할 수 있는지 여부"""
        return self.confidence_score >= PERSONALIZATION_THRESHOLD

    @property
    def adaptation_factor(self) -> float:
        """적응 팩터 (-0.3 ~ 0.3)

        음수: 강도 감소, 양수: 강도 증가
        """
        factor = 0.0

        # 완료율이 높으면 강도 증가
        if self.average_completion_rate > 0.9:
            factor += 0.15
        elif self.average_completion_rate < 0.7:
            factor -= 0.15

        # 선호 난이도가 낮으면 (쉽다고 느끼면) 강도 증가
        if self.preferred_difficulty < 2.5:
            factor += 0.1
        elif self.preferred_difficulty > 4.0:
            factor -= 0.1

        # 정체/하락 추세면 새로운 자극
        if self.progress_trend < -0.1:
            factor += 0.05

        return clamp(factor, -0.3, 0.3)

    @property
    def fitness_level_label(self) -> str:
        """피트니스 레벨 라벨"""
        level = self.current_fitness_level
        if level >= 0.8:
            return "매우 높음"
        elif level >= 0.6:
            return "높음"
        elif level >= 0.4:
            return "보통"
        elif level >= 0.2:
            return "낮음"
        return "매우 낮음"

    @property
    def progress_trend_label(self) -> str:
        """진행 추세 라벨"""
        trend = self.progress_trend
        if trend >= 0.3:
            return "빠른 향상"
        elif trend >= 0.1:
            return "점진적 향상"
        elif trend >= -0.1:
            return "유지"
        elif trend >= -0.3:
            return "약간 하락"
        return "개선 필요"

    @property
    def motivation_level_label(self) -> str:
        """동기 수준 라벨"""
        level = self.motivation_level
        if level >= 0.8:
            return "매우 높음"
        elif level >= 0.6:
            return "높음"
        elif level >= 0.4:
            return "보통"
        elif level >= 0.2:
            return "낮음"
        return "매우 낮음"


class ExerciseProgress(BaseModel):
    """운동별 진행도 (최근 3주, 최신 기록 가중)"""

    model_config = ConfigDict(frozen=True)

    exercise_name: str
    average_completion_rate: float = Field(default=0.8, ge=0, le=1)
    average_difficulty: float = Field(default=3.0, ge=1, le=5)
    data_points: int = Field(default=0, ge=0)

    @property
    def has_history(self) -> bool:
        return self.data_points > 0


class ScoreBreakdown(BaseModel):
    """운동 점수 구성 요소 (가중 전, clamp 후)"""

    goal_fit: float = 0.0
    quality: float = 0.5
    preference: float = 0.0
    fitness_fit: float = 0.0
    recent_feedback: float = 0.5
    novelty: float = 1.0

    def as_dict(self) -> dict:
        return self.model_dump()


class ScoredExercise(BaseModel):
    """점수가 매겨진 후보 운동"""

    exercise_id: str
    score: float = Field(..., ge=0, le=1)
    breakdown: ScoreBreakdown = Field(default_factory=ScoreBreakdown)
    target: Optional[str] = None
    backfilled: bool = Field(default=False, description="최소 개수 보장을 위해 채워진 운동")
