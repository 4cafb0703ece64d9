"""운동 카탈로그 모델 (시작 시 1회 로드, 불변)"""

from typing import Dict, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

MuscleGroup = Literal["upper", "lower", "core", "full_body"]

DEFAULT_DIFFICULTY_RATING = 0.5


class ExerciseTemplate(BaseModel):
    """운동 기본 템플릿

    unit이 "seconds"이면 reps는 유지 시간(초)이다 (플랭크 등).
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="운동 ID")
    name_kr: str = Field(default="", description="운동명 (한글)")
    name_en: str = Field(default="", description="운동명 (영문)")
    target: MuscleGroup = Field(default="full_body", description="대상 근육군")
    sets: int = Field(default=3, ge=1, description="기본 세트 수")
    reps: int = Field(default=15, ge=1, description="기본 반복 수 또는 유지 시간(초)")
    unit: Literal["reps", "seconds"] = Field(default="reps", description="반복 단위")
    rest_seconds: int = Field(default=60, ge=0, description="기본 휴식 시간 (초)")
    mets: float = Field(default=6.0, gt=0, description="운동 강도 (METs)")
    difficulty_rating: Optional[float] = Field(
        default=None, ge=0, le=1, description="권장 피트니스 레벨 (0-1)"
    )
    motion_coaching: bool = Field(default=False, description="모션 코칭 지원 여부")
    is_generic: bool = Field(default=False, description="카탈로그에 없어 기본 템플릿으로 대체됨")

    @property
    def display_name(self) -> str:
        return self.name_kr or self.name_en or self.id

    @property
    def rating(self) -> float:
        """난이도 평점 (없으면 0.5)"""
        if self.difficulty_rating is None:
            return DEFAULT_DIFFICULTY_RATING
        return self.difficulty_rating


class ExperienceTier(BaseModel):
    """경험 수준별 구성 규칙"""

    model_config = ConfigDict(frozen=True)

    name: str
    min_exercises: int = Field(..., ge=1)
    max_exercises: int = Field(..., ge=1)
    base_fitness_level: float = Field(..., ge=0, le=1)
    muscle_targets: Dict[str, int] = Field(default_factory=dict)

    def target_for(self, group: str) -> int:
        """근육군 목표 개수 (정의되지 않은 근육군은 1)"""
        return self.muscle_targets.get(group, 1)


class PhaseConfig(BaseModel):
    """운동 단계 설정 (준비/메인/마무리)"""

    model_config = ConfigDict(frozen=True)

    name: str
    duration_minutes: Optional[int] = Field(default=None, ge=0)
