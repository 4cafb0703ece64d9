"""운동 선호도 모델 (사용자+운동 단위로 저장)"""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

# 선호도/효과도를 신뢰하기 위한 최소 신뢰도 (= 데이터 3개)
RELIABLE_CONFIDENCE = 0.3


class ExercisePreference(BaseModel):
    """사용자 운동 선호도 - 피드백 학습으로 축적

    - preference_score: -1.0 (매우 싫어함) ~ 0.0 (중립) ~ 1.0 (매우 좋아함)
    - effectiveness_score: 0.0 ~ 1.0 (이 운동이 사용자에게 얼마나 효과적인지)
    - version: 낙관적 동시성 제어용 토큰 (저장 시마다 +1)
    """

    user_id: str = Field(..., description="사용자 ID")
    exercise_name: str = Field(..., description="운동 ID")
    preference_score: float = Field(default=0.0, ge=-1, le=1, description="선호도 점수")
    effectiveness_score: float = Field(default=0.5, ge=0, le=1, description="효과도 점수")
    data_points: int = Field(default=0, ge=0, description="학습 데이터 수")
    last_performed: Optional[datetime] = Field(default=None, description="마지막 수행 시각")
    version: int = Field(default=0, ge=0, description="저장 버전 (0: 미저장)")

    @classmethod
    def neutral(cls, user_id: str, exercise_name: str) -> "ExercisePreference":
        """저장된 행이 없을 때의 기본 선호도"""
        return cls(user_id=user_id, exercise_name=exercise_name)

    @property
    def is_persisted(self) -> bool:
        return self.version > 0

    @property
    def confidence_score(self) -> float:
        """신뢰도 (데이터 1개당 0.1, 최대 1.0)"""
        return min(1.0, self.data_points * 0.1)

    @property
    def is_reliable(self) -> bool:
        """신뢰할 수 있는 선호도인지 (데이터 3개 이상)"""
        return self.confidence_score >= RELIABLE_CONFIDENCE - 1e-9

    @property
    def preference_label(self) -> str:
        """선호도 라벨"""
        score = self.preference_score
        if score >= 0.6:
            return "매우 선호"
        elif score >= 0.2:
            return "선호"
        elif score >= -0.2:
            return "보통"
        elif score >= -0.6:
            return "비선호"
        return "매우 비선호"


class PreferenceStats(BaseModel):
    """사용자 선호도 통계"""

    total_exercises: int = 0
    preferred_count: int = 0
    disliked_count: int = 0
    reliable_count: int = 0
