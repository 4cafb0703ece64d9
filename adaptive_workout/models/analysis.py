"""최근 피드백 분석 결과 모델"""

from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class FeedbackAnalysis(BaseModel):
    """최근 N일 피드백 집계

    세션이 없거나 값이 빠지면 기본값 (만족도/난이도 3.0, 완료율 0.8, 재선택 0.8)
    """

    model_config = ConfigDict(frozen=True)

    total_sessions: int = Field(default=0, ge=0, description="분석된 세션 수")
    avg_satisfaction: float = Field(default=3.0, ge=1, le=5)
    avg_difficulty: float = Field(default=3.0, ge=1, le=5)
    avg_completion_rate: float = Field(default=0.8, ge=0, le=1)
    would_repeat_ratio: float = Field(default=0.8, ge=0, le=1)

    exercise_performance: Dict[str, float] = Field(
        default_factory=dict, description="운동별 평균 완료율"
    )
    exercise_counts: Dict[str, int] = Field(
        default_factory=dict, description="운동별 수행 횟수"
    )
    recent_exercises: List[str] = Field(
        default_factory=list, description="최근 수행 운동 (최신순)"
    )

    @property
    def has_enough_data(self) -> bool:
        """시간 조정/인사이트에 필요한 최소 세션(2회) 충족 여부"""
        return self.total_sessions >= 2

    @property
    def best_performing_exercise(self) -> Optional[str]:
        """평균 완료율이 가장 높은 운동 (동점이면 먼저 수행된 운동)"""
        if not self.exercise_performance:
            return None
        return max(self.exercise_performance, key=lambda name: self.exercise_performance[name])
