"""세션 피드백 / 운동 실행 기록 모델

저장된 이력은 범위 검증을 하지 않는다 (잘못된 값은 계산 시 clamp).
새로 제출되는 피드백의 검증은 models/input.py 참고.
"""

from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from shared.utils import clamp, optional_clamp


class ExerciseExecution(BaseModel):
    """개별 운동 실행 기록 (세션 내 운동 1개)"""

    model_config = ConfigDict(frozen=True)

    exercise_name: str = Field(..., description="운동 ID (카탈로그 키)")
    planned_sets: Optional[int] = Field(default=None, description="계획 세트 수")
    completed_sets: Optional[int] = Field(default=None, description="완료 세트 수")
    planned_reps: Optional[int] = Field(default=None, description="계획 반복 수")
    completed_reps: Optional[int] = Field(default=None, description="완료 반복 수")
    planned_duration_seconds: Optional[int] = Field(default=None, description="계획 시간 (초)")
    actual_duration_seconds: Optional[int] = Field(default=None, description="실제 시간 (초)")
    perceived_exertion: Optional[float] = Field(
        default=None, description="RPE (1: 매우 가벼움 ~ 10: 최대 강도)"
    )
    reported_completion_rate: Optional[float] = Field(
        default=None, description="외부에서 측정된 완료율 (모션 분석 등)"
    )
    form_accuracy: Optional[float] = Field(
        default=None, description="자세 정확도 (0-1, 모션 분석 제공 시)"
    )
    performed_at: Optional[datetime] = Field(default=None, description="수행 시각")

    @property
    def completion_rate(self) -> Optional[float]:
        """완수율 (0.0-1.0), 계산 불가 시 None"""
        if self.reported_completion_rate is not None:
            return clamp(float(self.reported_completion_rate), 0.0, 1.0)

        if (
            self.planned_sets is None
            or self.planned_reps is None
            or self.completed_sets is None
            or self.completed_reps is None
        ):
            return None
        planned_total = self.planned_sets * self.planned_reps
        if planned_total <= 0:
            return None
        completed_total = self.completed_sets * self.completed_reps
        return clamp(completed_total / planned_total, 0.0, 1.0)

    @property
    def rpe(self) -> Optional[float]:
        """RPE (1-10 범위로 제한)"""
        return optional_clamp(self.perceived_exertion, 1.0, 10.0)

    @property
    def difficulty(self) -> Optional[float]:
        """RPE를 1-5 난이도 척도로 환산 (RPE / 2)"""
        rpe = self.rpe
        if rpe is None:
            return None
        return clamp(rpe / 2.0, 1.0, 5.0)


class FeedbackRecord(BaseModel):
    """세션 전체 피드백 (세션 완료 후 1회, 이후 변경 없음)

    척도:
    - completion_rate: 0.0-1.0
    - overall_difficulty: 1 (너무 쉬움) ~ 5 (너무 어려움)
    - satisfaction: 1 (별로) ~ 5 (매우 만족)
    - energy_after: 1 (완전 지침) ~ 5 (에너지 충만)
    - muscle_soreness: 1 (전혀 없음) ~ 5 (심한 통증)
    """

    model_config = ConfigDict(frozen=True)

    session_id: str = Field(..., description="세션 ID")
    user_id: str = Field(..., description="사용자 ID")
    timestamp: datetime = Field(..., description="세션 완료 시각")

    completion_rate: Optional[float] = Field(default=None, description="완료율")
    overall_difficulty: Optional[float] = Field(default=None, description="전체 난이도")
    satisfaction: Optional[float] = Field(default=None, description="만족도")
    energy_after: Optional[float] = Field(default=None, description="운동 후 에너지")
    muscle_soreness: Optional[float] = Field(default=None, description="근육통")
    would_repeat: Optional[bool] = Field(default=None, description="재선택 의향")
    comments: Optional[str] = Field(default=None, description="자유 의견")

    executions: List[ExerciseExecution] = Field(
        default_factory=list, description="운동별 실행 기록"
    )

    # 범위 제한된 값 (계산용)
    @property
    def clamped_completion_rate(self) -> Optional[float]:
        return optional_clamp(self.completion_rate, 0.0, 1.0)

    @property
    def clamped_difficulty(self) -> Optional[float]:
        return optional_clamp(self.overall_difficulty, 1.0, 5.0)

    @property
    def clamped_satisfaction(self) -> Optional[float]:
        return optional_clamp(self.satisfaction, 1.0, 5.0)

    @property
    def clamped_energy_after(self) -> Optional[float]:
        return optional_clamp(self.energy_after, 1.0, 5.0)

    @property
    def clamped_muscle_soreness(self) -> Optional[float]:
        return optional_clamp(self.muscle_soreness, 1.0, 5.0)

    @property
    def exercise_names(self) -> List[str]:
        """세션에 포함된 운동 ID 목록 (중복 제거, 순서 유지)"""
        return list(dict.fromkeys(e.exercise_name for e in self.executions))

    def includes(self, exercise_name: str) -> bool:
        """해당 운동 포함 여부"""
        return any(e.exercise_name == exercise_name for e in self.executions)

    @property
    def success_score(self) -> Optional[float]:
        """세션 성공도 (0.0-1.0)

        완료율 40% + 난이도 적정성(3이 최적) 30% + 만족도 30%.
        세 값 중 하나라도 없으면 None.
        """
        completion = self.clamped_completion_rate
        difficulty = self.clamped_difficulty
        satisfaction = self.clamped_satisfaction
        if completion is None or difficulty is None or satisfaction is None:
            return None

        completion_score = completion * 0.4
        difficulty_score = max(0.0, 1.0 - abs(difficulty - 3.0) / 2.0) * 0.3
        satisfaction_score = (satisfaction - 1.0) / 4.0 * 0.3

        return min(completion_score + difficulty_score + satisfaction_score, 1.0)
