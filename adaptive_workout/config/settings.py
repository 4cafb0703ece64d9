"""Adaptive Workout 설정

환경 변수:
- DATABASE_URL: 선호도/피드백 저장소 DB (비어 있으면 인메모리 저장소)
- LOG_LEVEL: 로그 레벨 (기본값: INFO)
- LANGSMITH_TRACING / LANGSMITH_API_KEY: 트레이싱 (선택)
"""

from pathlib import Path

from pydantic_settings import BaseSettings
from pydantic import Field


class AdaptiveWorkoutSettings(BaseSettings):
    """적응형 운동 추천 설정"""

    # 피트니스 프로필
    profile_window_days: int = Field(default=28, description="프로필 분석 기간 (일)")
    min_data_points: int = Field(default=3, description="개인화 최소 피드백 수")

    # 선호도 학습
    reliable_data_points: int = Field(
        default=3, description="신뢰할 수 있는 선호도 최소 데이터 수"
    )
    dislike_threshold: float = Field(
        default=-0.3, description="비선호 운동 제외 기준 점수"
    )
    ledger_max_retries: int = Field(
        default=3, description="선호도 동시 수정 충돌 시 재시도 횟수"
    )

    # 운동 선택/점수
    recent_exclusion_days: int = Field(default=7, description="최근 수행 운동 제외 기간 (일)")
    novelty_window_days: int = Field(default=14, description="다양성 보너스 판단 기간 (일)")
    feedback_window_days: int = Field(
        default=21, description="운동별 피드백/진행도 분석 기간 (일)"
    )
    analysis_window_days: int = Field(default=14, description="피드백 인사이트 분석 기간 (일)")
    starvation_guard: int = Field(
        default=4, description="이 수만큼 선택되기 전에는 최근 운동도 허용"
    )
    minutes_per_exercise: int = Field(
        default=5, description="메인 운동 1개당 최소 소요 시간 (분)"
    )

    # 운동 계획
    default_duration_minutes: int = Field(default=45, description="기본 운동 시간 (분)")
    min_duration_minutes: int = Field(default=15, description="최소 운동 시간 (분)")
    max_duration_minutes: int = Field(default=90, description="최대 운동 시간 (분)")
    seconds_per_rep: float = Field(default=2.0, description="1회 반복 소요 시간 (초)")
    default_body_weight_kg: float = Field(default=70.0, description="기본 체중 (kg)")
    default_goal: str = Field(default="diet", description="목표 미지정 시 기본 목표")

    # 데이터 경로
    data_dir: Path = Field(
        default=Path(__file__).parent.parent / "data",
        description="카탈로그 데이터 디렉토리"
    )

    # 저장소
    database_url: str = Field(
        default="", description="SQLAlchemy DB URL (비어 있으면 인메모리)"
    )

    # 서버 설정
    log_level: str = Field(default="INFO", description="로그 레벨")
    host: str = Field(default="0.0.0.0", description="호스트")
    port: int = Field(default=8000, description="포트")

    class Config:
        env_prefix = ""
        env_file = ".env"
        extra = "ignore"


settings = AdaptiveWorkoutSettings()
