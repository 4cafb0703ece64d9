"""사용자 컨텍스트 모델 (공유)"""

from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator


ExperienceLevel = Literal["beginner", "intermediate", "advanced"]


class UserContext(BaseModel):
    """추천/학습 요청 시 전달되는 사용자 정보

    인증/세션은 호출하는 쪽 책임이며, 엔진은 식별자와
    프로필 시드 정보만 받는다.
    """

    user_id: str = Field(..., min_length=1, max_length=64, description="사용자 ID")
    goal: Optional[str] = Field(
        default=None, description="기본 운동 목표 (diet, strength, body, fitness, stamina)"
    )
    experience: ExperienceLevel = Field(
        default="beginner", description="운동 경험 수준"
    )
    weight_kg: Optional[float] = Field(
        default=None, ge=20, le=300, description="몸무게 (kg), 칼로리 추정용"
    )

    @field_validator("user_id")
    @classmethod
    def validate_user_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("user_id가 비어 있습니다")
        return v

    @field_validator("experience", mode="before")
    @classmethod
    def normalize_experience(cls, v):
        if v is None:
            return "beginner"
        if isinstance(v, str):
            return v.strip().lower()
        return v
