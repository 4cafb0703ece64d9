"""Shared module - 추천 엔진과 API 래퍼가 공유하는 모듈"""

from shared.models.user import UserContext, ExperienceLevel

__all__ = [
    "UserContext",
    "ExperienceLevel",
]
