"""Adaptive Workout 설정"""

from .settings import settings, AdaptiveWorkoutSettings

__all__ = [
    "settings",
    "AdaptiveWorkoutSettings",
]
