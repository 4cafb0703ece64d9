"""Adaptive Workout Pipeline"""

from .recommendation_pipeline import WorkoutRecommendationPipeline

__all__ = ["WorkoutRecommendationPipeline"]
