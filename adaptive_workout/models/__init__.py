"""Adaptive Workout Models"""

from .feedback import ExerciseExecution, FeedbackRecord
from .profile import (
    PERSONALIZATION_THRESHOLD,
    FitnessProfile,
    ExerciseProgress,
    ScoreBreakdown,
    ScoredExercise,
)
from .preference import ExercisePreference, PreferenceStats, RELIABLE_CONFIDENCE
from .catalog import ExerciseTemplate, ExperienceTier, PhaseConfig, MuscleGroup
from .analysis import FeedbackAnalysis
from .input import (
    WorkoutRecommendationInput,
    SessionFeedbackInput,
    ExerciseFeedbackInput,
    SessionFeedbackRequest,
    MotionQuality,
    normalize_goal,
)
from .output import (
    AdaptedExercise,
    WorkoutPhase,
    WorkoutPlan,
    ProfileSummary,
    AdaptationInfo,
    FeedbackInsights,
    WorkoutRecommendation,
    PreferenceUpdate,
    SessionFeedbackResult,
)

__all__ = [
    "ExerciseExecution",
    "FeedbackRecord",
    "PERSONALIZATION_THRESHOLD",
    "FitnessProfile",
    "ExerciseProgress",
    "ScoreBreakdown",
    "ScoredExercise",
    "ExercisePreference",
    "PreferenceStats",
    "RELIABLE_CONFIDENCE",
    "ExerciseTemplate",
    "ExperienceTier",
    "PhaseConfig",
    "MuscleGroup",
    "FeedbackAnalysis",
    "WorkoutRecommendationInput",
    "SessionFeedbackInput",
    "ExerciseFeedbackInput",
    "SessionFeedbackRequest",
    "MotionQuality",
    "normalize_goal",
    "AdaptedExercise",
    "WorkoutPhase",
    "WorkoutPlan",
    "ProfileSummary",
    "AdaptationInfo",
    "FeedbackInsights",
    "WorkoutRecommendation",
    "PreferenceUpdate",
    "SessionFeedbackResult",
]
