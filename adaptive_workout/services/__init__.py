"""Adaptive Workout Services"""

from .catalog import ExerciseCatalog, get_catalog
from .history import RecentHistory
from .profile_calculator import FitnessProfileCalculator
from .preference_ledger import PreferenceLedger, learning_rate
from .exercise_scorer import ExerciseScorer, SCORE_WEIGHTS
from .exercise_selector import ExerciseSelector
from .exercise_adapter import ExerciseAdapter
from .plan_assembler import PlanAssembler
from .feedback_analysis import FeedbackAnalyzer
from .feedback_learning import SessionFeedbackService

__all__ = [
    "ExerciseCatalog",
    "get_catalog",
    "RecentHistory",
    "FitnessProfileCalculator",
    "PreferenceLedger",
    "learning_rate",
    "ExerciseScorer",
    "SCORE_WEIGHTS",
    "ExerciseSelector",
    "ExerciseAdapter",
    "PlanAssembler",
    "FeedbackAnalyzer",
    "SessionFeedbackService",
]
