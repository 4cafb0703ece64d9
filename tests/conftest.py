"""공용 테스트 fixture

- 고정 시계 (NOW)
- 인메모리 저장소 / 카탈로그
- 피드백 기록 팩토리
"""

from datetime import datetime, timedelta
from typing import List, Optional

import pytest

from shared.models import UserContext
from adaptive_workout.models import ExerciseExecution, FeedbackRecord
from adaptive_workout.services import ExerciseCatalog, PreferenceLedger
from adaptive_workout.stores import InMemoryFeedbackStore, InMemoryPreferenceStore
from adaptive_workout.pipeline import WorkoutRecommendationPipeline

NOW = datetime(2025, 3, 1, 12, 0, 0)


def fixed_clock() -> datetime:
    return NOW


def make_execution(exercise_name: str, **kwargs) -> ExerciseExecution:
    return ExerciseExecution(exercise_name=exercise_name, **kwargs)


def make_record(
    user_id: str = "user_1",
    days_ago: float = 1,
    exercises: Optional[List[str]] = None,
    session_id: Optional[str] = None,
    **kwargs,
) -> FeedbackRecord:
    """days_ago일 전 세션 피드백"""
    timestamp = NOW - timedelta(days=days_ago)
    executions = [
        e if isinstance(e, ExerciseExecution) else make_execution(e, performed_at=timestamp)
        for e in (exercises or [])
    ]
    return FeedbackRecord(
        session_id=session_id or f"{user_id}-{timestamp.isoformat()}",
        user_id=user_id,
        timestamp=timestamp,
        executions=executions,
        **kwargs,
    )


@pytest.fixture
def clock():
    return fixed_clock


@pytest.fixture(scope="session")
def catalog() -> ExerciseCatalog:
    return ExerciseCatalog()


@pytest.fixture
def feedback_store() -> InMemoryFeedbackStore:
    return InMemoryFeedbackStore()


@pytest.fixture
def preference_store() -> InMemoryPreferenceStore:
    return InMemoryPreferenceStore()


@pytest.fixture
def ledger(preference_store) -> PreferenceLedger:
    return PreferenceLedger(preference_store, clock=fixed_clock)


@pytest.fixture
def beginner() -> UserContext:
    return UserContext(user_id="user_1", goal="diet", experience="beginner", weight_kg=70)


@pytest.fixture
def pipeline(feedback_store, preference_store, catalog) -> WorkoutRecommendationPipeline:
    return WorkoutRecommendationPipeline(
        feedback_store=feedback_store,
        preference_store=preference_store,
        catalog=catalog,
        clock=fixed_clock,
    )
