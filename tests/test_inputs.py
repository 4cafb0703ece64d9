"""입력 모델 검증 테스트"""

import pytest
from pydantic import ValidationError

from shared.models import UserContext
from adaptive_workout.config import settings
from adaptive_workout.exceptions import InvalidInputError
from adaptive_workout.models import WorkoutRecommendationInput, normalize_goal


@pytest.mark.parametrize("raw,expected", [
    ("diet", "diet"),
    ("  Strength ", "strength"),
    ("body_shape", "body_shape"),
    ("", None),
    (None, None),
])
def test_normalize_goal(raw, expected):
    assert normalize_goal(raw) == expected


@pytest.mark.parametrize("raw", ["diet!", "1diet", "다이어트", "a" * 40, "diet goal"])
def test_malformed_goal_is_rejected(raw):
    with pytest.raises(InvalidInputError):
        normalize_goal(raw)


def test_recommendation_input_defaults():
    data = WorkoutRecommendationInput(user={"user_id": "user_1", "goal": "body"})

    assert data.target_duration_minutes == 45
    assert data.goal is None
    assert data.resolved_goal == "body"
    assert data.user.experience == "beginner"


def test_default_duration_follows_settings(monkeypatch):
    monkeypatch.setattr(settings, "default_duration_minutes", 60)

    data = WorkoutRecommendationInput(user={"user_id": "user_1"})

    assert data.target_duration_minutes == 60


def test_request_goal_overrides_user_goal():
    data = WorkoutRecommendationInput(user={"user_id": "user_1", "goal": "body"}, goal="DIET")
    assert data.resolved_goal == "diet"


@pytest.mark.parametrize("payload", [
    {"user": {"user_id": "user_1"}, "target_duration_minutes": 10},
    {"user": {"user_id": "user_1"}, "target_duration_minutes": 91},
    {"user": {"user_id": "user_1"}, "goal": "diet;drop"},
    {"user": {"user_id": "   "}},
    {"user": {"user_id": "user_1", "experience": "expert"}},
    {"user": {"user_id": "user_1", "weight_kg": 5}},
    {"user": {"user_id": "user_1"}, "motion_quality": {"squat": {"form_accuracy": 1.5}}},
])
def test_invalid_recommendation_input(payload):
    with pytest.raises(ValidationError):
        WorkoutRecommendationInput(**payload)


def test_experience_is_normalized():
    assert UserContext(user_id="u", experience=" Advanced ").experience == "advanced"
    assert UserContext(user_id="u", experience=None).experience == "beginner"
