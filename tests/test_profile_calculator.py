"""피트니스 프로필 계산 테스트"""

import pytest

from shared.models import UserContext
from adaptive_workout.exceptions import InvalidInputError
from adaptive_workout.services import FitnessProfileCalculator
from tests.conftest import fixed_clock, make_record


@pytest.fixture
def calculator(feedback_store, catalog) -> FitnessProfileCalculator:
    return FitnessProfileCalculator(feedback_store, catalog, clock=fixed_clock)


def _good_session(days_ago: float, **overrides):
    values = dict(
        completion_rate=1.0,
        overall_difficulty=3,
        satisfaction=4,
        energy_after=4,
        muscle_soreness=2,
        would_repeat=True,
    )
    values.update(overrides)
    return make_record(days_ago=days_ago, exercises=["squat"], **values)


def test_no_history_returns_default_profile(calculator, beginner):
    """기록이 없으면 경험 수준 기본 프로필"""
    profile = calculator.calculate(beginner)

    assert profile.data_points == 0
    assert profile.confidence_score == 0.0
    assert profile.current_fitness_level == pytest.approx(0.3)
    assert profile.average_completion_rate == pytest.approx(0.8)
    assert profile.motivation_level == pytest.approx(0.5)
    assert not profile.is_personalized
    assert profile.goal == "diet"


def test_default_profile_confidence_grows_with_sessions(calculator, feedback_store, beginner):
    feedback_store.add_feedback(_good_session(1))
    feedback_store.add_feedback(_good_session(2))

    profile = calculator.calculate(beginner)

    assert profile.data_points == 2
    assert profile.confidence_score == pytest.approx(1 / 3)
    assert profile.current_fitness_level == pytest.approx(0.3)


@pytest.mark.parametrize("experience,expected_level", [
    ("beginner", 0.3),
    ("intermediate", 0.5),
    ("advanced", 0.7),
])
def test_default_fitness_level_by_experience(calculator, experience, expected_level):
    user = UserContext(user_id="u", experience=experience)
    assert calculator.calculate(user).current_fitness_level == pytest.approx(expected_level)


def test_consistent_sessions(calculator, feedback_store, beginner):
    """완료율 100%, 만족도 4, 난이도 3 세션 3회"""
    for days_ago in (3, 2, 1):
        feedback_store.add_feedback(_good_session(days_ago))

    profile = calculator.calculate(beginner)

    assert profile.data_points == 3
    assert profile.current_fitness_level == pytest.approx(0.925)
    assert profile.preferred_difficulty == pytest.approx(3.0)
    assert profile.progress_trend == pytest.approx(0.0)
    assert profile.recovery_pattern == pytest.approx(3.8)
    assert profile.motivation_level == pytest.approx(0.75)
    assert profile.confidence_score == pytest.approx(1.0)
    assert profile.adaptation_factor == pytest.approx(0.15)
    assert profile.is_personalized


def test_progress_trend_positive_when_recent_sessions_improve(calculator, feedback_store, beginner):
    for days_ago in (6, 5, 4):
        feedback_store.add_feedback(
            _good_session(days_ago, completion_rate=0.5, overall_difficulty=5, satisfaction=1)
        )
    for days_ago in (3, 2, 1):
        feedback_store.add_feedback(_good_session(days_ago, satisfaction=5))

    profile = calculator.calculate(beginner)

    assert profile.progress_trend > 0.3
    assert profile.progress_trend_label == "빠른 향상"


def test_sessions_outside_window_are_ignored(calculator, feedback_store, beginner):
    for days_ago in (40, 35, 30):
        feedback_store.add_feedback(_good_session(days_ago))

    profile = calculator.calculate(beginner)

    assert profile.data_points == 0


def test_missing_metrics_use_defaults(calculator, feedback_store, beginner):
    for days_ago in (3, 2, 1):
        feedback_store.add_feedback(make_record(days_ago=days_ago))

    profile = calculator.calculate(beginner)

    assert profile.average_completion_rate == pytest.approx(0.8)
    assert profile.preferred_difficulty == pytest.approx(3.0)
    # 0.8*0.4 + 0.5*0.3 + 1.0*0.3
    assert profile.current_fitness_level == pytest.approx(0.77)
    # 0.3 (데이터 수) + 0.2 (만족도 없음)
    assert profile.confidence_score == pytest.approx(0.5)


@pytest.mark.parametrize("completion,difficulty,satisfaction,energy,soreness", [
    (5.0, 10, -3, 9, -9),
    (-1.0, -5, 12, -4, 20),
    (0.0, 1, 1, 1, 5),
    (1.0, 5, 5, 5, 1),
])
def test_profile_fields_stay_in_range(
    calculator, feedback_store, beginner, completion, difficulty, satisfaction, energy, soreness
):
    """범위를 벗어난 저장 값도 계산 시 제한된다"""
    for days_ago in range(1, 8):
        feedback_store.add_feedback(
            make_record(
                days_ago=days_ago,
                completion_rate=completion,
                overall_difficulty=difficulty,
                satisfaction=satisfaction,
                energy_after=energy,
                muscle_soreness=soreness,
                would_repeat=days_ago % 2 == 0,
            )
        )

    profile = calculator.calculate(beginner)

    assert 0.0 <= profile.current_fitness_level <= 1.0
    assert 0.0 <= profile.average_completion_rate <= 1.0
    assert 1.0 <= profile.preferred_difficulty <= 5.0
    assert -1.0 <= profile.progress_trend <= 1.0
    assert 1.0 <= profile.recovery_pattern <= 5.0
    assert 0.0 <= profile.motivation_level <= 1.0
    assert 0.0 <= profile.confidence_score <= 1.0
    assert -0.3 <= profile.adaptation_factor <= 0.3


def test_calculation_is_repeatable(calculator, feedback_store, beginner):
    for days_ago in (5, 3, 1):
        feedback_store.add_feedback(_good_session(days_ago, satisfaction=days_ago % 5 + 1))

    assert calculator.calculate(beginner) == calculator.calculate(beginner)


def test_negative_window_is_rejected(calculator, beginner):
    with pytest.raises(InvalidInputError):
        calculator.calculate(beginner, history_window_days=-1)
