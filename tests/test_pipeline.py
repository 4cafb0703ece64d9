"""추천 파이프라인 통합 테스트"""

from datetime import timedelta

import pytest

from adaptive_workout.models import SessionFeedbackInput, WorkoutRecommendationInput
from tests.conftest import NOW


def _request(**overrides) -> WorkoutRecommendationInput:
    values = dict(
        user={"user_id": "user_1", "goal": "diet", "experience": "beginner", "weight_kg": 70},
        target_duration_minutes=45,
    )
    values.update(overrides)
    return WorkoutRecommendationInput(**values)


def _feedback(session_id: str, days_ago: int, exercise: str, **overrides) -> SessionFeedbackInput:
    values = dict(
        session_id=session_id,
        completed_at=NOW - timedelta(days=days_ago),
        completion_rate=1.0,
        overall_difficulty=2,
        satisfaction=5,
        would_repeat=True,
        exercises=[{"exercise_name": exercise, "perceived_exertion": 7}],
    )
    values.update(overrides)
    return SessionFeedbackInput(**values)


def test_new_user_gets_template_plan(pipeline):
    recommendation = pipeline.run(_request())

    assert recommendation.recommendation_type == "template"
    assert recommendation.goal == "diet"
    assert recommendation.plan.main_exercise_ids == ["jumping_jack", "squat", "pushup", "plank"]
    assert recommendation.plan.total_duration_minutes == 45
    assert recommendation.adjusted_duration_minutes == 45
    assert recommendation.feedback_insights.sessions_analyzed == 0
    assert set(recommendation.score_breakdown) == set(recommendation.plan.main_exercise_ids)
    assert recommendation.plan.estimated_calories > 0


def test_goal_falls_back_to_default(pipeline):
    recommendation = pipeline.run(_request(user={"user_id": "user_9"}))

    assert recommendation.goal == "diet"


def test_unknown_goal_uses_default_pool(pipeline, catalog):
    recommendation = pipeline.run(_request(goal="yoga"))

    assert recommendation.goal == "yoga"
    assert set(recommendation.plan.main_exercise_ids) <= set(catalog.goal_pool("unknown"))


def test_feedback_makes_recommendation_adaptive(pipeline):
    user = _request().user
    for i, days_ago in enumerate((5, 3, 1)):
        pipeline.record_feedback(user, _feedback(f"s{i}", days_ago, "squat"))

    recommendation = pipeline.run(_request())

    assert recommendation.recommendation_type == "adaptive"
    assert recommendation.adaptation.recommendation_label == "개인화 추천"
    assert recommendation.profile.data_points == 3
    # 쉬움 + 완주 → 운동 시간 연장
    assert recommendation.requested_duration_minutes == 45
    assert recommendation.adjusted_duration_minutes == 52
    assert recommendation.plan.total_duration_minutes == 52
    assert recommendation.feedback_insights.best_performing_exercise == "squat"
    assert recommendation.feedback_insights.recent_exercises == ["squat"]


def test_disliked_exercise_is_not_recommended(pipeline):
    user = _request().user
    for i, days_ago in enumerate((12, 10, 8)):
        pipeline.record_feedback(
            user,
            _feedback(f"s{i}", days_ago, "jumping_jack", satisfaction=1, would_repeat=False,
                      completion_rate=0.2, overall_difficulty=4),
        )

    assert pipeline.ledger.disliked_exercises("user_1") == ["jumping_jack"]

    recommendation = pipeline.run(_request())

    assert "jumping_jack" not in recommendation.plan.main_exercise_ids
    assert 3 <= len(recommendation.plan.main_exercise_ids) <= 4


def test_recommendation_is_deterministic(pipeline):
    user = _request().user
    pipeline.record_feedback(user, _feedback("s0", 2, "squat"))

    first = pipeline.run(_request())
    second = pipeline.run(_request())

    assert first.model_dump() == second.model_dump()


def test_users_are_isolated(pipeline):
    other = _request(user={"user_id": "user_2"}).user
    for i, days_ago in enumerate((5, 3, 1)):
        pipeline.record_feedback(other, _feedback(f"other{i}", days_ago, "squat"))

    recommendation = pipeline.run(_request())

    assert recommendation.recommendation_type == "template"
    assert recommendation.profile.data_points == 0


@pytest.mark.parametrize("experience,lower,upper", [
    ("beginner", 3, 4),
    ("intermediate", 5, 5),
    ("advanced", 6, 7),
])
def test_exercise_count_by_experience(pipeline, experience, lower, upper):
    recommendation = pipeline.run(
        _request(user={"user_id": "user_1", "experience": experience}, target_duration_minutes=60)
    )

    assert lower <= len(recommendation.plan.main_exercise_ids) <= upper
