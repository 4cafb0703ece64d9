"""운동 계획 구성 테스트"""

import pytest

from adaptive_workout.models import FitnessProfile
from adaptive_workout.services import ExerciseAdapter, PlanAssembler
from adaptive_workout.services.plan_assembler import (
    STANDING_TIPS,
    calories_per_minute,
    profile_tips,
    work_minutes,
)
from tests.conftest import NOW, fixed_clock


@pytest.fixture
def assembler(catalog) -> PlanAssembler:
    return PlanAssembler(catalog, clock=fixed_clock)


@pytest.fixture
def squat(feedback_store, catalog, beginner):
    adapter = ExerciseAdapter(feedback_store, catalog, clock=fixed_clock)
    return adapter.adapt(beginner, FitnessProfile(user_id="user_1", goal="diet"), "squat")


def test_work_minutes():
    assert work_minutes("reps", 3, 15, 2.0) == pytest.approx(1.5)
    assert work_minutes("seconds", 3, 30, 2.0) == pytest.approx(1.5)


def test_calories_per_minute():
    assert calories_per_minute(6.0, 70) == pytest.approx(7.35)


def test_plan_phases_and_duration(assembler, squat):
    plan = assembler.build_plan([squat], 45, 70)

    assert [p.phase for p in plan.phases] == ["warmup", "main", "cooldown"]
    assert plan.warmup.duration_minutes == 8
    assert plan.main.duration_minutes == 30
    assert plan.cooldown.duration_minutes == 7
    assert plan.total_duration_minutes == 45
    assert plan.main_exercise_ids == ["squat"]
    assert [e.exercise_id for e in plan.warmup.exercises] == ["warmup_jog", "dynamic_stretching"]


def test_short_target_keeps_minimum_main_phase(assembler, squat):
    plan = assembler.build_plan([squat], 15, 70)

    assert plan.main.duration_minutes == 5
    assert plan.total_duration_minutes == 20


def test_calories_cover_all_phases(assembler, squat):
    plan = assembler.build_plan([squat], 45, 70)

    main_exercise = plan.main.exercises[0]
    assert main_exercise.estimated_minutes == pytest.approx(1.5)
    assert main_exercise.estimated_calories == pytest.approx(11.0)
    assert plan.estimated_calories == round(sum(p.estimated_calories for p in plan.phases))
    assert plan.estimated_calories == 22


def test_calories_scale_with_body_weight(assembler, squat):
    light = assembler.build_plan([squat], 45, 50)
    heavy = assembler.build_plan([squat], 45, 100)

    assert heavy.estimated_calories > light.estimated_calories


def test_profile_tips_for_struggling_user():
    profile = FitnessProfile(
        user_id="user_1", goal="diet", current_fitness_level=0.2, progress_trend=-0.3,
        motivation_level=0.3, recovery_pattern=2.0, confidence_score=0.9,
    )

    tips = profile_tips(profile)

    assert tips[0] == "💪 천천히 시작하세요. 꾸준함이 가장 중요합니다"
    assert "🎯 새로운 자극을 위해 운동을 변경했습니다" in tips
    assert "🎵 좋아하는 음악과 함께 운동해보세요" in tips
    assert "😴 충분한 휴식이 필요해 보입니다. 휴식 시간을 늘렸어요" in tips
    assert tips[-2:] == STANDING_TIPS


def test_profile_tips_for_strong_user():
    profile = FitnessProfile(
        user_id="user_1", goal="diet", current_fitness_level=0.9, progress_trend=0.3,
        motivation_level=0.9, recovery_pattern=4.0,
    )

    tips = profile_tips(profile)

    assert tips == [
        "🔥 높은 수준의 도전을 위해 운동 강도를 조절했습니다",
        "💫 복합 운동으로 더 큰 효과를 노려보세요",
        "📈 훌륭한 발전을 보이고 있어요! 이 속도를 유지하세요",
    ] + STANDING_TIPS


@pytest.mark.parametrize("confidence,expected_type,expected_level", [
    (0.0, "template", "낮음"),
    (0.29, "template", "낮음"),
    (0.3, "adaptive", "낮음"),
    (0.5, "adaptive", "보통"),
    (0.9, "adaptive", "높음"),
])
def test_adaptation_info(assembler, confidence, expected_type, expected_level):
    profile = FitnessProfile(
        user_id="user_1", goal="diet", average_completion_rate=0.95, confidence_score=confidence
    )

    info = assembler.adaptation_info(profile)

    assert info.recommendation_type == expected_type
    assert info.confidence_level == expected_level
    if expected_type == "template":
        assert info.adaptation_factor == 0.0
    else:
        assert info.adaptation_factor == pytest.approx(0.15)


def test_assemble_recommendation(assembler, beginner, squat):
    profile = FitnessProfile(user_id="user_1", goal="diet", data_points=1)

    recommendation = assembler.assemble(beginner, profile, "diet", [squat], 40,
                                        requested_duration_minutes=45)

    assert recommendation.user_id == "user_1"
    assert recommendation.recommendation_type == "template"
    assert recommendation.requested_duration_minutes == 45
    assert recommendation.adjusted_duration_minutes == 40
    assert recommendation.plan.total_duration_minutes == 40
    assert recommendation.profile.data_points == 1
    assert recommendation.profile.confidence == "0%"
    assert recommendation.recommended_at == NOW
    assert recommendation.feedback_insights.sessions_analyzed == 0
