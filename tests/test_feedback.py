"""피드백 분석 / 세션 피드백 학습 테스트"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from adaptive_workout.exceptions import (
    ConcurrencyConflictError,
    DuplicateSessionError,
    PreferenceUpdateConflictError,
)
from adaptive_workout.models import FeedbackAnalysis, SessionFeedbackInput
from adaptive_workout.services import FeedbackAnalyzer, PreferenceLedger, SessionFeedbackService
from adaptive_workout.services.feedback_analysis import NEED_MORE_DATA_MESSAGE
from adaptive_workout.services.feedback_learning import (
    effectiveness_observation,
    preference_observation,
)
from adaptive_workout.stores import InMemoryPreferenceStore
from tests.conftest import NOW, fixed_clock, make_execution, make_record


@pytest.fixture
def analyzer(feedback_store) -> FeedbackAnalyzer:
    return FeedbackAnalyzer(feedback_store, clock=fixed_clock)


@pytest.fixture
def service(feedback_store, ledger) -> SessionFeedbackService:
    return SessionFeedbackService(feedback_store, ledger, clock=fixed_clock)


# 운동 시간 조정

@pytest.mark.parametrize("base,analysis,expected", [
    (45, FeedbackAnalysis(total_sessions=1, avg_difficulty=5.0), 45),
    (45, FeedbackAnalysis(total_sessions=2, avg_difficulty=4.5), 38),
    (45, FeedbackAnalysis(total_sessions=2, avg_difficulty=2.0, avg_completion_rate=1.0), 52),
    (45, FeedbackAnalysis(total_sessions=3, avg_difficulty=5.0, avg_completion_rate=0.5,
                          avg_satisfaction=1.0), 29),
    (15, FeedbackAnalysis(total_sessions=3, avg_difficulty=5.0, avg_completion_rate=0.5,
                          avg_satisfaction=1.0), 15),
    (90, FeedbackAnalysis(total_sessions=2, avg_difficulty=1.0, avg_completion_rate=1.0), 90),
    (45, FeedbackAnalysis(total_sessions=5), 45),
])
def test_adjust_duration(base, analysis, expected):
    assert FeedbackAnalyzer.adjust_duration(base, analysis) == expected


def test_analyze_empty_history(analyzer, beginner):
    analysis = analyzer.analyze(beginner)

    assert analysis.total_sessions == 0
    assert analysis.avg_satisfaction == 3.0
    assert analysis.would_repeat_ratio == 0.8
    assert analysis.best_performing_exercise is None

    insights = analyzer.insights(analysis)
    assert insights.message == NEED_MORE_DATA_MESSAGE
    assert insights.tips == []


def test_analyze_recent_sessions(analyzer, feedback_store, beginner):
    feedback_store.add_feedback(make_record(
        days_ago=20, satisfaction=1, exercises=["burpee"],
    ))
    feedback_store.add_feedback(make_record(
        days_ago=3, satisfaction=4, overall_difficulty=2, completion_rate=1.0, would_repeat=True,
        exercises=[
            make_execution("squat", reported_completion_rate=1.0),
            make_execution("pushup", reported_completion_rate=0.6),
        ],
    ))
    feedback_store.add_feedback(make_record(
        days_ago=1, satisfaction=5, overall_difficulty=2, completion_rate=0.96, would_repeat=True,
        exercises=[make_execution("squat", reported_completion_rate=0.8)],
    ))

    analysis = analyzer.analyze(beginner)

    assert analysis.total_sessions == 2
    assert analysis.avg_satisfaction == pytest.approx(4.5)
    assert analysis.avg_completion_rate == pytest.approx(0.98)
    assert analysis.would_repeat_ratio == 1.0
    assert analysis.exercise_counts == {"squat": 2, "pushup": 1}
    assert analysis.exercise_performance["squat"] == pytest.approx(0.9)
    assert analysis.best_performing_exercise == "squat"
    assert analysis.recent_exercises[0] == "squat"
    assert "burpee" in analysis.recent_exercises

    insights = analyzer.insights(analysis)
    assert insights.sessions_analyzed == 2
    assert insights.recent_satisfaction == "4.5/5.0"
    assert insights.difficulty_trend == "더 도전할 준비 됐어요"
    assert insights.completion_trend == "98.0%"
    assert insights.motivation_level == "높음"
    assert insights.message is None
    # 팁은 세션 3회 이상
    assert insights.tips == []


def test_missing_answers_use_defaults():
    records = [make_record(days_ago=2, satisfaction=4), make_record(days_ago=1)]

    analysis = FeedbackAnalyzer.summarize(records)

    assert analysis.total_sessions == 2
    assert analysis.avg_satisfaction == 4.0
    assert analysis.avg_difficulty == 3.0
    assert analysis.avg_completion_rate == 0.8
    assert analysis.would_repeat_ratio == FeedbackAnalysis().would_repeat_ratio == 0.8


def test_feedback_tips_after_three_sessions():
    analysis = FeedbackAnalysis(
        total_sessions=3, avg_satisfaction=4.5, avg_difficulty=4.6, avg_completion_rate=0.6
    )

    tips = FeedbackAnalyzer.feedback_tips(analysis)

    assert tips == [
        "🌟 최근 운동 만족도가 높네요! 이 페이스를 유지하세요",
        "😅 최근 운동이 힘드셨나요? 오늘은 강도를 조금 낮췄어요",
        "🎯 완주에 집중해보세요. 세트 수를 줄이고 정확하게!",
    ]


# 세션 피드백 학습

@pytest.mark.parametrize("satisfaction,would_repeat,completion,expected", [
    (5, True, 1.0, 0.85),
    (1, False, 0.0, -0.85),
    (3, None, 0.5, 0.0),
    (None, None, None, 0.0),
    (4, True, None, 0.35),
])
def test_preference_observation(satisfaction, would_repeat, completion, expected):
    assert preference_observation(satisfaction, would_repeat, completion) == pytest.approx(expected)


@pytest.mark.parametrize("rpe,completion,expected", [
    (7, 0.95, 1.0),
    (5, 0.8, 0.7),
    (10, 0.3, 0.3),
    (2, None, 0.5),
    (None, None, 0.5),
])
def test_effectiveness_observation(rpe, completion, expected):
    assert effectiveness_observation(rpe, completion) == pytest.approx(expected)


def _session(**overrides) -> SessionFeedbackInput:
    values = dict(
        session_id="session_1",
        completion_rate=0.6,
        overall_difficulty=3,
        satisfaction=5,
        would_repeat=True,
        exercises=[
            dict(exercise_name="squat", planned_sets=3, completed_sets=3,
                 planned_reps=15, completed_reps=15, perceived_exertion=7),
            dict(exercise_name="pushup"),
        ],
    )
    values.update(overrides)
    return SessionFeedbackInput(**values)


def test_record_session_updates_preferences(service, feedback_store, ledger, beginner):
    result = service.record(beginner, _session())

    assert result.session_id == "session_1"
    assert result.recorded_at == NOW
    by_name = {p.exercise_name: p for p in result.preferences}
    # 관측 squat 0.85 / 1.0, pushup 0.61 / 0.5 → 중립값에서 학습률 0.3으로 반영
    assert by_name["squat"].preference_score == pytest.approx(0.255)
    assert by_name["squat"].effectiveness_score == pytest.approx(0.65)
    # 운동별 완료율이 없으면 세션 완료율 사용
    assert by_name["pushup"].preference_score == pytest.approx(0.183)
    assert by_name["pushup"].effectiveness_score == pytest.approx(0.5)
    assert ledger.get("user_1", "squat").data_points == 1

    stored = feedback_store.list_recent_feedback("user_1", NOW - timedelta(days=1))
    assert [r.session_id for r in stored] == ["session_1"]
    assert stored[0].exercise_names == ["squat", "pushup"]


def test_duplicate_session_is_rejected(service, ledger, beginner):
    service.record(beginner, _session())

    with pytest.raises(DuplicateSessionError):
        service.record(beginner, _session())
    assert ledger.get("user_1", "squat").data_points == 1


class BlockedExerciseStore(InMemoryPreferenceStore):
    """blocked 운동의 저장은 항상 버전 충돌"""

    def __init__(self, blocked: str):
        super().__init__()
        self.blocked = blocked

    def upsert(self, preference, expected_version):
        if preference.exercise_name == self.blocked:
            raise ConcurrencyConflictError(
                preference.user_id, preference.exercise_name, expected_version
            )
        return super().upsert(preference, expected_version)


def test_retry_after_conflict_learns_remaining_exercises(feedback_store, beginner):
    preference_store = BlockedExerciseStore(blocked="pushup")
    ledger = PreferenceLedger(preference_store, max_retries=2, clock=fixed_clock)
    service = SessionFeedbackService(feedback_store, ledger, clock=fixed_clock)

    with pytest.raises(PreferenceUpdateConflictError):
        service.record(beginner, _session())
    assert ledger.get("user_1", "squat").data_points == 1
    assert ledger.get("user_1", "pushup").data_points == 0
    assert feedback_store.pending_executions("session_1") == [1]

    # 충돌 해소 후 같은 세션 재제출 → 남은 운동만 학습
    preference_store.blocked = None
    result = service.record(beginner, _session())

    assert ledger.get("user_1", "squat").data_points == 1
    assert ledger.get("user_1", "pushup").data_points == 1
    assert [p.exercise_name for p in result.preferences] == ["squat", "pushup"]
    assert feedback_store.pending_executions("session_1") == []
    assert len(feedback_store.list_recent_feedback("user_1", NOW - timedelta(days=1))) == 1

    with pytest.raises(DuplicateSessionError):
        service.record(beginner, _session())
    assert ledger.get("user_1", "pushup").data_points == 1


def test_unfinished_session_is_not_resumed_by_other_user(feedback_store, beginner):
    preference_store = BlockedExerciseStore(blocked="pushup")
    ledger = PreferenceLedger(preference_store, max_retries=1, clock=fixed_clock)
    service = SessionFeedbackService(feedback_store, ledger, clock=fixed_clock)

    with pytest.raises(PreferenceUpdateConflictError):
        service.record(beginner, _session())
    preference_store.blocked = None

    other = beginner.model_copy(update={"user_id": "user_2"})
    with pytest.raises(DuplicateSessionError):
        service.record(other, _session())
    assert ledger.get("user_1", "pushup").data_points == 0
    assert ledger.list_preferences("user_2") == []


def test_completed_at_is_normalized_to_utc(service, beginner):
    kst = timezone(timedelta(hours=9))
    completed_at = datetime(2025, 3, 1, 18, 0, tzinfo=kst)

    result = service.record(beginner, _session(completed_at=completed_at))

    assert result.recorded_at == datetime(2025, 3, 1, 9, 0)
    assert result.recorded_at.tzinfo is None


@pytest.mark.parametrize("overrides", [
    dict(satisfaction=6),
    dict(completion_rate=1.5),
    dict(overall_difficulty=0),
    dict(exercises=[dict(exercise_name="squat", planned_sets=2, completed_sets=5)]),
    dict(exercises=[dict(exercise_name="squat", perceived_exertion=11)]),
    dict(exercises=[dict(exercise_name="   ")]),
])
def test_invalid_session_feedback(overrides):
    with pytest.raises(ValidationError):
        _session(**overrides)
