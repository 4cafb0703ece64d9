"""최근 피드백 분석 서비스

최근 2주 세션 피드백을 집계해
- 운동 시간 조정
- 피드백 인사이트 / 피드백 기반 팁
에 사용한다.
"""

import logging
from collections import defaultdict
from typing import Callable, Dict, List, Optional
from datetime import datetime, timedelta

from langsmith import traceable

from shared.models import UserContext
from shared.utils import clamp, mean_or, round_half_up, utcnow
from adaptive_workout.config import settings
from adaptive_workout.models import FeedbackAnalysis, FeedbackInsights, FeedbackRecord
from adaptive_workout.stores import FeedbackStore

logger = logging.getLogger(__name__)

RECENT_EXERCISE_LIMIT = 20
NEED_MORE_DATA_MESSAGE = "더 많은 운동 기록이 있으면 더 정확한 분석이 가능해요!"


def difficulty_trend_label(avg_difficulty: float) -> str:
    if avg_difficulty >= 4.0:
        return "최근 운동이 어려워요"
    elif avg_difficulty <= 2.0:
        return "더 도전할 준비 됐어요"
    return "적절한 난이도 유지 중"


def repeat_motivation_label(would_repeat_ratio: float) -> str:
    if would_repeat_ratio > 0.8:
        return "높음"
    elif would_repeat_ratio > 0.5:
        return "보통"
    return "낮음"


class FeedbackAnalyzer:
    """최근 피드백 집계 / 운동 시간 조정 / 인사이트"""

    def __init__(
        self,
        feedback_store: FeedbackStore,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.feedback_store = feedback_store
        self.clock = clock

    @traceable(name="feedback_analysis")
    def analyze(self, user: UserContext, days: Optional[int] = None) -> FeedbackAnalysis:
        """
        최근 피드백 집계

        Args:
            user: 사용자 정보
            days: 분석 기간 (기본값: 14일)

        Returns:
            FeedbackAnalysis
        """
        days = settings.analysis_window_days if days is None else days
        since = self.clock() - timedelta(days=days)
        records = self.feedback_store.list_recent_feedback(user.user_id, since)
        recent_exercises = list(
            dict.fromkeys(
                self.feedback_store.list_recent_exercise_names(user.user_id, RECENT_EXERCISE_LIMIT)
            )
        )
        analysis = self.summarize(records, recent_exercises)
        logger.info(f"피드백 분석: user={user.user_id}, 최근 {days}일 {analysis.total_sessions}회")
        return analysis

    @staticmethod
    def summarize(
        records: List[FeedbackRecord], recent_exercises: Optional[List[str]] = None
    ) -> FeedbackAnalysis:
        """피드백 기록 집계 (저장소 조회 없음)"""
        if not records:
            return FeedbackAnalysis(recent_exercises=recent_exercises or [])

        satisfactions = [r.clamped_satisfaction for r in records if r.clamped_satisfaction is not None]
        difficulties = [r.clamped_difficulty for r in records if r.clamped_difficulty is not None]
        completions = [
            r.clamped_completion_rate for r in records if r.clamped_completion_rate is not None
        ]
        repeats = [1.0 if r.would_repeat else 0.0 for r in records if r.would_repeat is not None]

        performance_sums: Dict[str, float] = defaultdict(float)
        counts: Dict[str, int] = defaultdict(int)
        for record in sorted(records, key=lambda r: r.timestamp):
            for execution in record.executions:
                rate = execution.completion_rate
                performance_sums[execution.exercise_name] += 0.8 if rate is None else rate
                counts[execution.exercise_name] += 1

        return FeedbackAnalysis(
            total_sessions=len(records),
            avg_satisfaction=mean_or(satisfactions, 3.0),
            avg_difficulty=mean_or(difficulties, 3.0),
            avg_completion_rate=mean_or(completions, 0.8),
            would_repeat_ratio=mean_or(repeats, 0.8),
            exercise_performance={
                name: performance_sums[name] / counts[name] for name in performance_sums
            },
            exercise_counts=dict(counts),
            recent_exercises=recent_exercises or [],
        )

    @staticmethod
    def adjust_duration(base_duration: int, analysis: FeedbackAnalysis) -> int:
        """피드백 기반 운동 시간 조정 (세션 2회 미만이면 조정 없음)"""
        if not analysis.has_enough_data:
            return base_duration

        adjustment = 0.0

        # 계속 어렵다고 평가하면 단축, 쉽다고 평가하면 연장
        if analysis.avg_difficulty >= 4.0:
            adjustment -= 0.15
        elif analysis.avg_difficulty <= 2.0:
            adjustment += 0.1

        if analysis.avg_completion_rate < 0.7:
            adjustment -= 0.1
        elif analysis.avg_completion_rate > 0.95:
            adjustment += 0.05

        if analysis.avg_satisfaction < 2.5:
            adjustment -= 0.1

        adjusted = round_half_up(base_duration * (1.0 + adjustment))
        return int(clamp(adjusted, settings.min_duration_minutes, settings.max_duration_minutes))

    @staticmethod
    def feedback_tips(analysis: FeedbackAnalysis) -> List[str]:
        """최근 피드백 기반 팁 (세션 3회 이상)"""
        tips = []
        if analysis.total_sessions < 3:
            return tips

        if analysis.avg_satisfaction >= 4.0:
            tips.append("🌟 최근 운동 만족도가 높네요! 이 페이스를 유지하세요")
        elif analysis.avg_satisfaction < 2.5:
            tips.append("🤔 운동이 맞지 않는 것 같아요. 오늘은 다른 스타일을 시도해보세요")

        if analysis.avg_difficulty >= 4.5:
            tips.append("😅 최근 운동이 힘드셨나요? 오늘은 강도를 조금 낮췄어요")
        elif analysis.avg_difficulty <= 2.0:
            tips.append("💪 준비되셨나요? 이번엔 조금 더 도전적으로 구성했어요")

        if analysis.avg_completion_rate < 0.7:
            tips.append("🎯 완주에 집중해보세요. 세트 수를 줄이고 정확하게!")
        elif analysis.avg_completion_rate > 0.95:
            tips.append("🏆 완벽한 완주율! 이제 강도를 높일 때입니다")

        return tips

    def insights(self, analysis: FeedbackAnalysis) -> FeedbackInsights:
        """피드백 인사이트 (세션 2회 미만이면 안내 메시지만)"""
        if not analysis.has_enough_data:
            return FeedbackInsights(
                sessions_analyzed=analysis.total_sessions,
                recent_exercises=analysis.recent_exercises,
                message=NEED_MORE_DATA_MESSAGE,
            )

        return FeedbackInsights(
            sessions_analyzed=analysis.total_sessions,
            recent_satisfaction=f"{analysis.avg_satisfaction:.1f}/5.0",
            difficulty_trend=difficulty_trend_label(analysis.avg_difficulty),
            completion_trend=f"{analysis.avg_completion_rate * 100:.1f}%",
            motivation_level=repeat_motivation_label(analysis.would_repeat_ratio),
            best_performing_exercise=analysis.best_performing_exercise,
            recent_exercises=analysis.recent_exercises,
            tips=self.feedback_tips(analysis),
        )
