"""운동 선택 서비스

1. 목표별 후보군 구성
2. 후보 점수 계산 후 점수 내림차순 정렬 (동점이면 후보군 순서)
3. 최근 7일 수행 운동 제외 (선택된 운동이 4개 미만이면 허용)
4. 충분한 근거가 있는 비선호 운동 제외
5. 근육군 목표 개수 안에서 순서대로 선택
6. 최소 개수 미달 시 후보군 순서대로 보충 (제외 규칙 무시)
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional

from langsmith import traceable

from shared.models import UserContext
from adaptive_workout.config import settings
from adaptive_workout.models import ExperienceTier, FitnessProfile, MotionQuality, ScoredExercise
from adaptive_workout.services.catalog import ExerciseCatalog, get_catalog
from adaptive_workout.services.exercise_scorer import ExerciseScorer
from adaptive_workout.services.history import RecentHistory
from adaptive_workout.services.preference_ledger import PreferenceLedger

logger = logging.getLogger(__name__)


class ExerciseSelector:
    """균형 잡힌 운동 구성 선택"""

    def __init__(
        self,
        scorer: ExerciseScorer,
        ledger: PreferenceLedger,
        catalog: Optional[ExerciseCatalog] = None,
    ):
        self.scorer = scorer
        self.ledger = ledger
        self.catalog = catalog or get_catalog()

    def max_count(self, tier: ExperienceTier, target_duration_minutes: int) -> int:
        """최대 운동 개수 (경험 수준 상한, 메인 운동 시간, 최소 개수 순으로 적용)"""
        main_minutes = self.catalog.main_duration(target_duration_minutes)
        by_duration = main_minutes // settings.minutes_per_exercise
        return min(tier.max_exercises, max(tier.min_exercises, by_duration))

    def _is_disliked(self, user_id: str, exercise_id: str) -> bool:
        preference = self.ledger.get(user_id, exercise_id)
        return (
            preference.data_points >= settings.reliable_data_points
            and preference.preference_score <= settings.dislike_threshold
        )

    @traceable(name="exercise_selection")
    def select(
        self,
        user: UserContext,
        profile: FitnessProfile,
        goal: str,
        target_duration_minutes: int,
        qualities: Optional[Dict[str, MotionQuality]] = None,
        history: Optional[RecentHistory] = None,
    ) -> List[ScoredExercise]:
        """
        운동 선택

        Args:
            user: 사용자 정보
            profile: 피트니스 프로필
            goal: 운동 목표
            target_duration_minutes: 목표 운동 시간 (분)
            qualities: 운동별 모션 품질 신호 (선택)
            history: 최근 이력 스냅샷 (없으면 조회)

        Returns:
            선택된 운동 (선택 순서 유지)
        """
        tier = self.catalog.experience_tier(user.experience)
        pool = list(dict.fromkeys(self.catalog.goal_pool(goal)))
        history = history or self.scorer.load_history(user)
        max_count = self.max_count(tier, target_duration_minutes)

        scored = self.scorer.score_candidates(
            user, profile, goal, pool, history=history, qualities=qualities
        )
        ranked = sorted(scored, key=lambda s: s.score, reverse=True)

        accepted: List[ScoredExercise] = []
        group_counts: Dict[str, int] = defaultdict(int)

        for candidate in ranked:
            if len(accepted) >= max_count:
                break

            exercise_id = candidate.exercise_id
            if len(accepted) >= settings.starvation_guard and history.performed_within(
                exercise_id, settings.recent_exclusion_days
            ):
                logger.debug(f"최근 수행 운동 제외: {exercise_id}")
                continue

            if self._is_disliked(user.user_id, exercise_id):
                logger.debug(f"비선호 운동 제외: {exercise_id}")
                continue

            target = candidate.target or "full_body"
            if group_counts[target] >= tier.target_for(target):
                logger.debug(f"근육군 목표 초과로 건너뜀: {exercise_id} ({target})")
                continue

            accepted.append(candidate)
            group_counts[target] += 1

        if len(accepted) < tier.min_exercises:
            accepted = self._backfill(accepted, scored, tier, group_counts)

        logger.info(
            f"운동 선택 완료: user={user.user_id}, goal={goal}, "
            f"{len(accepted)}개 (범위 {tier.min_exercises}-{max_count}), "
            f"{[s.exercise_id for s in accepted]}"
        )
        return accepted

    def _backfill(
        self,
        accepted: List[ScoredExercise],
        scored_in_pool_order: List[ScoredExercise],
        tier: ExperienceTier,
        group_counts: Dict[str, int],
    ) -> List[ScoredExercise]:
        """최소 개수까지 후보군 순서대로 보충

        1차: 근육군 목표 안에서, 2차: 근육군 목표 무시. 후보군이 소진되면 중단.
        """
        result = list(accepted)
        chosen = {s.exercise_id for s in result}

        for respect_targets in (True, False):
            for candidate in scored_in_pool_order:
                if len(result) >= tier.min_exercises:
                    return result
                if candidate.exercise_id in chosen:
                    continue
                target = candidate.target or "full_body"
                if respect_targets and group_counts[target] >= tier.target_for(target):
                    continue

                result.append(candidate.model_copy(update={"backfilled": True}))
                chosen.add(candidate.exercise_id)
                group_counts[target] += 1

        if len(result) < tier.min_exercises:
            logger.warning(
                f"후보군 소진: {len(result)}개만 선택됨 (최소 {tier.min_exercises}개)"
            )
        else:
            logger.info(f"최소 개수 보충: {len(result) - len(accepted)}개 추가")
        return result
