"""운동 선호도 학습 서비스

사용자+운동 단위 선호도/효과도를 온라인 이동 평균으로 갱신한다.
데이터가 쌓일수록 새 관측의 반영 비율(학습률)이 줄어든다.
"""

import logging
from typing import Callable, List, Optional
from datetime import datetime

from langsmith import traceable

from shared.utils import clamp, utcnow
from adaptive_workout.config import settings
from adaptive_workout.exceptions import ConcurrencyConflictError, PreferenceUpdateConflictError
from adaptive_workout.models import ExercisePreference, PreferenceStats
from adaptive_workout.stores import PreferenceStore

logger = logging.getLogger(__name__)

# (데이터 수 상한, 학습률)
LEARNING_RATE_SCHEDULE = ((1, 0.3), (3, 0.2), (5, 0.15), (10, 0.1))
FINAL_LEARNING_RATE = 0.05

PREFERRED_THRESHOLD = 0.2
DISLIKED_THRESHOLD = -0.2


def learning_rate(data_points: int) -> float:
    """데이터 수에 따른 단계별 학습률"""
    for upper, rate in LEARNING_RATE_SCHEDULE:
        if data_points <= upper:
            return rate
    return FINAL_LEARNING_RATE


def apply_observation(
    current: ExercisePreference,
    preference_observation: float,
    effectiveness_observation: float,
    performed_at: datetime,
) -> ExercisePreference:
    """관측 1건을 반영한 새 선호도 (저장하지 않음)

    저장된 행이 없으면 중립값(0 / 0.5)에서 같은 학습률로 출발한다.
    """
    incoming_pref = clamp(preference_observation, -1.0, 1.0)
    incoming_eff = clamp(effectiveness_observation, 0.0, 1.0)

    rate = learning_rate(current.data_points)
    new_pref = current.preference_score * (1 - rate) + incoming_pref * rate
    new_eff = current.effectiveness_score * (1 - rate) + incoming_eff * rate

    return current.model_copy(
        update={
            "preference_score": clamp(new_pref, -1.0, 1.0),
            "effectiveness_score": clamp(new_eff, 0.0, 1.0),
            "data_points": current.data_points + 1,
            "last_performed": performed_at,
        }
    )


class PreferenceLedger:
    """선호도 조회/갱신

    갱신은 읽기-계산-저장을 버전 비교로 원자화하고,
    충돌 시 새로 읽어 최대 ledger_max_retries회 재시도한다.
    """

    def __init__(
        self,
        store: PreferenceStore,
        max_retries: Optional[int] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.max_retries = settings.ledger_max_retries if max_retries is None else max_retries
        self.clock = clock

    def get(self, user_id: str, exercise_name: str) -> ExercisePreference:
        """선호도 조회 (없으면 중립값)"""
        preference = self.store.get(user_id, exercise_name)
        if preference is None:
            return ExercisePreference.neutral(user_id, exercise_name)
        return preference

    def confidence(self, user_id: str, exercise_name: str) -> float:
        return self.get(user_id, exercise_name).confidence_score

    def reliable_preference(self, user_id: str, exercise_name: str) -> float:
        """신뢰도 0.3 이상일 때만 선호도 점수, 아니면 0"""
        preference = self.get(user_id, exercise_name)
        return preference.preference_score if preference.is_reliable else 0.0

    @traceable(name="preference_ledger_update")
    def update(
        self,
        user_id: str,
        exercise_name: str,
        preference_observation: float,
        effectiveness_observation: float,
        performed_at: Optional[datetime] = None,
    ) -> ExercisePreference:
        """
        관측값으로 선호도 갱신

        Args:
            user_id: 사용자 ID
            exercise_name: 운동 ID
            preference_observation: 이번 세션의 선호 관측값 (-1 ~ 1)
            effectiveness_observation: 이번 세션의 효과 관측값 (0 ~ 1)
            performed_at: 수행 시각 (기본값: 현재)

        Returns:
            저장된 선호도

        Raises:
            PreferenceUpdateConflictError: 재시도 후에도 버전 충돌
        """
        performed_at = performed_at or self.clock()

        for attempt in range(1, self.max_retries + 1):
            stored = self.store.get(user_id, exercise_name)
            current = stored or ExercisePreference.neutral(user_id, exercise_name)
            expected_version = stored.version if stored is not None else None

            updated = apply_observation(
                current, preference_observation, effectiveness_observation, performed_at
            )
            try:
                saved = self.store.upsert(updated, expected_version)
            except ConcurrencyConflictError as e:
                logger.warning(f"선호도 갱신 충돌 ({attempt}/{self.max_retries}): {e}")
                continue

            logger.debug(
                f"선호도 갱신: user={user_id}, exercise={exercise_name}, "
                f"pref={saved.preference_score:.3f}, eff={saved.effectiveness_score:.3f}, "
                f"n={saved.data_points}"
            )
            return saved

        raise PreferenceUpdateConflictError(user_id, exercise_name, self.max_retries)

    def list_preferences(self, user_id: str) -> List[ExercisePreference]:
        return self.store.list_for_user(user_id)

    def disliked_exercises(self, user_id: str) -> List[str]:
        """충분한 근거로 비선호가 확인된 운동 ID"""
        return [
            p.exercise_name
            for p in self.list_preferences(user_id)
            if p.data_points >= settings.reliable_data_points
            and p.preference_score <= settings.dislike_threshold
        ]

    def stats(self, user_id: str) -> PreferenceStats:
        """사용자 선호도 통계"""
        preferences = self.list_preferences(user_id)
        return PreferenceStats(
            total_exercises=len(preferences),
            preferred_count=sum(1 for p in preferences if p.preference_score >= PREFERRED_THRESHOLD),
            disliked_count=sum(1 for p in preferences if p.preference_score <= DISLIKED_THRESHOLD),
            reliable_count=sum(1 for p in preferences if p.is_reliable),
        )
