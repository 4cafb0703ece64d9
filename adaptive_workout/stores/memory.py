"""인메모리 저장소 (DATABASE_URL 미설정 시, 테스트용)"""

import logging
import threading
from collections import defaultdict
from typing import Dict, List, Optional, Set, Tuple
from datetime import datetime

from adaptive_workout.models import ExerciseExecution, ExercisePreference, FeedbackRecord
from adaptive_workout.exceptions import ConcurrencyConflictError, DuplicateSessionError

logger = logging.getLogger(__name__)


def _execution_time(record: FeedbackRecord, execution: ExerciseExecution) -> datetime:
    return execution.performed_at or record.timestamp


class InMemoryFeedbackStore:
    """세션 피드백 이력 (사용자별 리스트)"""

    def __init__(self):
        self._lock = threading.Lock()
        self._records: Dict[str, List[FeedbackRecord]] = defaultdict(list)
        self._sessions: Dict[str, FeedbackRecord] = {}
        self._pending: Dict[str, Set[int]] = {}

    def add_feedback(self, record: FeedbackRecord) -> None:
        with self._lock:
            if record.session_id in self._sessions:
                raise DuplicateSessionError(record.session_id)
            self._sessions[record.session_id] = record
            self._pending[record.session_id] = set(range(len(record.executions)))
            self._records[record.user_id].append(record)
        logger.debug(f"피드백 저장: user={record.user_id}, session={record.session_id}")

    def _snapshot(self, user_id: str) -> List[FeedbackRecord]:
        with self._lock:
            return list(self._records.get(user_id, []))

    def list_recent_feedback(self, user_id: str, since: datetime) -> List[FeedbackRecord]:
        records = [r for r in self._snapshot(user_id) if r.timestamp >= since]
        return sorted(records, key=lambda r: r.timestamp)

    def list_recent_executions(
        self, user_id: str, exercise_name: str, since: datetime
    ) -> List[ExerciseExecution]:
        matched: List[Tuple[datetime, ExerciseExecution]] = []
        for record in self._snapshot(user_id):
            for execution in record.executions:
                if execution.exercise_name != exercise_name:
                    continue
                performed_at = _execution_time(record, execution)
                if performed_at >= since:
                    matched.append((performed_at, execution))
        matched.sort(key=lambda item: item[0], reverse=True)
        return [execution for _, execution in matched]

    def list_recent_exercise_names(self, user_id: str, limit: int) -> List[str]:
        performed: List[Tuple[datetime, str]] = []
        for record in self._snapshot(user_id):
            for execution in record.executions:
                performed.append((_execution_time(record, execution), execution.exercise_name))
        performed.sort(key=lambda item: item[0], reverse=True)
        return [name for _, name in performed[:limit]]

    def get_feedback(self, session_id: str) -> Optional[FeedbackRecord]:
        with self._lock:
            return self._sessions.get(session_id)

    def pending_executions(self, session_id: str) -> List[int]:
        with self._lock:
            return sorted(self._pending.get(session_id, ()))

    def mark_learned(self, session_id: str, position: int) -> None:
        with self._lock:
            self._pending.get(session_id, set()).discard(position)


class InMemoryPreferenceStore:
    """선호도 저장소 - 잠금 하에서 버전 비교 후 교체"""

    def __init__(self):
        self._lock = threading.Lock()
        self._rows: Dict[Tuple[str, str], ExercisePreference] = {}

    def get(self, user_id: str, exercise_name: str) -> Optional[ExercisePreference]:
        with self._lock:
            return self._rows.get((user_id, exercise_name))

    def upsert(
        self, preference: ExercisePreference, expected_version: Optional[int]
    ) -> ExercisePreference:
        key = (preference.user_id, preference.exercise_name)
        with self._lock:
            current = self._rows.get(key)
            current_version = current.version if current else None
            if current_version != expected_version:
                raise ConcurrencyConflictError(
                    preference.user_id,
                    preference.exercise_name,
                    expected_version,
                    current_version,
                )
            saved = preference.model_copy(update={"version": (expected_version or 0) + 1})
            self._rows[key] = saved
            return saved

    def list_for_user(self, user_id: str) -> List[ExercisePreference]:
        with self._lock:
            rows = [p for (uid, _), p in self._rows.items() if uid == user_id]
        return sorted(rows, key=lambda p: p.exercise_name)
