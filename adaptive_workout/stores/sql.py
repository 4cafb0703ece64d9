"""SQLAlchemy 저장소

- feedback_records / exercise_executions: 세션 피드백 이력 (추가 전용, learned 표시만 갱신)
- exercise_preferences: (user_id, exercise_name) 단위 선호도, version 컬럼으로 낙관적 동시성 제어
"""

import logging
from typing import List, Optional
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    create_engine,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
    selectinload,
    sessionmaker,
)
from sqlalchemy.pool import StaticPool

from adaptive_workout.models import ExerciseExecution, ExercisePreference, FeedbackRecord
from adaptive_workout.exceptions import ConcurrencyConflictError, DuplicateSessionError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all database models."""


class FeedbackRow(Base):
    """세션 피드백"""

    __tablename__ = "feedback_records"

    session_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    completion_rate: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    overall_difficulty: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    satisfaction: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    energy_after: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    muscle_soreness: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    would_repeat: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    comments: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    executions: Mapped[List["ExecutionRow"]] = relationship(
        back_populates="feedback",
        order_by="ExecutionRow.position",
        cascade="all, delete-orphan",
    )


class ExecutionRow(Base):
    """운동 실행 기록"""

    __tablename__ = "exercise_executions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(
        ForeignKey("feedback_records.session_id"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    exercise_name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    planned_sets: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    completed_sets: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    planned_reps: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    completed_reps: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    planned_duration_seconds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    actual_duration_seconds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    perceived_exertion: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    reported_completion_rate: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    form_accuracy: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    performed_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    learned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    feedback: Mapped[FeedbackRow] = relationship(back_populates="executions")


class PreferenceRow(Base):
    """사용자 운동 선호도"""

    __tablename__ = "exercise_preferences"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    exercise_name: Mapped[str] = mapped_column(String(100), primary_key=True)
    preference_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    effectiveness_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.5)
    data_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_performed: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)


_EXECUTION_FIELDS = (
    "exercise_name",
    "planned_sets",
    "completed_sets",
    "planned_reps",
    "completed_reps",
    "planned_duration_seconds",
    "actual_duration_seconds",
    "perceived_exertion",
    "reported_completion_rate",
    "form_accuracy",
)

_FEEDBACK_FIELDS = (
    "completion_rate",
    "overall_difficulty",
    "satisfaction",
    "energy_after",
    "muscle_soreness",
    "would_repeat",
    "comments",
)


def create_sql_engine(database_url: str) -> Engine:
    """DB 엔진 생성 (sqlite 인메모리는 연결 1개를 공유)"""
    in_memory = database_url == "sqlite://" or (
        database_url.startswith("sqlite") and ":memory:" in database_url
    )
    if in_memory:
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, pool_pre_ping=True)


def _to_execution(row: ExecutionRow) -> ExerciseExecution:
    values = {name: getattr(row, name) for name in _EXECUTION_FIELDS}
    return ExerciseExecution(performed_at=row.performed_at, **values)


def _to_record(row: FeedbackRow) -> FeedbackRecord:
    values = {name: getattr(row, name) for name in _FEEDBACK_FIELDS}
    return FeedbackRecord(
        session_id=row.session_id,
        user_id=row.user_id,
        timestamp=row.timestamp,
        executions=[_to_execution(e) for e in row.executions],
        **values,
    )


def _to_preference(row: PreferenceRow) -> ExercisePreference:
    return ExercisePreference(
        user_id=row.user_id,
        exercise_name=row.exercise_name,
        preference_score=row.preference_score,
        effectiveness_score=row.effectiveness_score,
        data_points=row.data_points,
        last_performed=row.last_performed,
        version=row.version,
    )


class SqlFeedbackStore:
    """SQLAlchemy 피드백 저장소"""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        Base.metadata.create_all(engine)

    def add_feedback(self, record: FeedbackRecord) -> None:
        row = FeedbackRow(
            session_id=record.session_id,
            user_id=record.user_id,
            timestamp=record.timestamp,
            **{name: getattr(record, name) for name in _FEEDBACK_FIELDS},
        )
        for position, execution in enumerate(record.executions):
            row.executions.append(
                ExecutionRow(
                    user_id=record.user_id,
                    position=position,
                    performed_at=execution.performed_at or record.timestamp,
                    **{name: getattr(execution, name) for name in _EXECUTION_FIELDS},
                )
            )

        with self._session_factory() as session:
            session.add(row)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                raise DuplicateSessionError(record.session_id)
        logger.debug(f"피드백 저장: user={record.user_id}, session={record.session_id}")

    def list_recent_feedback(self, user_id: str, since: datetime) -> List[FeedbackRecord]:
        stmt = (
            select(FeedbackRow)
            .where(FeedbackRow.user_id == user_id, FeedbackRow.timestamp >= since)
            .options(selectinload(FeedbackRow.executions))
            .order_by(FeedbackRow.timestamp.asc())
        )
        with self._session_factory() as session:
            return [_to_record(row) for row in session.scalars(stmt)]

    def list_recent_executions(
        self, user_id: str, exercise_name: str, since: datetime
    ) -> List[ExerciseExecution]:
        stmt = (
            select(ExecutionRow)
            .where(
                ExecutionRow.user_id == user_id,
                ExecutionRow.exercise_name == exercise_name,
                ExecutionRow.performed_at >= since,
            )
            .order_by(ExecutionRow.performed_at.desc(), ExecutionRow.id.desc())
        )
        with self._session_factory() as session:
            return [_to_execution(row) for row in session.scalars(stmt)]

    def list_recent_exercise_names(self, user_id: str, limit: int) -> List[str]:
        stmt = (
            select(ExecutionRow.exercise_name)
            .where(ExecutionRow.user_id == user_id)
            .order_by(ExecutionRow.performed_at.desc(), ExecutionRow.id.desc())
            .limit(limit)
        )
        with self._session_factory() as session:
            return list(session.scalars(stmt))

    def get_feedback(self, session_id: str) -> Optional[FeedbackRecord]:
        with self._session_factory() as session:
            row = session.get(FeedbackRow, session_id)
            return _to_record(row) if row is not None else None

    def pending_executions(self, session_id: str) -> List[int]:
        stmt = (
            select(ExecutionRow.position)
            .where(ExecutionRow.session_id == session_id, ExecutionRow.learned.is_(False))
            .order_by(ExecutionRow.position)
        )
        with self._session_factory() as session:
            return list(session.scalars(stmt))

    def mark_learned(self, session_id: str, position: int) -> None:
        with self._session_factory() as session:
            session.execute(
                update(ExecutionRow)
                .where(ExecutionRow.session_id == session_id, ExecutionRow.position == position)
                .values(learned=True)
            )
            session.commit()


class SqlPreferenceStore:
    """SQLAlchemy 선호도 저장소

    - 신규 행: INSERT, 기본키 충돌(IntegrityError)은 동시 생성으로 보고 충돌 처리
    - 기존 행: UPDATE ... WHERE version = expected, 갱신 행이 없으면 충돌 처리
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        Base.metadata.create_all(engine)

    def get(self, user_id: str, exercise_name: str) -> Optional[ExercisePreference]:
        with self._session_factory() as session:
            row = session.get(PreferenceRow, (user_id, exercise_name))
            return _to_preference(row) if row is not None else None

    def upsert(
        self, preference: ExercisePreference, expected_version: Optional[int]
    ) -> ExercisePreference:
        values = {
            "preference_score": preference.preference_score,
            "effectiveness_score": preference.effectiveness_score,
            "data_points": preference.data_points,
            "last_performed": preference.last_performed,
        }

        with self._session_factory() as session:
            if expected_version is None:
                session.add(
                    PreferenceRow(
                        user_id=preference.user_id,
                        exercise_name=preference.exercise_name,
                        version=1,
                        **values,
                    )
                )
                try:
                    session.commit()
                except IntegrityError:
                    session.rollback()
                    raise ConcurrencyConflictError(
                        preference.user_id, preference.exercise_name, expected_version
                    )
                new_version = 1
            else:
                new_version = expected_version + 1
                result = session.execute(
                    update(PreferenceRow)
                    .where(
                        PreferenceRow.user_id == preference.user_id,
                        PreferenceRow.exercise_name == preference.exercise_name,
                        PreferenceRow.version == expected_version,
                    )
                    .values(version=new_version, **values)
                )
                if result.rowcount != 1:
                    session.rollback()
                    raise ConcurrencyConflictError(
                        preference.user_id, preference.exercise_name, expected_version
                    )
                session.commit()

        return preference.model_copy(update={"version": new_version})

    def list_for_user(self, user_id: str) -> List[ExercisePreference]:
        stmt = (
            select(PreferenceRow)
            .where(PreferenceRow.user_id == user_id)
            .order_by(PreferenceRow.exercise_name)
        )
        with self._session_factory() as session:
            return [_to_preference(row) for row in session.scalars(stmt)]
