"""Adaptive Workout Stores"""

import logging
from typing import Optional, Tuple

from adaptive_workout.config import settings

from .base import FeedbackStore, PreferenceStore
from .memory import InMemoryFeedbackStore, InMemoryPreferenceStore
from .sql import SqlFeedbackStore, SqlPreferenceStore, create_sql_engine

logger = logging.getLogger(__name__)


def create_stores(database_url: Optional[str] = None) -> Tuple[FeedbackStore, PreferenceStore]:
    """설정에 맞는 저장소 쌍 생성

    Args:
        database_url: SQLAlchemy DB URL (None이면 설정값, 빈 문자열이면 인메모리)

    Returns:
        (피드백 저장소, 선호도 저장소)
    """
    if database_url is None:
        database_url = settings.database_url

    if not database_url:
        logger.info("DATABASE_URL 미설정 - 인메모리 저장소 사용")
        return InMemoryFeedbackStore(), InMemoryPreferenceStore()

    engine = create_sql_engine(database_url)
    logger.info(f"SQL 저장소 사용: {engine.url.render_as_string(hide_password=True)}")
    return SqlFeedbackStore(engine), SqlPreferenceStore(engine)


__all__ = [
    "FeedbackStore",
    "PreferenceStore",
    "InMemoryFeedbackStore",
    "InMemoryPreferenceStore",
    "SqlFeedbackStore",
    "SqlPreferenceStore",
    "create_sql_engine",
    "create_stores",
]
