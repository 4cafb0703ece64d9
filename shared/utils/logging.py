"""공유 로깅 유틸리티"""

import logging
import sys
from typing import Optional, Union

LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(level: Optional[Union[int, str]]) -> int:
    """문자열/정수 로그 레벨을 logging 상수로 변환"""
    if level is None:
        return logging.INFO
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def get_logger(name: str, level: Optional[Union[int, str]] = None) -> logging.Logger:
    """로거 인스턴스 반환

    핸들러는 로거당 한 번만 붙인다. 하위 모듈 로거
    (예: adaptive_workout.services.*)는 전파로 같은 핸들러를 쓴다.

    Args:
        name: 로거 이름
        level: 로그 레벨 (기본값: INFO, "DEBUG" 같은 문자열 허용)

    Returns:
        logging.Logger 인스턴스
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    logger.setLevel(_resolve_level(level))
    return logger
