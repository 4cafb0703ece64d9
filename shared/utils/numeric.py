"""수치 계산 유틸리티 (공유)"""

import math
from typing import Iterable, Optional, Sequence, Tuple


def clamp(value: float, lower: float, upper: float) -> float:
    """value를 [lower, upper] 범위로 제한"""
    if math.isnan(value):
        return lower
    return max(lower, min(upper, value))


def mean_or(values: Iterable[float], default: float) -> float:
    """평균 (값이 없으면 기본값)"""
    items = list(values)
    if not items:
        return default
    return sum(items) / len(items)


def weighted_mean_or(pairs: Sequence[Tuple[float, float]], default: float) -> float:
    """(값, 가중치) 쌍의 가중 평균 (가중치 합이 0이면 기본값)"""
    total_weight = sum(weight for _, weight in pairs)
    if total_weight <= 0:
        return default
    return sum(value * weight for value, weight in pairs) / total_weight


def recency_weight(index: int, decay: float) -> float:
    """최신순 index에 대한 가중치 1 / (1 + index * decay)"""
    return 1.0 / (1.0 + index * decay)


def round_half_up(value: float) -> int:
    """0.5를 올림하는 반올림 (파이썬 기본 round는 짝수 반올림)"""
    return int(math.floor(value + 0.5))


def optional_clamp(value: Optional[float], lower: float, upper: float) -> Optional[float]:
    """None은 그대로, 값은 범위 제한"""
    if value is None:
        return None
    return clamp(float(value), lower, upper)
