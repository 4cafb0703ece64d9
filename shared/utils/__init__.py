"""Shared utilities"""

from .logging import get_logger
from .clock import utcnow, to_naive_utc
from .numeric import (
    clamp,
    mean_or,
    weighted_mean_or,
    recency_weight,
    round_half_up,
    optional_clamp,
)

__all__ = [
    "get_logger",
    "utcnow",
    "to_naive_utc",
    "clamp",
    "mean_or",
    "weighted_mean_or",
    "recency_weight",
    "round_half_up",
    "optional_clamp",
]
