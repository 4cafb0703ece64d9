"""Shared models"""

from .user import UserContext, ExperienceLevel

__all__ = [
    "UserContext",
    "ExperienceLevel",
]
