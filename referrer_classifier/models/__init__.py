"""Data models for the referrer classifier."""

from .definition import (
    LiteralParam,
    PatternParam,
    ParamRule,
    SearchEngineDefinition,
)
from .response import MatchResult, ResolvedHost

__all__ = [
    "LiteralParam",
    "PatternParam",
    "ParamRule",
    "SearchEngineDefinition",
    "MatchResult",
    "ResolvedHost",
]
