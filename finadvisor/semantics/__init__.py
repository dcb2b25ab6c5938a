"""Question classification module."""
from .models import ClassificationBundle, QueryComplexity, QUESTION_TYPES
from .classifier import classify, needs_realtime_data, assess_complexity

__all__ = [
    "ClassificationBundle",
    "QueryComplexity",
    "QUESTION_TYPES",
    "classify",
    "needs_realtime_data",
    "assess_complexity",
]
