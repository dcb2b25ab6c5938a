"""Data models for question classification."""
from dataclasses import dataclass
from typing import Tuple

QUESTION_TYPES = ("educational", "comparative", "advisory", "calculative", "planning", "general")


@dataclass(frozen=True)
class ClassificationBundle:
    """What a free-text question is asking."""
    question: str
    question_type: str
    intents: Tuple[str, ...]
    topics: Tuple[str, ...]
    concepts: Tuple[str, ...]
    confidence: float
    is_personal_finance: bool

    def has_topic(self, topic: str) -> bool:
        return topic in self.topics

    def has_concept(self, *concepts: str) -> bool:
        """True when every given concept was recognized."""
        return all(concept in self.concepts for concept in concepts)


@dataclass(frozen=True)
class QueryComplexity:
    length: int
    has_numbers: bool
    has_comparisons: bool
    has_technical_terms: bool
    estimated: str  # low | medium | high
