"""Data models for rule evaluation."""
from dataclasses import dataclass
from typing import Tuple

SEVERITY_ORDER = {"critical": 0, "high": 1, "medium": 2, "low": 3}
SEVERITY_PENALTIES = {"critical": 20, "high": 15, "medium": 10, "low": 5}


@dataclass(frozen=True)
class Alert:
    type: str
    severity: str  # critical | high | medium | low
    message: str


@dataclass(frozen=True)
class Recommendation:
    priority: str  # high | medium | low
    title: str
    description: str


@dataclass(frozen=True)
class RuleOutput:
    """Alerts, insights, recommendations and health score for one snapshot."""
    alerts: Tuple[Alert, ...]
    insights: Tuple[str, ...]
    recommendations: Tuple[Recommendation, ...]
    health_score: int
    recommendations_generated: int = 0

    @property
    def risk_profile(self) -> str:
        """Risk appetite descriptor derived from the health score."""
        return "moderate" if self.health_score > 70 else "conservative"
