"""Rule evaluation module."""
from .models import Alert, Recommendation, RuleOutput
from .engine import apply_rules, health_score

__all__ = ["Alert", "Recommendation", "RuleOutput", "apply_rules", "health_score"]
