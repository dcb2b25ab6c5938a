"""Transaction analysis module."""
from .models import (
    CATEGORIES,
    Transaction,
    UserProfile,
    Budget,
    BudgetStatus,
    AnalysisSnapshot,
    transactions_from_records,
    profile_from_record,
    budgets_from_records,
    local_naive,
)
from .analyzer import analyze
from .budgets import compute_budget_statuses
from .cache import SnapshotCache

__all__ = [
    "CATEGORIES",
    "Transaction",
    "UserProfile",
    "Budget",
    "BudgetStatus",
    "AnalysisSnapshot",
    "transactions_from_records",
    "profile_from_record",
    "budgets_from_records",
    "local_naive",
    "analyze",
    "compute_budget_statuses",
    "SnapshotCache",
]
