"""Budget utilisation for the current budget period."""
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional

from .models import Budget, BudgetStatus, Transaction, to_money
from finadvisor.utils.logger import get_logger

logger = get_logger()

STATUS_OK = "ok"
STATUS_WARNING = "warning"
STATUS_EXCEEDED = "exceeded"


def period_start(period: str, now: datetime) -> datetime:
    """
    First instant counted towards a budget period.

    Weekly budgets use a trailing 7-day window; monthly and yearly budgets
    start at the calendar month or year containing now.
    """
    if period == "weekly":
        return now - timedelta(days=7)
    if period == "yearly":
        return now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def budget_status(budget: Budget, transactions: Iterable[Transaction], now: datetime) -> BudgetStatus:
    """Compute spent, remaining and status for one budget."""
    start = period_start(budget.period, now)
    spent = sum(
        (txn.amount for txn in transactions if txn.category == budget.category and txn.date >= start),
        Decimal("0")
    )

    if budget.amount > 0:
        percentage = (spent / budget.amount * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    else:
        percentage = Decimal("0.0")

    warning_threshold = min(budget.thresholds) if budget.thresholds else 80
    if percentage >= 100:
        status = STATUS_EXCEEDED
    elif percentage >= warning_threshold and spent > 0:
        status = STATUS_WARNING
    else:
        status = STATUS_OK

    return BudgetStatus(
        category=budget.category,
        budget_amount=to_money(budget.amount),
        spent=to_money(spent),
        remaining=to_money(budget.amount - spent),
        percentage=percentage,
        status=status,
        period=budget.period,
        period_start=start
    )


def compute_budget_statuses(
    budgets: Iterable[Budget],
    transactions: Iterable[Transaction],
    now: Optional[datetime] = None
) -> List[BudgetStatus]:
    """
    Compute statuses for all active budgets.

    Args:
        budgets: Budget definitions; inactive ones are ignored
        transactions: The user's expense records
        now: Reference time, defaults to the current time

    Returns:
        List of BudgetStatus in budget order
    """
    now = now or datetime.now()
    transactions = list(transactions)
    statuses = [budget_status(budget, transactions, now) for budget in budgets if budget.active]

    flagged = sum(1 for status in statuses if status.status != STATUS_OK)
    logger.debug(f"Computed {len(statuses)} budget statuses, {flagged} flagged")
    return statuses
