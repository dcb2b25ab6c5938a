"""Transaction analysis: totals, trailing windows, averages and trends."""
from collections import defaultdict
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional

from .models import (
    AnalysisSnapshot,
    Averages,
    CategoryTrend,
    MonthTrend,
    Timeframes,
    Transaction,
    Trends,
    UserProfile,
    to_money,
)
from finadvisor.utils.logger import get_logger

logger = get_logger()

SECONDS_PER_DAY = Decimal(24 * 60 * 60)
TRAILING_WINDOWS = {
    "last_7_days": 7,
    "last_30_days": 30,
    "last_90_days": 90,
    "last_year": 365,
}
CATEGORY_TREND_DAYS = 90


def analyze(
    transactions: Iterable[Transaction],
    profile: Optional[UserProfile] = None,
    now: Optional[datetime] = None
) -> AnalysisSnapshot:
    """
    Build the analysis snapshot for one user.

    Args:
        transactions: Expense records, in any order
        profile: User profile; absent fields are treated as unknown
        now: Anchor for the trailing windows, defaults to the current time

    Returns:
        AnalysisSnapshot with every currency figure rounded to 2 decimals
    """
    transactions = list(transactions)
    profile = profile or UserProfile()
    now = now or datetime.now()

    if not transactions:
        logger.info("No transactions to analyze, returning empty snapshot")
        return AnalysisSnapshot(generated_at=now, profile=profile)

    total_spent = sum((txn.amount for txn in transactions), Decimal("0"))

    breakdown = defaultdict(Decimal)
    for txn in transactions:
        breakdown[txn.category] += txn.amount

    monthly = monthly_totals(transactions)
    daily = total_spent / span_in_days(transactions)
    recent_cutoff = now - timedelta(hours=24)

    snapshot = AnalysisSnapshot(
        generated_at=now,
        profile=profile,
        total_expenses=len(transactions),
        total_spent=to_money(total_spent),
        category_breakdown={cat: to_money(amount) for cat, amount in sorted(breakdown.items())},
        monthly_totals={month: to_money(amount) for month, amount in monthly.items()},
        timeframes=_timeframes(transactions, now),
        averages=Averages(
            daily=to_money(daily),
            weekly=to_money(daily * 7),
            monthly=to_money(daily * 30)
        ),
        trends=Trends(
            month_over_month=month_over_month(monthly),
            category_trends=category_trends(transactions, now)
        ),
        transactions_last_24h=sum(1 for txn in transactions if txn.date >= recent_cutoff)
    )

    logger.info(
        f"Analyzed {snapshot.total_expenses} transactions across "
        f"{len(snapshot.category_breakdown)} categories and {len(monthly)} months"
    )
    return snapshot


def span_in_days(transactions: List[Transaction]) -> int:
    """Whole days between the earliest and latest transaction, at least 1."""
    dates = [txn.date for txn in transactions]
    seconds = Decimal(str((max(dates) - min(dates)).total_seconds()))
    days = int((seconds / SECONDS_PER_DAY).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return max(1, days)


def monthly_totals(transactions: Iterable[Transaction]) -> Dict[str, Decimal]:
    """Sum spend per calendar month, keyed YYYY-MM in ascending order."""
    totals = defaultdict(Decimal)
    for txn in transactions:
        totals[txn.date.strftime("%Y-%m")] += txn.amount
    return dict(sorted(totals.items()))


def month_over_month(monthly: Dict[str, Decimal]) -> tuple:
    """Percent change of each month against the one before it."""
    months = list(monthly)
    trend = []
    for previous, current in zip(months, months[1:]):
        prev_amount = monthly[previous]
        curr_amount = monthly[current]
        if prev_amount == 0:
            change = None
        else:
            change = to_money((curr_amount - prev_amount) / prev_amount * 100)
        trend.append(MonthTrend(month=current, amount=to_money(curr_amount), change_percent=change))
    return tuple(trend)


def category_trends(transactions: Iterable[Transaction], now: datetime) -> Dict[str, CategoryTrend]:
    """Per-category totals, counts and shares over the trailing 90 days."""
    cutoff = now - timedelta(days=CATEGORY_TREND_DAYS)
    totals = defaultdict(Decimal)
    counts = defaultdict(int)
    for txn in transactions:
        if txn.date >= cutoff:
            totals[txn.category] += txn.amount
            counts[txn.category] += 1

    recent_total = sum(totals.values(), Decimal("0"))
    trends = {}
    for category in sorted(totals):
        if recent_total:
            percentage = to_money(totals[category] / recent_total * 100)
        else:
            percentage = to_money(0)
        trends[category] = CategoryTrend(
            total=to_money(totals[category]),
            count=counts[category],
            percentage=percentage
        )
    return trends


def _timeframes(transactions: List[Transaction], now: datetime) -> Timeframes:
    sums = {}
    for name, days in TRAILING_WINDOWS.items():
        cutoff = now - timedelta(days=days)
        sums[name] = to_money(sum((txn.amount for txn in transactions if txn.date >= cutoff), Decimal("0")))
    return Timeframes(**sums)


