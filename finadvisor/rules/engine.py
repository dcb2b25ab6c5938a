"""Heuristic financial rules applied to an analysis snapshot."""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, List, Optional, Sequence

from .models import Alert, Recommendation, RuleOutput, SEVERITY_ORDER, SEVERITY_PENALTIES
from finadvisor.analysis.models import AnalysisSnapshot, BudgetStatus, UserProfile, format_money
from finadvisor.utils.logger import get_logger

logger = get_logger()

MAX_RECOMMENDATIONS = 5
BASE_HEALTH_SCORE = 80
MAX_INSIGHT_BONUS = 15


def _pct(value: Decimal, places: int = 1) -> Decimal:
    return Decimal(value).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


@dataclass
class _Findings:
    """Accumulator shared by the rules of one evaluation."""
    snapshot: AnalysisSnapshot
    profile: UserProfile
    budgets: Optional[Sequence[BudgetStatus]]
    alerts: List[Alert] = field(default_factory=list)
    insights: List[str] = field(default_factory=list)
    recommendations: List[Recommendation] = field(default_factory=list)

    def money(self, value) -> str:
        return format_money(value, self.profile.currency, places=2)


def _trend_rule(f: _Findings) -> None:
    trend = f.snapshot.trends.month_over_month
    if len(trend) < 2:
        return
    if trend[-1].change_percent is None:
        return
    change = trend[-1].change_percent
    shown = _pct(change)

    if change > 20:
        f.alerts.append(Alert(
            type="SPENDING_INCREASE",
            severity="high",
            message=f"Your spending increased by {shown}% this month. Review your expenses."
        ))
        f.insights.append(f"Spending surge detected: +{shown}% vs. previous month")
    elif change < -15:
        f.insights.append(f"Great job! You reduced spending by {abs(shown)}% this month.")
        f.recommendations.append(Recommendation(
            priority="low",
            title="Maintain Momentum",
            description="Keep up the good work! You've reduced your spending. Continue this pattern."
        ))


def _budget_health_rule(f: _Findings) -> None:
    if not f.profile.has_income:
        return
    monthly_income = f.profile.monthly_income
    monthly_expenses = f.snapshot.averages.monthly
    ratio = monthly_expenses / monthly_income
    savings_rate = _pct((monthly_income - monthly_expenses) / monthly_income * 100)
    ratio_pct = _pct(ratio * 100)

    if ratio > Decimal("0.9"):
        f.alerts.append(Alert(
            type="HIGH_SPENDING_RATIO",
            severity="critical",
            message=f"You're spending {ratio_pct}% of your monthly income. Increase savings."
        ))
    elif ratio > Decimal("0.75"):
        f.alerts.append(Alert(
            type="ELEVATED_SPENDING",
            severity="medium",
            message=f"You're spending {ratio_pct}% of monthly income. Consider cutting back."
        ))
        f.insights.append(f"Your savings rate is approximately {savings_rate}%")
    elif ratio < Decimal("0.6"):
        f.insights.append(
            f"Excellent savings rate! You're saving approximately {savings_rate}% of your income."
        )
        f.recommendations.append(Recommendation(
            priority="low",
            title="Invest Your Savings",
            description="Consider investing your savings to build long-term wealth and achieve your financial goals."
        ))


def _category_rule(f: _Findings) -> None:
    breakdown = f.snapshot.category_breakdown
    total = f.snapshot.total_spent
    if not breakdown or total <= 0:
        return

    ranked = f.snapshot.top_categories(len(breakdown))
    top_category, top_amount = ranked[0]
    top_share = top_amount / total * 100
    if top_share > 40:
        f.alerts.append(Alert(
            type="DOMINANT_CATEGORY",
            severity="medium",
            message=f"{top_category} accounts for {_pct(top_share)}% of your spending. Consider optimizing."
        ))

    mean_spend = total / len(breakdown)
    for category, amount in ranked:
        if amount > mean_spend * 2:
            f.recommendations.append(Recommendation(
                priority="medium",
                title=f"Review {category.capitalize()} Spending",
                description=(
                    f"Your {category} expenses ({f.money(amount)}) are significantly higher than "
                    f"average. Look for optimization opportunities."
                )
            ))


def _spike_rule(f: _Findings) -> None:
    last_7_average = f.snapshot.timeframes.last_7_days / 7
    last_30_average = f.snapshot.timeframes.last_30_days / 30
    if last_30_average <= 0:
        return
    if last_7_average > last_30_average * Decimal("1.3"):
        over = _pct(last_7_average / last_30_average * 100 - 100)
        f.alerts.append(Alert(
            type="SPIKE_DETECTED",
            severity="medium",
            message=f"Recent spending is {over}% above your monthly average. Check your recent transactions."
        ))


def _emergency_fund_rule(f: _Findings) -> None:
    if f.profile.savings is None or not f.profile.has_income:
        return
    monthly_expenses = f.snapshot.averages.monthly
    if monthly_expenses <= 0:
        return

    months = f.profile.savings / monthly_expenses
    shown = _pct(months)
    if months < 3:
        f.alerts.append(Alert(
            type="LOW_EMERGENCY_FUND",
            severity="high",
            message=f"Your emergency fund ({shown} months of expenses) is below recommended 3-6 months."
        ))
        f.recommendations.append(Recommendation(
            priority="high",
            title="Build Emergency Fund",
            description=f"Aim to save 3-6 months of expenses. Currently at {shown} months."
        ))
    elif months >= 6:
        f.insights.append(f"Strong emergency fund! You have {shown} months of expenses saved.")


def _goals_rule(f: _Findings) -> None:
    goals = f.profile.goals
    if not goals:
        return
    f.insights.append(f"Active goals: {', '.join(goals)}")
    f.recommendations.append(Recommendation(
        priority="medium",
        title="Track Goal Progress",
        description=f"Monitor your {goals[0]} goal. Allocate part of your savings towards it."
    ))


def _frequency_rule(f: _Findings) -> None:
    recent = f.snapshot.transactions_last_24h
    if f.snapshot.total_expenses > 10 and recent > 5:
        f.insights.append(
            f"You recorded {recent} expenses recently. Stay mindful of frequent small purchases."
        )


def _budget_status_rule(f: _Findings) -> None:
    if not f.budgets:
        f.recommendations.append(Recommendation(
            priority="high",
            title="Set Up Budgets",
            description=(
                "Create category budgets to track spending and prevent overspending. "
                "Start with your highest spending categories."
            )
        ))
        return

    for budget in f.budgets:
        if budget.status == "exceeded":
            f.alerts.append(Alert(
                type="BUDGET_EXCEEDED",
                severity="high",
                message=(
                    f"You've exceeded your {budget.category} budget by "
                    f"{f.money(budget.spent - budget.budget_amount)}. Review your spending."
                )
            ))
        elif budget.status == "warning":
            f.alerts.append(Alert(
                type="BUDGET_WARNING",
                severity="medium",
                message=(
                    f"You're at {budget.percentage}% of your {budget.category} budget. "
                    f"Consider reducing spending in this category."
                )
            ))
        if budget.percentage < 50:
            f.insights.append(
                f"Great job staying under budget for {budget.category} ({budget.percentage}% used)"
            )

    f.recommendations.append(Recommendation(
        priority="medium",
        title="Monitor Budgets",
        description=(
            f"You have {len(f.budgets)} active budget(s). "
            f"Regular monitoring helps maintain financial discipline."
        )
    ))


# Evaluation order is fixed; each rule reads the snapshot, not earlier rules' output
RULES: List[Callable[[_Findings], None]] = [
    _trend_rule,
    _budget_health_rule,
    _category_rule,
    _spike_rule,
    _emergency_fund_rule,
    _goals_rule,
    _frequency_rule,
    _budget_status_rule,
]


def apply_rules(
    snapshot: AnalysisSnapshot,
    profile: Optional[UserProfile] = None,
    budgets: Optional[Sequence[BudgetStatus]] = None
) -> RuleOutput:
    """
    Evaluate every rule against a snapshot.

    Args:
        snapshot: Output of the analyzer
        profile: User profile, defaults to the one carried by the snapshot
        budgets: Current budget statuses, if the user has any

    Returns:
        RuleOutput with severity-ordered alerts, deduplicated insights,
        at most five recommendations and a 0-100 health score
    """
    profile = profile or snapshot.profile
    findings = _Findings(snapshot=snapshot, profile=profile, budgets=budgets)
    for rule in RULES:
        rule(findings)

    insights = tuple(dict.fromkeys(findings.insights))
    alerts = tuple(sorted(findings.alerts, key=lambda alert: SEVERITY_ORDER[alert.severity]))

    output = RuleOutput(
        alerts=alerts,
        insights=insights,
        recommendations=tuple(findings.recommendations[:MAX_RECOMMENDATIONS]),
        health_score=health_score(alerts, insights, profile),
        recommendations_generated=len(findings.recommendations)
    )

    logger.info(
        f"Rules produced {len(output.alerts)} alerts, {len(output.insights)} insights, "
        f"{len(output.recommendations)} recommendations (health score {output.health_score})"
    )
    return output


def health_score(alerts: Sequence[Alert], insights: Sequence[str], profile: UserProfile) -> int:
    """Composite 0-100 wellness score."""
    score = BASE_HEALTH_SCORE
    for alert in alerts:
        score -= SEVERITY_PENALTIES.get(alert.severity, 0)
    score += min(len(insights) * 2, MAX_INSIGHT_BONUS)
    if profile.has_income:
        score += 5
    if profile.goals:
        score += 5
    return max(0, min(100, score))
