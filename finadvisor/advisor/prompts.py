"""Prompt and system-role construction for the generation collaborator."""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from .models import STRATEGY_FINANCE, STRATEGY_REALTIME
from finadvisor.analysis.models import AnalysisSnapshot, format_money
from finadvisor.rules.models import RuleOutput

WEB_SEARCH_ROLE = """You are a financial research assistant with real-time web access.

TASK: Search the web and provide CURRENT, LIVE data for the user's query.

FOR STOCK PRICES:
- Search for the current price from the relevant exchange (NSE/BSE, NASDAQ/NYSE)
- Include the current price, today's change (%) and the day's high/low
- Mention the time of the data

FOR MARKET NEWS:
- Get the latest news and updates
- Include dates and sources

FORMATTING:
- Use clear markdown headers
- Bold important numbers
- Always cite your sources"""

FINANCE_ROLE = """You are an expert personal financial advisor in the FinAdvisor app.
You have access to the user's real financial data provided below.

HOW TO RESPOND:
1. First, directly answer what the user asked
2. Then, relate it to their personal financial situation with specific numbers
3. Give actionable advice with exact amounts from their data
4. For stocks and investments, check the fit against their monthly surplus
   and give pros and cons specific to their situation

FORMATTING:
- Use proper markdown with ## headers
- Bold important numbers
- Use consistent bullet points (-)"""

GENERAL_ROLE = """You are a knowledgeable AI assistant in the FinAdvisor app.
Answer the user's question directly and thoroughly.
Use markdown formatting for clarity."""

REALTIME_INSTRUCTIONS = """Please search the web for the current/live data and provide accurate, up-to-date information.
For Indian stocks, check NSE/BSE. For US stocks, check NASDAQ/NYSE.
Include the current price, today's change, and the time of the data."""

SYSTEM_ROLES = {
    STRATEGY_REALTIME: WEB_SEARCH_ROLE,
    STRATEGY_FINANCE: FINANCE_ROLE,
}


def system_role(strategy: str) -> str:
    return SYSTEM_ROLES.get(strategy, GENERAL_ROLE)


def build_prompt(
    strategy: str,
    question: str,
    snapshot: Optional[AnalysisSnapshot] = None,
    rule_output: Optional[RuleOutput] = None,
    top_categories: int = 3
) -> str:
    """
    Build the user prompt for a dispatch strategy.

    Only the finance strategy embeds the user's financial context; the
    realtime and general strategies send the question alone.
    """
    if strategy == STRATEGY_REALTIME:
        return f"{question}\n\n{REALTIME_INSTRUCTIONS}"

    if strategy != STRATEGY_FINANCE or snapshot is None or rule_output is None:
        return question

    context = build_finance_context(snapshot, rule_output, top_categories)
    return f"""{context}

USER'S QUESTION:
"{question}"

INSTRUCTIONS:
1. Answer the user's question directly
2. Analyze how it applies to their specific financial situation
3. If about investments, say whether the monthly surplus covers it and what share
   of the surplus is safe to invest (usually 10-20%)
4. Give specific actionable advice with exact amounts
5. Use clear headers and bullet points"""


def build_finance_context(snapshot: AnalysisSnapshot, rule_output: RuleOutput, top_categories: int = 3) -> str:
    """Render the user's financial data block from the snapshot and rule output."""
    profile = snapshot.profile
    currency = profile.currency
    monthly_income = profile.monthly_income
    monthly_expenses = snapshot.averages.monthly

    if monthly_income is not None:
        surplus = format_money(monthly_income - monthly_expenses, currency)
        rate = ((monthly_income - monthly_expenses) / monthly_income * 100).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP
        )
        savings_rate = f"{rate}%"
    else:
        surplus = "Not provided"
        savings_rate = "Not provided"

    top = ", ".join(
        f"{category}: {format_money(amount, currency)}"
        for category, amount in snapshot.top_categories(top_categories)
    ) or "No spending recorded"

    lines = [
        "USER'S FINANCIAL DATA:",
        f"- Monthly Income: {format_money(monthly_income, currency)}",
        f"- Monthly Expenses: {format_money(monthly_expenses, currency)}",
        f"- Monthly Surplus (Available to Save/Invest): {surplus}",
        f"- Current Savings: {format_money(profile.savings, currency)}",
        f"- Savings Rate: {savings_rate}",
        f"- Financial Health Score: {rule_output.health_score}/100",
        f"- Risk Profile: {rule_output.risk_profile}",
        f"- Top Spending: {top}",
        f"- User's Goals: {', '.join(profile.goals) or 'Not specified'}",
        "",
        format_snapshot_summary(snapshot),
        "",
        format_rule_summary(rule_output),
    ]
    return "\n".join(lines)


def format_snapshot_summary(snapshot: AnalysisSnapshot) -> str:
    """Short text summary of the analysis snapshot."""
    currency = snapshot.profile.currency
    if snapshot.is_empty:
        return "SPENDING SUMMARY: No transactions recorded yet."

    lines = [
        "SPENDING SUMMARY:",
        f"- Total Spent: {format_money(snapshot.total_spent, currency)} "
        f"across {snapshot.total_expenses} transactions",
        f"- Averages: {format_money(snapshot.averages.daily, currency)}/day, "
        f"{format_money(snapshot.averages.weekly, currency)}/week, "
        f"{format_money(snapshot.averages.monthly, currency)}/month",
        f"- Last 7 Days: {format_money(snapshot.timeframes.last_7_days, currency)}, "
        f"Last 30 Days: {format_money(snapshot.timeframes.last_30_days, currency)}",
    ]
    if snapshot.trends.month_over_month:
        latest = snapshot.trends.month_over_month[-1]
        if latest.change_percent is not None:
            lines.append(f"- {latest.month} vs previous month: {latest.change_percent:+}%")
    return "\n".join(lines)


def format_rule_summary(rule_output: RuleOutput, limit: int = 3) -> str:
    """Health score plus the leading alerts, insights and recommendations."""
    lines = [f"FINANCIAL HEALTH: {rule_output.health_score}/100"]
    if rule_output.alerts:
        lines.append("ALERTS:")
        lines.extend(f"- [{alert.severity}] {alert.message}" for alert in rule_output.alerts[:limit])
    if rule_output.insights:
        lines.append("INSIGHTS:")
        lines.extend(f"- {insight}" for insight in rule_output.insights[:limit])
    if rule_output.recommendations:
        lines.append("RECOMMENDATIONS:")
        lines.extend(
            f"- {rec.title}: {rec.description}" for rec in rule_output.recommendations[:limit]
        )
    return "\n".join(lines)
