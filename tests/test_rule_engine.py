"""Tests for rule engine."""
import unittest
from datetime import datetime
from decimal import Decimal

from finadvisor.analysis.models import (
    AnalysisSnapshot,
    Averages,
    BudgetStatus,
    MonthTrend,
    Timeframes,
    Trends,
    UserProfile,
)
from finadvisor.rules import Alert, apply_rules, health_score
from finadvisor.rules.models import SEVERITY_ORDER

NOW = datetime(2025, 6, 30, 12, 0)


def make_snapshot(profile=None, **kwargs) -> AnalysisSnapshot:
    return AnalysisSnapshot(generated_at=NOW, profile=profile or UserProfile(), **kwargs)


def make_status(category, percentage, status, budget_amount="1000"):
    budget_amount = Decimal(budget_amount)
    spent = budget_amount * Decimal(str(percentage)) / 100
    return BudgetStatus(
        category=category,
        budget_amount=budget_amount,
        spent=spent,
        remaining=budget_amount - spent,
        percentage=Decimal(str(percentage)),
        status=status,
        period="monthly",
        period_start=datetime(2025, 6, 1)
    )


def alert_types(output):
    return [alert.type for alert in output.alerts]


def recommendation_titles(output):
    return [rec.title for rec in output.recommendations]


class TestRuleEngine(unittest.TestCase):
    """Test individual rules and post-processing."""

    def test_empty_snapshot(self):
        """Test an empty snapshot only asks the user to set up budgets."""
        output = apply_rules(make_snapshot())

        self.assertEqual(output.alerts, ())
        self.assertEqual(output.insights, ())
        self.assertEqual(recommendation_titles(output), ["Set Up Budgets"])
        self.assertEqual(output.health_score, 80)

    def test_trend_increase(self):
        """Test month-over-month increase above 20%."""
        trends = Trends(month_over_month=(
            MonthTrend("2025-05", Decimal("100"), Decimal("5.00")),
            MonthTrend("2025-06", Decimal("125"), Decimal("25.00")),
        ))

        output = apply_rules(make_snapshot(trends=trends))

        self.assertIn("SPENDING_INCREASE", alert_types(output))
        self.assertEqual(output.alerts[0].severity, "high")
        self.assertIn("Spending surge detected: +25.0% vs. previous month", output.insights)

    def test_trend_decrease(self):
        """Test month-over-month decrease below -15%."""
        trends = Trends(month_over_month=(
            MonthTrend("2025-05", Decimal("100"), Decimal("5.00")),
            MonthTrend("2025-06", Decimal("80"), Decimal("-20.00")),
        ))

        output = apply_rules(make_snapshot(trends=trends))

        self.assertEqual(output.alerts, ())
        self.assertIn("Great job! You reduced spending by 20.0% this month.", output.insights)
        self.assertEqual(recommendation_titles(output)[0], "Maintain Momentum")

    def test_trend_needs_two_months_of_change(self):
        """Test a single month-over-month entry is not enough."""
        trends = Trends(month_over_month=(MonthTrend("2025-06", Decimal("500"), Decimal("400.00")),))

        output = apply_rules(make_snapshot(trends=trends))

        self.assertNotIn("SPENDING_INCREASE", alert_types(output))

    def test_trend_ignores_unknown_change(self):
        """Test a change against a zero month is ignored."""
        trends = Trends(month_over_month=(
            MonthTrend("2025-05", Decimal("0"), Decimal("-100.00")),
            MonthTrend("2025-06", Decimal("125"), None),
        ))

        output = apply_rules(make_snapshot(trends=trends))

        self.assertEqual(output.alerts, ())
        self.assertEqual(output.insights, ())

    def test_trend_just_above_threshold(self):
        """Test a change that rounds down to 20.0% still counts as above 20%."""
        trends = Trends(month_over_month=(
            MonthTrend("2025-05", Decimal("100"), Decimal("5.00")),
            MonthTrend("2025-06", Decimal("120.04"), Decimal("20.04")),
        ))

        output = apply_rules(make_snapshot(trends=trends))

        self.assertIn("SPENDING_INCREASE", alert_types(output))
        self.assertIn("Spending surge detected: +20.0% vs. previous month", output.insights)

    def test_category_share_just_above_threshold(self):
        """Test a 40.04% share raises the dominant category alert."""
        snapshot = make_snapshot(
            total_spent=Decimal("10000"),
            category_breakdown={
                "food": Decimal("4004"),
                "transport": Decimal("3000"),
                "utilities": Decimal("2996"),
            }
        )

        output = apply_rules(snapshot)

        self.assertEqual(alert_types(output), ["DOMINANT_CATEGORY"])
        self.assertIn("food accounts for 40.0%", output.alerts[0].message)

    def test_emergency_fund_just_below_threshold(self):
        """Test 2.96 months of savings is below three months."""
        profile = UserProfile(income=Decimal("600000"), savings=Decimal("2960"))
        snapshot = make_snapshot(profile, averages=Averages(monthly=Decimal("1000")))

        output = apply_rules(snapshot)

        self.assertEqual(alert_types(output), ["LOW_EMERGENCY_FUND"])
        self.assertIn("(3.0 months of expenses)", output.alerts[0].message)
        self.assertIn("Build Emergency Fund", recommendation_titles(output))

    def test_spending_ratio_exactly_at_critical_boundary(self):
        """Test a ratio of exactly 0.9 falls in the medium band."""
        profile = UserProfile(income=Decimal("600000"))
        snapshot = make_snapshot(profile, averages=Averages(monthly=Decimal("45000")))

        output = apply_rules(snapshot)

        self.assertNotIn("HIGH_SPENDING_RATIO", alert_types(output))
        self.assertIn("ELEVATED_SPENDING", alert_types(output))
        self.assertIn("Your savings rate is approximately 10.0%", output.insights)

    def test_spending_ratio_critical(self):
        """Test a ratio above 0.9 raises a critical alert."""
        profile = UserProfile(income=Decimal("600000"))
        snapshot = make_snapshot(profile, averages=Averages(monthly=Decimal("47500")))

        output = apply_rules(snapshot)

        self.assertEqual(output.alerts[0].type, "HIGH_SPENDING_RATIO")
        self.assertEqual(output.alerts[0].severity, "critical")
        self.assertIn("95.0%", output.alerts[0].message)

    def test_spending_ratio_healthy(self):
        """Test a ratio below 0.6 suggests investing."""
        profile = UserProfile(income=Decimal("600000"))
        snapshot = make_snapshot(profile, averages=Averages(monthly=Decimal("25000")))

        output = apply_rules(snapshot)

        self.assertEqual(output.alerts, ())
        self.assertIn(
            "Excellent savings rate! You're saving approximately 50.0% of your income.",
            output.insights
        )
        self.assertIn("Invest Your Savings", recommendation_titles(output))

    def test_spending_ratio_skipped_without_income(self):
        """Test rule is skipped when income is absent."""
        snapshot = make_snapshot(
            total_expenses=2,
            total_spent=Decimal("800"),
            category_breakdown={"food": Decimal("500"), "transport": Decimal("300")},
            averages=Averages(daily=Decimal("800"), weekly=Decimal("5600"), monthly=Decimal("24000"))
        )

        output = apply_rules(snapshot)

        for alert_type in ("HIGH_SPENDING_RATIO", "ELEVATED_SPENDING"):
            self.assertNotIn(alert_type, alert_types(output))

    def test_category_dominance(self):
        """Test dominant category alert and review recommendation."""
        snapshot = make_snapshot(
            total_spent=Decimal("1000"),
            category_breakdown={
                "food": Decimal("700"),
                "other": Decimal("100"),
                "transport": Decimal("100"),
                "utilities": Decimal("100"),
            }
        )

        output = apply_rules(snapshot)

        self.assertEqual(alert_types(output), ["DOMINANT_CATEGORY"])
        self.assertIn("food accounts for 70.0%", output.alerts[0].message)
        self.assertIn("Review Food Spending", recommendation_titles(output))

    def test_spike(self):
        """Test last 7 days running well above the 30 day rate."""
        snapshot = make_snapshot(
            timeframes=Timeframes(last_7_days=Decimal("700"), last_30_days=Decimal("1000"))
        )

        output = apply_rules(snapshot)

        self.assertEqual(alert_types(output), ["SPIKE_DETECTED"])
        self.assertIn("200.0%", output.alerts[0].message)

    def test_low_emergency_fund(self):
        """Test savings under three months of expenses."""
        profile = UserProfile(income=Decimal("600000"), savings=Decimal("50000"))
        snapshot = make_snapshot(profile, averages=Averages(monthly=Decimal("25000")))

        output = apply_rules(snapshot)

        self.assertIn("LOW_EMERGENCY_FUND", alert_types(output))
        self.assertIn("2.0 months", output.alerts[0].message)
        self.assertIn("Build Emergency Fund", recommendation_titles(output))

    def test_zero_savings_is_a_value(self):
        """Test zero savings triggers the emergency fund alert."""
        profile = UserProfile(income=Decimal("600000"), savings=Decimal("0"))
        snapshot = make_snapshot(profile, averages=Averages(monthly=Decimal("25000")))

        self.assertIn("LOW_EMERGENCY_FUND", alert_types(apply_rules(snapshot)))

    def test_strong_emergency_fund(self):
        """Test six or more months of savings."""
        profile = UserProfile(income=Decimal("600000"), savings=Decimal("200000"))
        snapshot = make_snapshot(profile, averages=Averages(monthly=Decimal("25000")))

        output = apply_rules(snapshot)

        self.assertIn("Strong emergency fund! You have 8.0 months of expenses saved.", output.insights)

    def test_emergency_fund_needs_income(self):
        """Test emergency fund rule is skipped without income."""
        profile = UserProfile(savings=Decimal("0"))
        snapshot = make_snapshot(profile, averages=Averages(monthly=Decimal("25000")))

        self.assertNotIn("LOW_EMERGENCY_FUND", alert_types(apply_rules(snapshot)))

    def test_goals(self):
        """Test goals insight and tracking recommendation."""
        profile = UserProfile(goals=("house", "car"))

        output = apply_rules(make_snapshot(profile))

        self.assertIn("Active goals: house, car", output.insights)
        track = [rec for rec in output.recommendations if rec.title == "Track Goal Progress"][0]
        self.assertIn("house", track.description)

    def test_frequency(self):
        """Test many purchases in the last day."""
        output = apply_rules(make_snapshot(total_expenses=12, transactions_last_24h=6))

        self.assertTrue(any("6 expenses recently" in insight for insight in output.insights))

    def test_budget_statuses(self):
        """Test exceeded, warning and under-budget statuses."""
        budgets = [
            make_status("food", 120, "exceeded"),
            make_status("entertainment", 85, "warning"),
            make_status("transport", 30, "ok"),
        ]

        output = apply_rules(make_snapshot(), budgets=budgets)

        self.assertEqual(alert_types(output), ["BUDGET_EXCEEDED", "BUDGET_WARNING"])
        self.assertIn("₹200.00", output.alerts[0].message)
        self.assertIn("Great job staying under budget for transport (30% used)", output.insights)
        self.assertEqual(recommendation_titles(output), ["Monitor Budgets"])

    def test_insights_deduplicated(self):
        """Test identical insights are kept once."""
        budgets = [make_status("transport", 30, "ok"), make_status("transport", 30, "ok")]

        output = apply_rules(make_snapshot(), budgets=budgets)

        self.assertEqual(len(output.insights), 1)

    def test_alerts_sorted_by_severity(self):
        """Test alerts come out critical first regardless of rule order."""
        profile = UserProfile(income=Decimal("600000"))
        snapshot = make_snapshot(
            profile,
            total_spent=Decimal("1000"),
            category_breakdown={"food": Decimal("900"), "other": Decimal("100")},
            averages=Averages(monthly=Decimal("48000")),
            trends=Trends(month_over_month=(
                MonthTrend("2025-05", Decimal("100"), Decimal("0.00")),
                MonthTrend("2025-06", Decimal("150"), Decimal("50.00")),
            ))
        )

        output = apply_rules(snapshot)
        ranks = [SEVERITY_ORDER[alert.severity] for alert in output.alerts]

        self.assertEqual(ranks, sorted(ranks))
        self.assertEqual(
            alert_types(output),
            ["HIGH_SPENDING_RATIO", "SPENDING_INCREASE", "DOMINANT_CATEGORY"]
        )

    def test_recommendations_capped_in_append_order(self):
        """Test recommendations are cut to five without re-sorting."""
        profile = UserProfile(income=Decimal("600000"), savings=Decimal("10000"), goals=("house",))
        snapshot = make_snapshot(
            profile,
            total_spent=Decimal("1000"),
            category_breakdown={
                "food": Decimal("700"),
                "other": Decimal("100"),
                "transport": Decimal("100"),
                "utilities": Decimal("100"),
            },
            averages=Averages(monthly=Decimal("25000")),
            trends=Trends(month_over_month=(
                MonthTrend("2025-05", Decimal("100"), Decimal("0.00")),
                MonthTrend("2025-06", Decimal("80"), Decimal("-20.00")),
            ))
        )

        output = apply_rules(snapshot)

        self.assertEqual(output.recommendations_generated, 6)
        self.assertEqual(
            recommendation_titles(output),
            [
                "Maintain Momentum",
                "Invest Your Savings",
                "Review Food Spending",
                "Build Emergency Fund",
                "Track Goal Progress",
            ]
        )

    def test_explicit_profile_overrides_snapshot_profile(self):
        """Test the profile argument takes precedence."""
        snapshot = make_snapshot(averages=Averages(monthly=Decimal("47500")))

        output = apply_rules(snapshot, profile=UserProfile(income=Decimal("600000")))

        self.assertIn("HIGH_SPENDING_RATIO", alert_types(output))


class TestHealthScore(unittest.TestCase):
    """Test health_score()."""

    def test_penalties_and_bonuses(self):
        """Test the score arithmetic."""
        alerts = [Alert("A", "critical", "a"), Alert("B", "high", "b")]
        profile = UserProfile(income=Decimal("600000"), goals=("house",))

        self.assertEqual(health_score(alerts, ["x", "y", "z"], profile), 61)

    def test_insight_bonus_capped(self):
        """Test the insight bonus stops at 15."""
        self.assertEqual(health_score([], [str(i) for i in range(20)], UserProfile()), 95)

    def test_bounds(self):
        """Test score is clamped to 0..100."""
        many_alerts = [Alert("A", "critical", "a")] * 10
        self.assertEqual(health_score(many_alerts, [], UserProfile()), 0)

        profile = UserProfile(income=Decimal("1"), goals=("house",))
        self.assertEqual(health_score([], [str(i) for i in range(10)], profile), 100)

    def test_rule_output_score_in_range(self):
        """Test apply_rules always reports a score within bounds."""
        snapshots = [
            make_snapshot(),
            make_snapshot(
                UserProfile(income=Decimal("120000"), savings=Decimal("0")),
                total_spent=Decimal("50000"),
                category_breakdown={"food": Decimal("50000")},
                averages=Averages(monthly=Decimal("50000")),
                timeframes=Timeframes(last_7_days=Decimal("50000"), last_30_days=Decimal("50000"))
            ),
        ]
        for snapshot in snapshots:
            score = apply_rules(snapshot).health_score
            self.assertGreaterEqual(score, 0)
            self.assertLessEqual(score, 100)


if __name__ == "__main__":
    unittest.main()
