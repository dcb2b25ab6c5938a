"""Deterministic advice built only from locally computed data.

Used whenever the generation collaborator is unavailable. Template
selection is driven by the question type, then by recognized concepts
and topics; figures come from the snapshot and rule output, with
"Not provided" standing in for anything the user has not supplied.
"""
from decimal import Decimal, ROUND_FLOOR
from typing import Tuple

from finadvisor.analysis.models import AnalysisSnapshot, format_money
from finadvisor.rules.models import RuleOutput
from finadvisor.semantics.models import ClassificationBundle
from finadvisor.utils.logger import get_logger

logger = get_logger()

FallbackAnswer = Tuple[str, str, float]

MIN_SIP_AMOUNT = Decimal("1000")

MUTUAL_FUND_EXPLAINER = """**What is a Mutual Fund?**

A mutual fund is a professionally managed investment vehicle that pools money from many investors to invest in a diversified portfolio of stocks, bonds, or other securities.

**Key Features:**
- **Diversification:** Spreads risk across many investments
- **Professional Management:** Fund managers make the investment decisions
- **Liquidity:** Units can be bought or sold on any business day (open-ended funds)
- **SIP Option:** A Systematic Investment Plan invests a fixed amount every month

**Types:** Index funds, ELSS (tax-saving), balanced funds, debt funds

**Benefits:** Lower risk than individual stocks, expert management, easy access"""

FIXED_DEPOSIT_EXPLAINER = """**What is a Fixed Deposit (FD)?**

A fixed deposit is a savings instrument where you deposit money for a fixed period at a predetermined interest rate.

**Key Features:**
- **Guaranteed Returns:** The interest rate is fixed for the whole tenure
- **Safety:** Bank deposits are insured up to a statutory limit
- **Flexible Tenure:** From a few days up to ten years
- **Auto-Renewal:** The deposit can be reinvested automatically on maturity

**Interest:** Typically 5-7% a year, taxed at your slab rate
**Best For:** Risk-averse savers and parking an emergency fund

**Comparison:** Safer than stocks but with lower long-term returns than equity"""

COMPOUND_INTEREST_EXPLAINER = """**What is Compound Interest?**

Compound interest is interest earned on both the original principal and the interest accumulated in earlier periods.

**Example:** 10,000 at 10% a year
- **Year 1:** 10,000 x 10% = 1,000, total 11,000
- **Year 2:** 11,000 x 10% = 1,100, total 12,100
- **Year 3:** 12,100 x 10% = 1,210, total 13,310

**Making It Work For You:**
- **Start Early:** More time for money to grow
- **Contribute Regularly:** A SIP puts compounding to work every month
- **Reinvest Returns:** Interest on interest creates exponential growth"""

EMERGENCY_FUND_EXPLAINER = """**What is an Emergency Fund?**

An emergency fund is money set aside for unexpected needs such as medical emergencies, job loss, or urgent repairs.

**Key Principles:**
- **3-6 Months of Expenses:** Size it to your monthly living costs
- **Liquid and Accessible:** Withdrawals without penalties
- **Separate Account:** Keep it apart from everyday savings

**Why It Matters:**
- **Financial Security:** Protects against life's uncertainties
- **Prevents Debt:** Avoids high-interest loans in an emergency

**Building Strategy:** Save 10-20% of income every month until the target is reached"""

EDUCATIONAL_EXPLAINERS = (
    ("mutual_fund", MUTUAL_FUND_EXPLAINER),
    ("fixed_deposit", FIXED_DEPOSIT_EXPLAINER),
    ("compound_interest", COMPOUND_INTEREST_EXPLAINER),
    ("emergency_fund", EMERGENCY_FUND_EXPLAINER),
)

FD_VS_MF_COMPARISON = """**Fixed Deposits vs Mutual Funds**

**Safety and Risk:**
- **FDs:** Capital is protected and returns are fixed
- **Mutual Funds:** Subject to market risk, softened by diversification

**Returns:**
- **FDs:** 5-7% guaranteed annual returns (taxable)
- **Mutual Funds:** 10-15% potential long-run returns, varying with the market

**Lock-in and Liquidity:**
- **FDs:** Fixed tenure, with a penalty for early closure
- **Mutual Funds:** Most are open-ended and can be redeemed anytime, some with exit loads

**Taxation:**
- **FDs:** Interest taxed at your slab rate
- **Mutual Funds:** Lower long-term capital gains tax for longer holdings

**Best For:**
- **FDs:** Conservative investors, emergency funds, short-term goals
- **Mutual Funds:** Long-term wealth creation

**Suggestion:** A 70% mutual fund and 30% FD split balances growth and safety"""

GENERIC_COMPARISON = """**Comparative Analysis**

When comparing financial options, weigh these factors:

**Risk vs Return:**
- Higher returns usually come with higher risk
- Conservative options prioritize safety over growth

**Time Horizon:**
- Short-term (1-3 years): focus on safety and liquidity
- Medium-term (3-7 years): balance risk and return
- Long-term (7+ years): more room for growth assets

**Your Situation:**
- Available capital, risk tolerance, and goals all matter
- Account for inflation and tax
- Diversification is the main tool for managing risk

**General Advice:** Choose based on your risk appetite and time horizon."""

PLANNING_GUIDANCE = """**Financial Planning Guidance**

**1. Goal Setting:**
- Define specific, measurable financial goals
- Set realistic timelines and break large goals into milestones

**2. Risk Assessment:**
- Your current risk profile: {risk_advice}
- Revisit it after major life changes

**3. Strategy:**
- **Conservative:** Focus on capital preservation
- **Moderate:** Balance growth and safety
- **Aggressive:** Maximize long-term growth

**4. Regular Review:**
- Monitor progress quarterly and rebalance annually

**Remember:** Financial planning is a journey. Start now and stay consistent!"""

GOAL_SETTING_GUIDANCE = """**Planning and Goal Setting**

**Define Your Goals:**
- Short-term (1-3 years): emergency fund, debt reduction
- Medium-term (3-7 years): major purchases, education
- Long-term (7+ years): retirement, wealth building

**Implementation Steps:**
1. **Calculate Needs:** Work out the amount each goal requires
2. **Timeline Planning:** Set realistic target dates
3. **Strategy Selection:** Pick suitable investment vehicles
4. **Regular Monitoring:** Track progress and adjust

**Your Active Goals:** {goals}

**Next Step:** Define 2-3 specific financial goals with timelines!"""


def generate_fallback(
    classification: ClassificationBundle,
    snapshot: AnalysisSnapshot,
    rule_output: RuleOutput
) -> FallbackAnswer:
    """
    Build advice text without any collaborator.

    Args:
        classification: Classification of the question
        snapshot: Analysis snapshot of the user's transactions
        rule_output: Rule engine output for the snapshot

    Returns:
        Tuple of (response text, model tag, confidence)
    """
    question_type = classification.question_type
    if question_type == "educational":
        answer = _educational(classification)
    elif question_type == "comparative":
        answer = _comparative(classification)
    elif question_type == "advisory":
        answer = _advisory(classification, snapshot, rule_output)
    elif question_type == "planning":
        answer = _planning(classification, snapshot, rule_output)
    else:
        answer = _general(classification, snapshot, rule_output)

    logger.info(f"Fallback selected template {answer[1]} for {question_type} question")
    return answer


def _educational(classification: ClassificationBundle) -> FallbackAnswer:
    for concept, explainer in EDUCATIONAL_EXPLAINERS:
        if classification.has_concept(concept):
            return explainer, "semantic-educational", 0.9

    text = f"""**Financial Education**

Here is some background for your question "{classification.question}":

**Key Financial Concepts:**
- **Compound Interest:** Interest on interest, so start early
- **Diversification:** Don't put all your eggs in one basket
- **Risk-Return Tradeoff:** Higher returns usually mean higher risk
- **Time Value of Money:** Money today is worth more than the same money tomorrow

Would you like me to explain any of these in detail?"""
    return text, "semantic-educational", 0.7


def _comparative(classification: ClassificationBundle) -> FallbackAnswer:
    if classification.has_topic("investment") and classification.has_concept("fixed_deposit", "mutual_fund"):
        return FD_VS_MF_COMPARISON, "semantic-comparative", 0.95
    return GENERIC_COMPARISON, "semantic-comparative", 0.8


def _floor(value: Decimal) -> Decimal:
    return Decimal(value).to_integral_value(rounding=ROUND_FLOOR)


def _advisory(
    classification: ClassificationBundle,
    snapshot: AnalysisSnapshot,
    rule_output: RuleOutput
) -> FallbackAnswer:
    currency = snapshot.profile.currency
    monthly_income = snapshot.profile.monthly_income
    monthly_expenses = snapshot.averages.monthly

    if classification.has_topic("investment"):
        if monthly_income is not None:
            surplus = monthly_income - monthly_expenses
            sip = max(MIN_SIP_AMOUNT, _floor(surplus * Decimal("0.6")))
        else:
            surplus = None
            sip = MIN_SIP_AMOUNT

        text = f"""**Personalized Investment Advice**

**Your Financial Snapshot:**
- Monthly Income: {format_money(monthly_income, currency)}
- Monthly Expenses: {format_money(monthly_expenses, currency)}
- Monthly Surplus: {format_money(surplus, currency)}

**Suggested Allocation:**
- **60% Growth:** Diversified mutual funds through a SIP
- **30% Moderate Risk:** Balanced advantage funds
- **10% Safe Haven:** Fixed deposits or liquid funds

**Action Plan:**
1. **Start a SIP:** {format_money(sip, currency)} a month in index funds
2. **Emergency Fund:** Keep 6 months of expenses in liquid savings
3. **Review Quarterly:** Rebalance as your situation changes

**Risk Considerations:**
- Your risk tolerance appears {rule_output.risk_profile}
- Market volatility is normal, so stay invested for the long term"""
        return text, "semantic-advisory", 0.85

    if classification.has_topic("savings"):
        top = snapshot.top_categories(1)
        top_category = top[0][0] if top else "unknown"
        cut_target = _floor(snapshot.total_spent * Decimal("0.2"))

        text = f"""**Personalized Savings Strategy**

**Current Analysis:**
- You spend {format_money(snapshot.total_spent, currency)} in total
- Top expense category: {top_category}

**Saving Recommendations:**
1. **Track Expenses:** Review where each payment goes
2. **Cut Non-Essentials:** Find {format_money(cut_target, currency)} in savings
3. **Plan Meals:** Cooking at home lowers food spending
4. **Review Subscriptions:** Cancel the ones you no longer use

**Emergency Fund Goal:** 6 months of expenses = {format_money(monthly_expenses * 6, currency)}

**Remember:** Small consistent savings build wealth over time!"""
        return text, "semantic-advisory", 0.85

    text = f"""**Financial Advisory**

**Key Considerations:**
- Your financial health score: {rule_output.health_score}/100
- Consider your investment timeline and goals

**General Recommendations:**
1. **Emergency Fund:** 3-6 months of expenses as a safety net
2. **Debt Management:** Pay off high-interest debt first
3. **Consistent Saving:** Automate regular contributions
4. **Long-term Investing:** Let compounding work for you

Would you like me to go deeper on any of these?"""
    return text, "semantic-advisory", 0.75


def _planning(
    classification: ClassificationBundle,
    snapshot: AnalysisSnapshot,
    rule_output: RuleOutput
) -> FallbackAnswer:
    if classification.has_topic("planning"):
        if rule_output.health_score > 70:
            risk_advice = "Can afford moderate risk"
        else:
            risk_advice = "Conservative approach recommended"
        return PLANNING_GUIDANCE.format(risk_advice=risk_advice), "semantic-planning", 0.8

    goals = ", ".join(snapshot.profile.goals) or "Not provided"
    return GOAL_SETTING_GUIDANCE.format(goals=goals), "semantic-planning", 0.75


def _general(
    classification: ClassificationBundle,
    snapshot: AnalysisSnapshot,
    rule_output: RuleOutput
) -> FallbackAnswer:
    if classification.has_topic("savings"):
        focus = "building savings habits"
    elif classification.has_topic("investment"):
        focus = "learning investment basics"
    else:
        focus = "understanding your cash flow"

    text = f"""**General Financial Guidance**

**Current Financial Health:**
- Overall Score: {rule_output.health_score}/100
- Total Spending: {format_money(snapshot.total_spent, snapshot.profile.currency)}
- Key Focus Areas: {', '.join(classification.topics) or 'budget optimization'}

**Core Principles:**
1. **Live Below Your Means:** Spend less than you earn
2. **Emergency Fund:** 3-6 months of expenses as a safety net
3. **Consistent Saving:** Automate regular contributions

**Personalized Tip:** Focus on {focus}

Would you like me to elaborate on any specific financial topic?"""
    return text, "semantic-general", 0.7
