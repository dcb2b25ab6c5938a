"""Data models for transaction analysis."""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from finadvisor.utils.exceptions import ValidationError

CATEGORIES = (
    "food",
    "transport",
    "entertainment",
    "utilities",
    "health",
    "education",
    "family",
    "other",
)

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Round a figure to 2 decimal places, half up."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


CURRENCY_SYMBOLS = {"INR": "₹", "USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥"}


def local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def format_money(value, currency: str = "INR", places: int = 0) -> str:
    """Render an amount with its currency symbol, e.g. ₹45,000."""
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), currency) if currency else ""
    if value is None:
        return "Not provided"
    amount = Decimal(str(value)).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    separator = "" if len(symbol) <= 1 else " "
    return f"{symbol}{separator}{amount:,}"


@dataclass(frozen=True)
class Transaction:
    """Expense record."""
    date: datetime
    description: str
    amount: Decimal
    category: str


@dataclass(frozen=True)
class UserProfile:
    """User profile fields the advisor reads."""
    income: Optional[Decimal] = None  # annual
    savings: Optional[Decimal] = None
    goals: Tuple[str, ...] = ()
    currency: str = "INR"
    age: Optional[int] = None

    @property
    def has_income(self) -> bool:
        return self.income is not None and self.income > 0

    @property
    def monthly_income(self) -> Optional[Decimal]:
        if not self.has_income:
            return None
        return self.income / 12


@dataclass(frozen=True)
class Timeframes:
    """Spend over trailing fixed-width windows."""
    last_7_days: Decimal = Decimal("0")
    last_30_days: Decimal = Decimal("0")
    last_90_days: Decimal = Decimal("0")
    last_year: Decimal = Decimal("0")


@dataclass(frozen=True)
class Averages:
    daily: Decimal = Decimal("0")
    weekly: Decimal = Decimal("0")
    monthly: Decimal = Decimal("0")


@dataclass(frozen=True)
class MonthTrend:
    """Calendar month total and its change from the previous month.

    change_percent is None when the previous month summed to zero.
    """
    month: str
    amount: Decimal
    change_percent: Optional[Decimal]


@dataclass(frozen=True)
class CategoryTrend:
    total: Decimal
    count: int
    percentage: Decimal


@dataclass(frozen=True)
class Trends:
    month_over_month: Tuple[MonthTrend, ...] = ()
    category_trends: Dict[str, CategoryTrend] = field(default_factory=dict)


@dataclass(frozen=True)
class AnalysisSnapshot:
    """Numeric summary of one user's transaction history for one request."""
    generated_at: datetime
    profile: UserProfile
    total_expenses: int = 0
    total_spent: Decimal = Decimal("0")
    category_breakdown: Dict[str, Decimal] = field(default_factory=dict)
    monthly_totals: Dict[str, Decimal] = field(default_factory=dict)
    timeframes: Timeframes = field(default_factory=Timeframes)
    averages: Averages = field(default_factory=Averages)
    trends: Trends = field(default_factory=Trends)
    transactions_last_24h: int = 0

    @property
    def is_empty(self) -> bool:
        return self.total_expenses == 0

    def top_categories(self, limit: int = 3) -> List[Tuple[str, Decimal]]:
        """Categories by descending spend, ties broken by name."""
        ranked = sorted(self.category_breakdown.items(), key=lambda item: (-item[1], item[0]))
        return ranked[:limit]


@dataclass(frozen=True)
class Budget:
    """Per-category spending limit."""
    category: str
    amount: Decimal
    period: str = "monthly"
    thresholds: Tuple[int, ...] = (80, 100)
    active: bool = True


@dataclass(frozen=True)
class BudgetStatus:
    """Budget utilisation for the current period."""
    category: str
    budget_amount: Decimal
    spent: Decimal
    remaining: Decimal
    percentage: Decimal
    status: str  # ok | warning | exceeded
    period: str
    period_start: datetime


class TransactionSchema(BaseModel):
    """Pydantic schema for transaction records handed over by persistence."""
    amount: Decimal = Field(gt=0, description="Expense amount")
    category: Literal[CATEGORIES]
    description: str = Field(default="", description="Free-text description")
    date: datetime


class ProfileSchema(BaseModel):
    """Pydantic schema for profile records; every field is optional."""
    income: Optional[Decimal] = Field(default=None, ge=0, description="Annual income")
    savings: Optional[Decimal] = Field(default=None, ge=0)
    goals: List[str] = Field(default_factory=list)
    currency: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0)


class BudgetSchema(BaseModel):
    category: Literal[CATEGORIES]
    amount: Decimal = Field(ge=0)
    period: Literal["weekly", "monthly", "yearly"] = "monthly"
    thresholds: List[int] = Field(default_factory=lambda: [80, 100])
    active: bool = True


def transactions_from_records(records: Iterable[Dict[str, Any]]) -> List[Transaction]:
    """
    Validate raw transaction records and convert them to Transaction objects.

    Args:
        records: Dicts with amount, category, description and date

    Returns:
        List of Transaction objects

    Raises:
        ValidationError: If a record is malformed
    """
    transactions = []
    for index, record in enumerate(records):
        try:
            validated = TransactionSchema(**record)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid transaction record at index {index}: {e}")

        transactions.append(Transaction(
            date=local_naive(validated.date),
            description=validated.description,
            amount=validated.amount,
            category=validated.category
        ))
    return transactions


def profile_from_record(record: Optional[Dict[str, Any]], default_currency: str = "INR") -> UserProfile:
    """Convert a raw profile record, treating missing fields as absent."""
    if not record:
        return UserProfile(currency=default_currency)

    try:
        validated = ProfileSchema(**record)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid profile record: {e}")

    return UserProfile(
        income=validated.income,
        savings=validated.savings,
        goals=tuple(goal for goal in validated.goals if goal),
        currency=validated.currency or default_currency,
        age=validated.age
    )


def budgets_from_records(records: Iterable[Dict[str, Any]]) -> List[Budget]:
    """Validate raw budget records."""
    budgets = []
    for index, record in enumerate(records):
        try:
            validated = BudgetSchema(**record)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid budget record at index {index}: {e}")

        budgets.append(Budget(
            category=validated.category,
            amount=validated.amount,
            period=validated.period,
            thresholds=tuple(sorted(validated.thresholds)),
            active=validated.active
        ))
    return budgets
