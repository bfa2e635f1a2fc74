from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Union


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class RolloverPolicy(str, Enum):
    AUTO_RESET = "auto-reset"
    MANUAL_CONFIRM = "manual-confirm"


class NotificationFrequency(str, Enum):
    OFF = "off"
    DAILY = "daily"
    WEEKLY = "weekly"


class ProgressStatus(str, Enum):
    NOMINAL = "nominal"
    WARNING = "warning"
    CRITICAL = "critical"


# Matches every transaction type / category in a FilterCriteria
ALL = "all"


@dataclass(frozen=True)
class Transaction:
    id: str
    type: TransactionType
    amount: Decimal       # always >= 0, the type carries the sign
    category: str         # category name
    date: str             # ISO calendar date, e.g. "2024-01-05"
    description: str = ""


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    budget: Decimal
    color: str  # hex color token, e.g. "#ef4444"


@dataclass(frozen=True)
class Budget:
    total: Decimal
    categories: tuple[Category, ...]
    rollover: RolloverPolicy = RolloverPolicy.AUTO_RESET


@dataclass(frozen=True)
class FilterCriteria:
    type: Union[TransactionType, str] = ALL
    category: str = ALL
    start: Optional[Union[str, date]] = None  # inclusive
    end: Optional[Union[str, date]] = None    # inclusive


@dataclass(frozen=True)
class CategorySpend:
    category: Category
    spent: Decimal


@dataclass(frozen=True)
class CategoryShare:
    name: str
    spent: Decimal
    percentage: float  # share of total expenses, 0..100


@dataclass(frozen=True)
class MonthlySummary:
    year: int
    month: int
    label: str  # e.g. "Jan 2024"
    income: Decimal
    expense: Decimal


@dataclass(frozen=True)
class ValidationError:
    code: str
    message: str
    value: object = None


@dataclass(frozen=True)
class BudgetPeriod:
    year: int
    month: int
    needs_confirmation: bool = False
