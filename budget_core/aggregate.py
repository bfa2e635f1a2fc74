from datetime import date, timedelta
from decimal import Decimal
from functools import lru_cache
from typing import Iterable, Optional

from budget_core.domain import (
    Budget,
    BudgetPeriod,
    Category,
    CategoryShare,
    CategorySpend,
    MonthlySummary,
    NotificationFrequency,
    ProgressStatus,
    RolloverPolicy,
    Transaction,
    TransactionType,
    ValidationError,
)
from budget_core.functional import Either, Left, Right, parse_iso_date
from budget_core.geometry import BarItem, DonutItem
from budget_core.log import get_logger

log = get_logger(__name__)

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

WARNING_PERCENT = 75
CRITICAL_PERCENT = 90

ZERO = Decimal(0)


def period_label(year: int, month: int) -> str:
    return f"{MONTH_ABBR[month - 1]} {year}"


def total_by_type(trans: Iterable[Transaction], kind: TransactionType) -> Decimal:
    return sum((t.amount for t in trans if t.type == kind), ZERO)


def category_breakdown(
    trans: Iterable[Transaction], categories: Iterable[Category]
) -> tuple[CategorySpend, ...]:
    """Expense total per configured category, in configured order (zero spend kept)."""
    return _category_breakdown(tuple(trans), tuple(categories))


@lru_cache(maxsize=128)
def _category_breakdown(
    trans: tuple[Transaction, ...], categories: tuple[Category, ...]
) -> tuple[CategorySpend, ...]:
    spent = {c.name: ZERO for c in categories}
    for t in trans:
        if t.type == TransactionType.EXPENSE and t.category in spent:
            spent[t.category] += t.amount
    log.debug("category_breakdown_computed", transactions=len(trans), categories=len(categories))
    return tuple(CategorySpend(category=c, spent=spent[c.name]) for c in categories)


def donut_items(breakdown: Iterable[CategorySpend]) -> tuple[DonutItem, ...]:
    """Chart input: only categories with spend, still in configured order."""
    return tuple(
        DonutItem(label=cs.category.name, value=cs.spent, color=cs.category.color)
        for cs in breakdown
        if cs.spent > 0
    )


def monthly_summary(
    trans: Iterable[Transaction], chronological: bool = False
) -> Either[ValidationError, tuple[MonthlySummary, ...]]:
    """Income and expense totals per (year, month).

    Buckets come out in the order their month first appears in `trans`;
    pass chronological=True to sort them by year and month instead.
    """
    return _monthly_summary(tuple(trans), chronological)


@lru_cache(maxsize=128)
def _monthly_summary(
    trans: tuple[Transaction, ...], chronological: bool
) -> Either[ValidationError, tuple[MonthlySummary, ...]]:
    buckets: dict[tuple[int, int], list[Decimal]] = {}
    for t in trans:
        parsed = parse_iso_date(t.date, f"date of transaction {t.id}")
        if parsed.is_left():
            return Left(parsed.get_error())
        day = parsed.get_or_else(None)
        totals = buckets.setdefault((day.year, day.month), [ZERO, ZERO])
        if t.type == TransactionType.INCOME:
            totals[0] += t.amount
        else:
            totals[1] += t.amount

    keys = sorted(buckets) if chronological else list(buckets)
    return Right(tuple(
        MonthlySummary(
            year=year,
            month=month,
            label=period_label(year, month),
            income=buckets[(year, month)][0],
            expense=buckets[(year, month)][1],
        )
        for year, month in keys
    ))


def bar_items(summaries: Iterable[MonthlySummary]) -> tuple[BarItem, ...]:
    return tuple(BarItem(label=s.label, a=s.income, b=s.expense) for s in summaries)


def category_shares(trans: Iterable[Transaction]) -> tuple[CategoryShare, ...]:
    """Expense per category name (configured or not), largest first, with share of total."""
    spent: dict[str, Decimal] = {}
    for t in trans:
        if t.type == TransactionType.EXPENSE:
            spent[t.category] = spent.get(t.category, ZERO) + t.amount

    total = sum(spent.values(), ZERO)
    shares = [
        CategoryShare(
            name=name,
            spent=amount,
            percentage=float(amount / total * 100) if total > 0 else 0.0,
        )
        for name, amount in spent.items()
    ]
    return tuple(sorted(shares, key=lambda s: s.spent, reverse=True))


def remaining_budget(budget: Budget, monthly_expense_total: Decimal) -> Decimal:
    # negative means over budget
    return budget.total - monthly_expense_total


def percent_used(spent, limit) -> float:
    if limit <= 0:
        return 0.0
    return min(float(spent) / float(limit) * 100, 100.0)


def progress_status(percent: float) -> ProgressStatus:
    if percent >= CRITICAL_PERCENT:
        return ProgressStatus.CRITICAL
    if percent >= WARNING_PERCENT:
        return ProgressStatus.WARNING
    return ProgressStatus.NOMINAL


def transactions_in_month(
    trans: Iterable[Transaction], year: int, month: int
) -> Either[ValidationError, tuple[Transaction, ...]]:
    result = []
    for t in trans:
        parsed = parse_iso_date(t.date, f"date of transaction {t.id}")
        if parsed.is_left():
            return Left(parsed.get_error())
        day = parsed.get_or_else(None)
        if day.year == year and day.month == month:
            result.append(t)
    return Right(tuple(result))


def active_period(
    budget: Budget, today: date, confirmed: Optional[tuple[int, int]] = None
) -> BudgetPeriod:
    """Month the budget is currently tracked against.

    auto-reset always follows the calendar. manual-confirm stays on the last
    confirmed (year, month) until the caller confirms the new month, and
    flags that a confirmation is pending.
    """
    current = (today.year, today.month)
    if budget.rollover == RolloverPolicy.AUTO_RESET or confirmed is None or confirmed >= current:
        return BudgetPeriod(year=today.year, month=today.month)
    return BudgetPeriod(year=confirmed[0], month=confirmed[1], needs_confirmation=True)


NOTIFICATION_WINDOWS = {
    NotificationFrequency.DAILY: (timedelta(days=1), "in the last 24 hours"),
    NotificationFrequency.WEEKLY: (timedelta(days=7), "in the last week"),
}


def period_spending(
    trans: Iterable[Transaction], start: date, end: date
) -> Either[ValidationError, Decimal]:
    """Expense total for start < date <= end."""
    total = ZERO
    for t in trans:
        if t.type != TransactionType.EXPENSE:
            continue
        parsed = parse_iso_date(t.date, f"date of transaction {t.id}")
        if parsed.is_left():
            return Left(parsed.get_error())
        if start < parsed.get_or_else(None) <= end:
            total += t.amount
    return Right(total)


def spending_notice(
    trans: Iterable[Transaction], frequency: NotificationFrequency, today: date
) -> Either[ValidationError, Optional[tuple[Decimal, str]]]:
    """(amount spent, period text) for a spending notification, or None when there is nothing to send."""
    if frequency not in NOTIFICATION_WINDOWS:
        return Right(None)
    window, text = NOTIFICATION_WINDOWS[frequency]
    return period_spending(trans, today - window, today).map(
        lambda spent: (spent, text) if spent > 0 else None
    )
