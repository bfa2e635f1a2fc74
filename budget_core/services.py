import calendar
from datetime import date
from typing import Any, Dict, Iterable, Optional

from budget_core.aggregate import (
    active_period,
    bar_items,
    category_breakdown,
    category_shares,
    donut_items,
    monthly_summary,
    percent_used,
    progress_status,
    remaining_budget,
    total_by_type,
    transactions_in_month,
)
from budget_core.domain import Budget, FilterCriteria, Transaction, TransactionType, ValidationError
from budget_core.export import export_filename, report_table, report_title, to_csv
from budget_core.filters import filter_transactions
from budget_core.functional import Either
from budget_core.geometry import BarConfig, DonutConfig, bar_layout, donut_slices
from budget_core.log import get_logger

log = get_logger(__name__)

RECENT_COUNT = 5


def month_bounds(today: date) -> tuple[date, date]:
    last = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last)


class DashboardService:
    """Current-month figures, budget progress and the spending donut."""

    def __init__(self, donut_config: Optional[DonutConfig] = None):
        self.donut_config = donut_config or DonutConfig()

    def snapshot(
        self,
        transactions: Iterable[Transaction],
        budget: Budget,
        today: date,
        confirmed_period: Optional[tuple[int, int]] = None,
    ) -> Either[ValidationError, Dict[str, Any]]:
        transactions = tuple(transactions)
        period = active_period(budget, today, confirmed_period)
        return transactions_in_month(transactions, period.year, period.month).map(
            lambda monthly: self._build(transactions, monthly, budget, period)
        )

    def _build(self, transactions, monthly, budget, period) -> Dict[str, Any]:
        income = total_by_type(monthly, TransactionType.INCOME)
        expenses = total_by_type(monthly, TransactionType.EXPENSE)
        breakdown = category_breakdown(monthly, budget.categories)

        progress = []
        for cs in sorted(breakdown, key=lambda cs: cs.category.budget, reverse=True):
            pct = percent_used(cs.spent, cs.category.budget)
            progress.append({
                "category": cs.category,
                "spent": cs.spent,
                "percent": pct,
                "status": progress_status(pct),
            })

        log.info(
            "dashboard_snapshot",
            year=period.year,
            month=period.month,
            transactions=len(monthly),
            needs_confirmation=period.needs_confirmation,
        )
        return {
            "period": period,
            "income": income,
            "expenses": expenses,
            "remaining": remaining_budget(budget, expenses),
            "breakdown": breakdown,
            "progress": progress,
            "donut": donut_slices(donut_items(breakdown), self.donut_config),
            "recent": transactions[:RECENT_COUNT],
        }


class ReportService:
    """Date-range report: monthly bars, spending by category and export payloads."""

    def __init__(self, bar_config: Optional[BarConfig] = None, chronological: bool = False):
        self.bar_config = bar_config or BarConfig()
        self.chronological = chronological

    @staticmethod
    def default_criteria(today: date) -> FilterCriteria:
        start, end = month_bounds(today)
        return FilterCriteria(start=start.isoformat(), end=end.isoformat())

    def report(
        self, transactions: Iterable[Transaction], criteria: FilterCriteria
    ) -> Either[ValidationError, Dict[str, Any]]:
        return filter_transactions(transactions, criteria).bind(
            lambda filtered: monthly_summary(filtered, self.chronological).map(
                lambda summaries: self._build(filtered, summaries, criteria)
            )
        )

    def _build(self, filtered, summaries, criteria) -> Dict[str, Any]:
        log.info("report_built", transactions=len(filtered), months=len(summaries))
        return {
            "transactions": filtered,
            "monthly": summaries,
            "bars": bar_layout(bar_items(summaries), self.bar_config),
            "categories": category_shares(filtered),
            "csv": to_csv(filtered),
            "table": report_table(filtered),
            "title": report_title(criteria.start, criteria.end),
            "csv_name": export_filename(criteria.start, criteria.end, "csv"),
        }
