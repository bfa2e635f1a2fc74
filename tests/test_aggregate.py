from datetime import date
from decimal import Decimal

import pytest

from budget_core.aggregate import (
    active_period,
    bar_items,
    category_breakdown,
    category_shares,
    donut_items,
    monthly_summary,
    percent_used,
    period_spending,
    progress_status,
    remaining_budget,
    spending_notice,
    total_by_type,
    transactions_in_month,
)
from budget_core.domain import (
    Budget,
    BudgetPeriod,
    Category,
    NotificationFrequency,
    ProgressStatus,
    RolloverPolicy,
    Transaction,
    TransactionType,
)

EXPENSE = TransactionType.EXPENSE
INCOME = TransactionType.INCOME


def make_tx(id, kind, amount, category, day):
    return Transaction(id, kind, Decimal(amount), category, day, "")


def make_categories():
    return (
        Category("c1", "Food", Decimal("400"), "#ef4444"),
        Category("c2", "Transport", Decimal("200"), "#3b82f6"),
        Category("c3", "Fun", Decimal("0"), "#a855f7"),
    )


def make_sample():
    return (
        make_tx("t1", EXPENSE, "100", "Food", "2024-01-05"),
        make_tx("t2", INCOME, "2000", "Income", "2024-01-01"),
        make_tx("t3", EXPENSE, "50", "Food", "2024-02-01"),
    )


def test_category_breakdown_example():
    breakdown = category_breakdown(make_sample(), make_categories())
    assert [cs.category.name for cs in breakdown] == ["Food", "Transport", "Fun"]
    assert breakdown[0].spent == Decimal("150")
    assert breakdown[1].spent == 0
    assert breakdown[2].spent == 0


def test_category_breakdown_ignores_income_and_unknown_categories():
    trans = make_sample() + (
        make_tx("t4", INCOME, "999", "Food", "2024-01-06"),
        make_tx("t5", EXPENSE, "70", "Gifts", "2024-01-07"),
        make_tx("t6", EXPENSE, "20", "Transport", "2024-01-08"),
    )
    breakdown = category_breakdown(trans, make_categories())
    configured = {c.name for c in make_categories()}
    expected = sum(t.amount for t in trans if t.type == EXPENSE and t.category in configured)
    assert sum(cs.spent for cs in breakdown) == expected == Decimal("170")


def test_category_breakdown_accepts_lists_and_is_repeatable():
    first = category_breakdown(list(make_sample()), list(make_categories()))
    second = category_breakdown(list(make_sample()), list(make_categories()))
    assert first == second


def test_donut_items_keep_configured_order_and_drop_zero():
    cats = make_categories()
    trans = (
        make_tx("t1", EXPENSE, "10", "Food", "2024-01-05"),
        make_tx("t2", EXPENSE, "500", "Fun", "2024-01-05"),
    )
    items = donut_items(category_breakdown(trans, cats))
    assert [i.label for i in items] == ["Food", "Fun"]
    assert items[1].color == "#a855f7"


def test_monthly_summary_example():
    result = monthly_summary(make_sample())
    assert result.is_right()
    jan, feb = result.get_or_else(None)
    assert (jan.label, jan.income, jan.expense) == ("Jan 2024", Decimal("2000"), Decimal("100"))
    assert (feb.label, feb.income, feb.expense) == ("Feb 2024", Decimal("0"), Decimal("50"))


def test_monthly_summary_first_occurrence_order():
    trans = (
        make_tx("t1", EXPENSE, "5", "Food", "2024-03-02"),
        make_tx("t2", EXPENSE, "6", "Food", "2024-01-02"),
        make_tx("t3", INCOME, "7", "Pay", "2024-03-20"),
    )
    labels = [s.label for s in monthly_summary(trans).get_or_else(())]
    assert labels == ["Mar 2024", "Jan 2024"]


def test_monthly_summary_chronological():
    trans = (
        make_tx("t1", EXPENSE, "5", "Food", "2024-03-02"),
        make_tx("t2", EXPENSE, "6", "Food", "2023-12-02"),
        make_tx("t3", EXPENSE, "6", "Food", "2024-01-02"),
    )
    labels = [s.label for s in monthly_summary(trans, chronological=True).get_or_else(())]
    assert labels == ["Dec 2023", "Jan 2024", "Mar 2024"]


def test_monthly_summary_invalid_date():
    trans = make_sample() + (make_tx("bad", EXPENSE, "1", "Food", "2024/01/01"),)
    result = monthly_summary(trans)
    assert result.is_left()
    assert result.get_error().code == "invalid_date"


def test_monthly_summary_empty():
    assert monthly_summary(()).get_or_else(None) == ()


def test_bar_items_from_summary():
    items = bar_items(monthly_summary(make_sample()).get_or_else(()))
    assert [(i.label, i.a, i.b) for i in items] == [
        ("Jan 2024", Decimal("2000"), Decimal("100")),
        ("Feb 2024", Decimal("0"), Decimal("50")),
    ]


def test_category_shares_sorted_with_percentages():
    trans = make_sample() + (make_tx("t4", EXPENSE, "250", "Gifts", "2024-02-02"),)
    shares = category_shares(trans)
    assert [s.name for s in shares] == ["Gifts", "Food"]
    assert shares[0].percentage == pytest.approx(62.5)
    assert shares[1].percentage == pytest.approx(37.5)


def test_category_shares_without_expenses():
    assert category_shares((make_tx("t1", INCOME, "10", "Pay", "2024-01-01"),)) == ()


def test_remaining_budget_can_go_negative():
    budget = Budget(Decimal("100"), make_categories())
    assert remaining_budget(budget, Decimal("40")) == Decimal("60")
    assert remaining_budget(budget, Decimal("140")) == Decimal("-40")


def test_percent_used():
    assert percent_used(Decimal("50"), Decimal("200")) == pytest.approx(25.0)
    assert percent_used(Decimal("300"), Decimal("200")) == 100.0
    assert percent_used(Decimal("10"), Decimal("0")) == 0.0
    assert percent_used(Decimal("10"), Decimal("-5")) == 0.0


def test_progress_status_thresholds():
    assert progress_status(0) == ProgressStatus.NOMINAL
    assert progress_status(74.99) == ProgressStatus.NOMINAL
    assert progress_status(75) == ProgressStatus.WARNING
    assert progress_status(89.99) == ProgressStatus.WARNING
    assert progress_status(90) == ProgressStatus.CRITICAL
    assert progress_status(100) == ProgressStatus.CRITICAL


def test_total_by_type():
    assert total_by_type(make_sample(), INCOME) == Decimal("2000")
    assert total_by_type(make_sample(), EXPENSE) == Decimal("150")
    assert total_by_type((), EXPENSE) == 0


def test_transactions_in_month():
    result = transactions_in_month(make_sample(), 2024, 1)
    assert [t.id for t in result.get_or_else(())] == ["t1", "t2"]


def test_active_period_auto_reset_follows_calendar():
    budget = Budget(Decimal("100"), (), RolloverPolicy.AUTO_RESET)
    assert active_period(budget, date(2024, 5, 3), confirmed=(2024, 3)) == BudgetPeriod(2024, 5)


def test_active_period_manual_confirm_waits():
    budget = Budget(Decimal("100"), (), RolloverPolicy.MANUAL_CONFIRM)
    assert active_period(budget, date(2024, 5, 3), confirmed=(2024, 4)) == BudgetPeriod(2024, 4, True)
    assert active_period(budget, date(2024, 5, 3), confirmed=(2024, 5)) == BudgetPeriod(2024, 5)
    assert active_period(budget, date(2024, 5, 3)) == BudgetPeriod(2024, 5)


def test_period_spending_window():
    trans = (
        make_tx("t1", EXPENSE, "10", "Food", "2024-05-10"),
        make_tx("t2", EXPENSE, "20", "Food", "2024-05-09"),
        make_tx("t3", EXPENSE, "40", "Food", "2024-05-03"),
        make_tx("t4", INCOME, "80", "Pay", "2024-05-10"),
    )
    assert period_spending(trans, date(2024, 5, 9), date(2024, 5, 10)).get_or_else(None) == Decimal("10")
    assert period_spending(trans, date(2024, 5, 3), date(2024, 5, 10)).get_or_else(None) == Decimal("30")


def test_spending_notice():
    trans = (make_tx("t1", EXPENSE, "12", "Food", "2024-05-08"),)
    today = date(2024, 5, 10)
    assert spending_notice(trans, NotificationFrequency.WEEKLY, today).get_or_else(None) == (
        Decimal("12"), "in the last week")
    assert spending_notice(trans, NotificationFrequency.DAILY, today).get_or_else("x") is None
    assert spending_notice(trans, NotificationFrequency.OFF, today).get_or_else("x") is None
