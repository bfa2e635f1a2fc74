from decimal import Decimal

from budget_core.domain import Transaction, TransactionType
from budget_core.export import (
    EXPORT_HEADER,
    export_filename,
    format_currency,
    quote_field,
    report_table,
    report_title,
    signed_amount,
    to_csv,
)


def make_sample():
    return (
        Transaction("t1", TransactionType.EXPENSE, Decimal("12.50"), "Food", "2024-01-05", 'He said "hi"'),
        Transaction("t2", TransactionType.INCOME, Decimal("2000"), "Salary", "2024-01-01", ""),
    )


def test_quote_field_doubles_quotes():
    assert quote_field('He said "hi"') == '"He said ""hi"""'
    assert quote_field("") == '""'


def test_csv_text():
    assert to_csv(make_sample()) == (
        "Date,Type,Description,Category,Amount\n"
        '2024-01-05,expense,"He said ""hi""",Food,12.50\n'
        '2024-01-01,income,"",Salary,2000\n'
    )


def test_csv_only_description_is_quoted():
    t = Transaction("t1", TransactionType.EXPENSE, Decimal("3"), "Bills, misc", "2024-01-05", "a,b")
    assert to_csv([t]).splitlines()[1] == '2024-01-05,expense,"a,b",Bills, misc,3'


def test_csv_empty_has_header_only():
    assert to_csv([]) == "Date,Type,Description,Category,Amount\n"


def test_format_currency():
    assert format_currency(Decimal("1234.5")) == "$1,234.50"
    assert format_currency(Decimal("-40")) == "-$40.00"
    assert format_currency(0, "€") == "€0.00"


def test_signed_amount():
    expense, income = make_sample()
    assert signed_amount(expense) == "- $12.50"
    assert signed_amount(income) == "+ $2,000.00"


def test_report_table():
    table = report_table(make_sample())
    assert list(table.columns) == list(EXPORT_HEADER)
    assert table.iloc[0]["Description"] == 'He said "hi"'
    assert table.iloc[1]["Amount"] == "+ $2,000.00"
    assert report_table([]).empty


def test_report_title_and_filenames():
    assert report_title("2024-01-01", "2024-01-31") == "Transaction Report: 2024-01-01 to 2024-01-31"
    assert export_filename("2024-01-01", "2024-01-31", "csv") == "transactions_2024-01-01_to_2024-01-31.csv"
    assert export_filename(None, None, "pdf") == "transactions_all_to_all.pdf"
