from datetime import date
from decimal import Decimal
from typing import Iterable, Union

import pandas as pd

from budget_core.domain import Transaction, TransactionType

EXPORT_HEADER = ("Date", "Type", "Description", "Category", "Amount")


def format_currency(amount, symbol: str = "$") -> str:
    value = Decimal(str(amount))
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def _plain_number(amount) -> str:
    return format(Decimal(str(amount)), "f")


def quote_field(text: str) -> str:
    return '"' + (text or "").replace('"', '""') + '"'


def csv_row(t: Transaction) -> str:
    return ",".join([
        t.date,
        TransactionType(t.type).value,
        quote_field(t.description),
        t.category,
        _plain_number(t.amount),
    ])


def to_csv(trans: Iterable[Transaction]) -> str:
    """Export rows as text: header plus one line per transaction, each ending in a newline.

    Only the description is quoted (inner quotes doubled); the other fields go out as is.
    """
    lines = [",".join(EXPORT_HEADER)]
    lines.extend(csv_row(t) for t in trans)
    return "".join(line + "\n" for line in lines)


def signed_amount(t: Transaction, symbol: str = "$") -> str:
    sign = "+" if t.type == TransactionType.INCOME else "-"
    return f"{sign} {format_currency(t.amount, symbol)}"


def report_title(start: Union[str, date, None], end: Union[str, date, None]) -> str:
    return f"Transaction Report: {start or 'beginning'} to {end or 'today'}"


def export_filename(start, end, extension: str) -> str:
    return f"transactions_{start or 'all'}_to_{end or 'all'}.{extension}"


def report_table(trans: Iterable[Transaction], symbol: str = "$") -> pd.DataFrame:
    """Rows for the document exporter, same columns as the text export."""
    rows = [
        {
            "Date": t.date,
            "Type": TransactionType(t.type).value,
            "Description": t.description,
            "Category": t.category,
            "Amount": signed_amount(t, symbol),
        }
        for t in trans
    ]
    return pd.DataFrame(rows, columns=list(EXPORT_HEADER))
