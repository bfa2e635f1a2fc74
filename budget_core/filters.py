from datetime import date
from typing import Iterable, Optional

from budget_core.domain import ALL, Budget, FilterCriteria, Transaction, TransactionType, ValidationError
from budget_core.functional import Either, Left, Right, parse_iso_date
from budget_core.log import get_logger

log = get_logger(__name__)


def by_type(kind):
    def _filter(t: Transaction) -> bool:
        return kind == ALL or t.type == kind

    return _filter


def by_category(name: str):
    def _filter(t: Transaction) -> bool:
        return name == ALL or t.category == name

    return _filter


def in_date_range(day: date, start: Optional[date], end: Optional[date]) -> bool:
    if start is not None and day < start:
        return False
    if end is not None and day > end:
        return False
    return True


def _criteria_type(value) -> Either[ValidationError, object]:
    if value == ALL:
        return Right(ALL)
    try:
        return Right(TransactionType(value))
    except ValueError:
        return Left(ValidationError(
            code="invalid_type",
            message=f"unknown transaction type filter: {value!r}",
            value=value,
        ))


def _optional_date(value, field: str) -> Either[ValidationError, Optional[date]]:
    if value is None or value == "":
        return Right(None)
    return parse_iso_date(value, field)


def filter_transactions(
    trans: Iterable[Transaction], criteria: FilterCriteria
) -> Either[ValidationError, tuple[Transaction, ...]]:
    """Keep the transactions matching type, category and the closed date range.

    Order is preserved and the input is never modified. An unparseable bound
    or an unparseable date on a transaction that has to be compared against
    a bound is reported as Left(ValidationError) instead of a partial result.
    """
    trans = tuple(trans)

    kind = _criteria_type(criteria.type)
    start = _optional_date(criteria.start, "start date")
    end = _optional_date(criteria.end, "end date")
    for step in (kind, start, end):
        if step.is_left():
            log.warning("filter_rejected", error=step.get_error().code, value=repr(step.get_error().value))
            return Left(step.get_error())

    lo = start.get_or_else(None)
    hi = end.get_or_else(None)
    matches = [by_type(kind.get_or_else(ALL)), by_category(criteria.category)]

    result = []
    for t in trans:
        if not all(pred(t) for pred in matches):
            continue
        if lo is None and hi is None:
            result.append(t)
            continue
        day = parse_iso_date(t.date, f"date of transaction {t.id}")
        if day.is_left():
            log.warning("filter_rejected", error="invalid_date", transaction_id=t.id)
            return Left(day.get_error())
        if in_date_range(day.get_or_else(None), lo, hi):
            result.append(t)

    log.debug("transactions_filtered", total=len(trans), kept=len(result))
    return Right(tuple(result))


def category_options(trans: Iterable[Transaction], budget: Budget) -> tuple[str, ...]:
    """Names for a category selector: configured categories, then any other names seen."""
    names = [c.name for c in budget.categories]
    for t in trans:
        if t.category not in names:
            names.append(t.category)
    return tuple(names)
