import re
from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, Generic, TypeVar, Union

from budget_core.domain import Budget, Category, Transaction, TransactionType, ValidationError
from budget_core.log import get_logger

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')

log = get_logger(__name__)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):
    """Result of an engine step: Right(value) on success, Left(error) otherwise."""

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return self

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def parse_iso_date(value: Union[str, date], field: str = "date") -> Either[ValidationError, date]:
    """Parse a YYYY-MM-DD calendar date; datetime-style suffixes are not accepted."""
    if isinstance(value, datetime):
        return Right(value.date())
    if isinstance(value, date):
        return Right(value)
    text = str(value).strip() if value is not None else ""
    if _ISO_DATE.match(text):
        try:
            return Right(date.fromisoformat(text))
        except ValueError:
            pass
    return Left(ValidationError(
        code="invalid_date",
        message=f"{field} is not an ISO calendar date (YYYY-MM-DD): {value!r}",
        value=value,
    ))


def parse_amount_strict(raw: object) -> Either[ValidationError, Decimal]:
    try:
        amount = Decimal(str(raw).strip().replace(",", ""))
    except (InvalidOperation, ValueError):
        return Left(ValidationError(
            code="invalid_amount",
            message=f"amount is not a number: {raw!r}",
            value=raw,
        ))
    if not amount.is_finite():
        return Left(ValidationError(
            code="invalid_amount",
            message=f"amount is not finite: {raw!r}",
            value=raw,
        ))
    return Right(amount)


def parse_amount(raw: object) -> Decimal:
    """Boundary parser for free-text numeric fields.

    Anything that is not a finite number becomes Decimal(0) before it can
    reach the engine. The normalization is logged.
    """
    result = parse_amount_strict(raw)
    if result.is_left():
        log.warning("amount_defaulted_to_zero", raw=repr(raw))
        return Decimal(0)
    return result.get_or_else(Decimal(0))


def safe_category(budget: Budget, name: str) -> Maybe[Category]:
    for cat in budget.categories:
        if cat.name == name:
            return Some(cat)
    return Nothing()


def validate_transaction(t: Transaction, budget: Budget) -> Either[ValidationError, Transaction]:
    if t.amount < 0:
        return Left(ValidationError(
            code="negative_amount",
            message=f"Transaction {t.id} has a negative amount",
            value=t.amount,
        ))

    parsed = parse_iso_date(t.date)
    if parsed.is_left():
        return Left(parsed.get_error())

    if t.type == TransactionType.EXPENSE and safe_category(budget, t.category).is_none():
        return Left(ValidationError(
            code="category_not_found",
            message=f"Expense category {t.category} is not configured",
            value=t.category,
        ))

    return Right(t)


def pipe(x, *funcs):
    """Pipe a value through a series of functions.

    pipe(x, f, g, h) == h(g(f(x)))
    """
    res = x
    for f in funcs:
        res = f(res)
    return res
