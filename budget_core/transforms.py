import json
from decimal import Decimal
from typing import Tuple
from uuid import uuid4

from budget_core.domain import Budget, Category, RolloverPolicy, Transaction, TransactionType, ValidationError
from budget_core.functional import Either, Left, Right, parse_amount
from budget_core.log import get_logger

log = get_logger(__name__)

# Cycled through when a category is added
PALETTE = ("#ef4444", "#3b82f6", "#eab308", "#a855f7", "#22c55e",
           "#ec4899", "#6366f1", "#14b8a6", "#f97316")


def transaction_from_dict(d: dict) -> Transaction:
    return Transaction(
        id=str(d.get("id") or uuid4()),
        type=TransactionType(d["type"]),
        amount=parse_amount(d.get("amount")),
        category=d.get("category", ""),
        date=d.get("date", ""),
        description=d.get("description") or "",
    )


def category_from_dict(d: dict) -> Category:
    return Category(
        id=str(d["id"]),
        name=d["name"],
        budget=parse_amount(d.get("budget")),
        color=d.get("color", PALETTE[0]),
    )


def budget_from_dict(d: dict) -> Budget:
    return Budget(
        total=parse_amount(d.get("total")),
        categories=tuple(category_from_dict(c) for c in d.get("categories", [])),
        rollover=RolloverPolicy(d.get("rolloverOption") or RolloverPolicy.AUTO_RESET),
    )


def load_seed(path) -> Tuple[Tuple[Transaction, ...], Budget]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    transactions = tuple(transaction_from_dict(t) for t in data.get("transactions", []))
    budget = budget_from_dict(data.get("budget", {}))
    log.info("seed_loaded", path=str(path), transactions=len(transactions),
             categories=len(budget.categories))
    return transactions, budget


def add_transaction(
    trans: Tuple[Transaction, ...], t: Transaction
) -> Tuple[Transaction, ...]:
    # newest first
    return (t,) + tuple(trans)


def update_transaction(
    trans: Tuple[Transaction, ...], updated: Transaction
) -> Tuple[Transaction, ...]:
    return tuple(updated if t.id == updated.id else t for t in trans)


def delete_transaction(
    trans: Tuple[Transaction, ...], tid: str
) -> Tuple[Transaction, ...]:
    return tuple(t for t in trans if t.id != tid)


def _name_taken(budget: Budget, name: str, exclude_id: str = None) -> bool:
    return any(c.name == name and c.id != exclude_id for c in budget.categories)


def _duplicate(name: str) -> ValidationError:
    return ValidationError(
        code="duplicate_category",
        message=f"A category named {name} already exists",
        value=name,
    )


def add_category(
    budget: Budget, name: str, limit: Decimal = Decimal(0)
) -> Either[ValidationError, Budget]:
    if _name_taken(budget, name):
        return Left(_duplicate(name))
    cat = Category(
        id=str(uuid4()),
        name=name,
        budget=limit,
        color=PALETTE[len(budget.categories) % len(PALETTE)],
    )
    return Right(Budget(total=budget.total, categories=budget.categories + (cat,), rollover=budget.rollover))


def update_category(budget: Budget, updated: Category) -> Either[ValidationError, Budget]:
    if _name_taken(budget, updated.name, exclude_id=updated.id):
        return Left(_duplicate(updated.name))
    return Right(Budget(
        total=budget.total,
        categories=tuple(updated if c.id == updated.id else c for c in budget.categories),
        rollover=budget.rollover,
    ))


def remove_category(budget: Budget, cid: str) -> Budget:
    return Budget(
        total=budget.total,
        categories=tuple(c for c in budget.categories if c.id != cid),
        rollover=budget.rollover,
    )


def set_budget_total(budget: Budget, total: Decimal) -> Budget:
    return Budget(total=total, categories=budget.categories, rollover=budget.rollover)


def set_rollover_policy(budget: Budget, policy: RolloverPolicy) -> Budget:
    return Budget(total=budget.total, categories=budget.categories, rollover=policy)
