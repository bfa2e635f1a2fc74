from datetime import date, datetime
from decimal import Decimal

from structlog.testing import capture_logs

from budget_core.domain import Budget, Category, FilterCriteria, Transaction, TransactionType
from budget_core.events import (
    BUDGET_CHANGED,
    FILTER_CHANGED,
    TRANSACTIONS_CHANGED,
    Event,
    EventBus,
    register_default_handlers,
)


def make_payload(**extra):
    return {
        "transactions": (
            Transaction("t1", TransactionType.EXPENSE, Decimal("40"), "Food", "2024-05-04", "Lunch"),
        ),
        "budget": Budget(Decimal("100"), (Category("c1", "Food", Decimal("50"), "#ef4444"),)),
        "today": date(2024, 5, 10),
        **extra,
    }


def test_event_creation():
    event = Event(name=TRANSACTIONS_CHANGED, ts=datetime.now().isoformat(), payload={"n": 1})
    assert event.name == TRANSACTIONS_CHANGED
    assert event.payload["n"] == 1


def test_subscribe_publish_unsubscribe():
    bus = EventBus()
    seen = []

    def handler(event: Event, payload: dict) -> dict:
        seen.append(event.name)
        return {"ok": True}

    bus.subscribe(FILTER_CHANGED, handler)
    assert bus.publish(FILTER_CHANGED, {}) == [{"ok": True}]
    bus.unsubscribe(FILTER_CHANGED, handler)
    assert bus.publish(FILTER_CHANGED, {}) == []
    assert seen == [FILTER_CHANGED]


def test_publish_without_subscribers():
    assert EventBus().publish(BUDGET_CHANGED, {}) == []


def test_default_handlers_recompute_views():
    bus = EventBus()
    register_default_handlers(bus)

    results = bus.publish(TRANSACTIONS_CHANGED, make_payload())
    assert [r["view"] for r in results] == ["dashboard", "report"]
    dashboard = results[0]["result"].get_or_else(None)
    assert dashboard["expenses"] == Decimal("40")

    (budget_result,) = bus.publish(BUDGET_CHANGED, make_payload())
    assert budget_result["view"] == "dashboard"


def test_filter_changed_uses_criteria():
    bus = EventBus()
    register_default_handlers(bus)
    (result,) = bus.publish(FILTER_CHANGED, make_payload(criteria=FilterCriteria(start="2024-06-01")))
    assert result["result"].get_or_else(None)["transactions"] == ()

    (bad,) = bus.publish(FILTER_CHANGED, make_payload(criteria=FilterCriteria(end="June")))
    assert bad["result"].is_left()


def test_publish_logs_event_name():
    bus = EventBus()
    bus.subscribe(FILTER_CHANGED, lambda event, payload: {"seen": event.name})
    with capture_logs() as logs:
        assert bus.publish(FILTER_CHANGED, {}) == [{"seen": FILTER_CHANGED}]
    published = [e for e in logs if e["event"] == "event_published"]
    assert published[0]["event_name"] == FILTER_CHANGED
    assert published[0]["handlers"] == 1
