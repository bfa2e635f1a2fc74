from datetime import date, datetime
from typing import Callable, Dict, List, NamedTuple

from budget_core.domain import FilterCriteria
from budget_core.log import get_logger
from budget_core.services import DashboardService, ReportService

__all__ = [
    'event_bus', 'TRANSACTIONS_CHANGED', 'BUDGET_CHANGED', 'FILTER_CHANGED',
    'Event', 'EventBus', 'register_default_handlers',
]

log = get_logger(__name__)


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    """Synchronous publish/subscribe; handlers run in subscription order."""

    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        if name not in self._subscribers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        log.debug("event_published", event_name=name, handlers=len(self._subscribers[name]))
        return [handler(event, payload) for handler in self._subscribers[name]]

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)


TRANSACTIONS_CHANGED = "TRANSACTIONS_CHANGED"
BUDGET_CHANGED = "BUDGET_CHANGED"
FILTER_CHANGED = "FILTER_CHANGED"

event_bus = EventBus()


def dashboard_handler(service: DashboardService) -> Handler:
    def _handle(event: Event, payload: dict) -> dict:
        result = service.snapshot(
            payload["transactions"],
            payload["budget"],
            payload.get("today") or date.today(),
            payload.get("confirmed_period"),
        )
        return {"view": "dashboard", "result": result}

    return _handle


def report_handler(service: ReportService) -> Handler:
    def _handle(event: Event, payload: dict) -> dict:
        criteria = payload.get("criteria") or FilterCriteria()
        return {"view": "report", "result": service.report(payload["transactions"], criteria)}

    return _handle


def register_default_handlers(
    bus: EventBus = event_bus,
    dashboard: DashboardService = None,
    reports: ReportService = None,
) -> None:
    on_dashboard = dashboard_handler(dashboard or DashboardService())
    on_report = report_handler(reports or ReportService())

    bus.subscribe(TRANSACTIONS_CHANGED, on_dashboard)
    bus.subscribe(TRANSACTIONS_CHANGED, on_report)
    bus.subscribe(BUDGET_CHANGED, on_dashboard)
    bus.subscribe(FILTER_CHANGED, on_report)
