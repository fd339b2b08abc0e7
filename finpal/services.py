import logging
from datetime import date, datetime
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from finpal import memo
from finpal.domain import Snapshot, TransactionFilters
from finpal.events import OnError
from finpal.functional import Either
from finpal.storage import Store
from finpal.transforms import COLLECTIONS, snapshot_from_records, to_record

logger = logging.getLogger(__name__)

View = Callable[[Snapshot, date, Optional[TransactionFilters]], Any]

DEFAULT_VIEWS: Tuple[Tuple[str, View], ...] = (
    ("balances", lambda s, today, f: memo.account_balances(s.accounts, s.transactions)),
    ("transactions", lambda s, today, f: memo.filtered_transactions(s.transactions, f)),
    ("monthly_trend", lambda s, today, f: memo.monthly_expense_trend(s.transactions)),
    ("category_breakdown", lambda s, today, f: memo.category_breakdown(s.transactions, today)),
    ("budget_comparison", lambda s, today, f: memo.budget_comparison(s.budgets, s.transactions, today)),
    ("dashboard", lambda s, today, f: memo.dashboard_summary(s.transactions, today)),
)


class ReportService:
    """Builds every derived view for one snapshot.

    views: sequence of (name, function) pairs; each function takes
    (snapshot, today, filters) and returns the view.
    """

    def __init__(self, views: Sequence[Tuple[str, View]] = DEFAULT_VIEWS):
        self.views = views

    def build(self, snapshot: Snapshot, today: date, filters: Optional[TransactionFilters] = None) -> Dict[str, Any]:
        report = {"today": today, "snapshot": snapshot, "errors": [], "result": {}}
        for name, view in self.views:
            try:
                report["result"][name] = view(snapshot, today, filters)
            except Exception as e:
                logger.exception("View %s failed", name)
                report["errors"].append({"view": name, "message": str(e)})
                report["result"][name] = None
        return report


# identity fields the store owns; an update never rewrites them
_KEPT_ON_UPDATE = ("id", "createdAt", "userId")


def save_entity(store: Store, scope: str, collection: str, validation: Either[dict, Any]) -> Either[dict, dict]:
    """Write a validated entity back to storage.

    An entity without an id is created and the store assigns one. Otherwise
    the stored record is updated in place; empty optional fields are sent as
    None so an edit can clear them. Validation errors pass through untouched.
    """
    def write(entity) -> Either[dict, dict]:
        record = to_record(entity)
        if not entity.id:
            return store.create(scope, collection, {k: v for k, v in record.items() if v is not None and k != "id"})
        partial = {k: v for k, v in record.items() if k not in _KEPT_ON_UPDATE}
        return store.update(scope, collection, entity.id, partial)

    return validation.bind(write)


def _today(clock: Callable[[], datetime]) -> date:
    now = clock()
    return now.date() if isinstance(now, datetime) else now


class LiveViews:
    """Keeps derived views current for one user scope.

    Subscribes to all four collections and rebuilds every view from scratch
    whenever any of them changes. Until a collection arrives it is treated
    as empty. Storage errors go to ``on_error`` and are also queued until
    ``drain_errors`` collects them.
    """

    def __init__(
        self,
        store: Store,
        scope: str,
        on_update: Callable[[Dict[str, Any]], None],
        on_error: Optional[OnError] = None,
        clock: Callable[[], datetime] = datetime.now,
        service: Optional[ReportService] = None,
        filters: Optional[TransactionFilters] = None,
    ):
        self.on_update = on_update
        self.on_error = on_error
        self.clock = clock
        self.service = service or ReportService()
        self.filters = filters
        self.report: Optional[Dict[str, Any]] = None
        self.errors: List[Exception] = []
        self._records: Dict[str, tuple] = {name: () for name in COLLECTIONS}
        self._unsubscribers = [
            store.subscribe(scope, name, partial(self._changed, name), self._failed)
            for name in COLLECTIONS
        ]
        if self.report is None:
            self.refresh()

    def _changed(self, name: str, records) -> None:
        self._records[name] = tuple(records)
        self.refresh()

    def _failed(self, error: Exception) -> None:
        logger.error("Storage feed failed: %s", error)
        self.errors.append(error)
        if self.on_error is not None:
            self.on_error(error)

    def drain_errors(self) -> List[Exception]:
        errors, self.errors = self.errors, []
        return errors

    def set_filters(self, filters: Optional[TransactionFilters]) -> None:
        self.filters = filters
        self.refresh()

    def refresh(self) -> Dict[str, Any]:
        snapshot = snapshot_from_records(self._records)
        self.report = self.service.build(snapshot, _today(self.clock), self.filters)
        self.on_update(self.report)
        return self.report

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
