import logging
from datetime import date
from typing import Callable, Iterable, Iterator, Optional, Tuple

from finpal.dates import parse_date
from finpal.domain import ALL_ACCOUNTS, NO_ACCOUNT, Transaction, TransactionFilters
from finpal.functional import pipe
from finpal.ordering import sort_transactions

logger = logging.getLogger(__name__)

Predicate = Callable[[Transaction], bool]


def iter_transactions(trans: Iterable[Transaction], pred: Predicate) -> Iterator[Transaction]:
    for t in trans:
        if pred(t):
            yield t


def _bound(value, name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    bound = parse_date(value)
    if bound is None:
        logger.warning("Ignoring unparseable %s filter: %r", name, value)
    return bound


def _dated(t: Transaction) -> Optional[date]:
    day = parse_date(t.date)
    if day is None:
        logger.warning("Invalid date format for entry ID %s: %s", t.id, t.date)
    return day


def by_start_date(start: date) -> Predicate:
    def _filter(t: Transaction) -> bool:
        day = _dated(t)
        return day is not None and day >= start

    return _filter


def by_end_date(end: date) -> Predicate:
    def _filter(t: Transaction) -> bool:
        day = _dated(t)
        return day is not None and day <= end

    return _filter


def by_category(category: str) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return t.category == category

    return _filter


def by_description(text: str) -> Predicate:
    needle = text.lower()

    def _filter(t: Transaction) -> bool:
        return needle in (t.description or "").lower()

    return _filter


def by_bank_account(selector: str) -> Predicate:
    if selector == NO_ACCOUNT:
        return lambda t: not t.bank_account_id
    return lambda t: t.bank_account_id == selector


def build_predicates(filters: TransactionFilters) -> Tuple[Predicate, ...]:
    preds = []
    start = _bound(filters.start_date, "start date")
    if start is not None:
        preds.append(by_start_date(start))
    end = _bound(filters.end_date, "end date")
    if end is not None:
        preds.append(by_end_date(end))
    if filters.category:
        preds.append(by_category(filters.category))
    if filters.description:
        preds.append(by_description(filters.description))
    if filters.bank_account and filters.bank_account != ALL_ACCOUNTS:
        preds.append(by_bank_account(filters.bank_account))
    return tuple(preds)


def filter_transactions(
    trans: Iterable[Transaction], filters: Optional[TransactionFilters] = None
) -> Tuple[Transaction, ...]:
    """Apply every set filter (AND) and return the matches most recent first."""
    preds = build_predicates(filters or TransactionFilters())
    stages = [lambda ts, p=p: iter_transactions(ts, p) for p in preds]
    return sort_transactions(pipe(trans, *stages))
