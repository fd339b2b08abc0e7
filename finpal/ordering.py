from datetime import datetime
from typing import Iterable, Tuple

from finpal.dates import parse_moment, parse_timestamp
from finpal.domain import Transaction

# (present, value) pairs: with reverse=True present values come first,
# newest to oldest, and every missing value compares equal.
# Unparseable dates always sort last rather than landing wherever the
# comparison happens to put them, so the order is total.
_MISSING = (False, datetime.min)


def moment_key(t: Transaction) -> Tuple[bool, datetime]:
    moment = parse_moment(t.date, t.time)
    return _MISSING if moment is None else (True, moment)


def created_key(t: Transaction) -> Tuple[bool, datetime]:
    created = parse_timestamp(t.created_at)
    return _MISSING if created is None else (True, created)


def sort_transactions(trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    """Most recent first.

    1. date + time, descending; unparseable dates go last.
    2. created_at, descending; missing timestamps go last.
    3. input order (both sorts are stable).
    """
    by_created = sorted(trans, key=created_key, reverse=True)
    return tuple(sorted(by_created, key=moment_key, reverse=True))
