import logging
import math
from dataclasses import asdict
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, TypeVar

from finpal.dates import parse_timestamp
from finpal.domain import BankAccount, Budget, SavingsGoal, Snapshot, Transaction

logger = logging.getLogger(__name__)

E = TypeVar("E", Transaction, BankAccount, Budget, SavingsGoal)

# stored collection names, as kept by the guest store and in seed files
TRANSACTIONS = "expenses"
BANK_ACCOUNTS = "bankAccounts"
BUDGETS = "budgets"
SAVINGS_GOALS = "savingsGoals"
COLLECTIONS = (TRANSACTIONS, BANK_ACCOUNTS, BUDGETS, SAVINGS_GOALS)

# dataclass field -> stored record key
_FIELDS: Dict[type, Dict[str, str]] = {
    Transaction: {
        "id": "id",
        "date": "date",
        "category": "category",
        "amount": "amount",
        "description": "description",
        "time": "time",
        "bank_account_id": "bankAccountId",
        "is_recurring": "isRecurring",
        "recurrence_frequency": "recurrenceFrequency",
        "recurrence_end_date": "recurrenceEndDate",
        "created_at": "createdAt",
        "user_id": "userId",
    },
    BankAccount: {
        "id": "id",
        "name": "name",
        "starting_balance": "startingBalance",
        "color": "color",
        "user_id": "userId",
    },
    Budget: {
        "id": "id",
        "category": "category",
        "allocated_amount": "allocatedAmount",
        "spent_amount": "spentAmount",
        "user_id": "userId",
    },
    SavingsGoal: {
        "id": "id",
        "name": "name",
        "target_amount": "targetAmount",
        "current_amount": "currentAmount",
        "deadline": "deadline",
        "image_url": "imageUrl",
        "user_id": "userId",
    },
}

_AMOUNTS = {
    Transaction: ("amount",),
    BankAccount: ("starting_balance",),
    Budget: ("allocated_amount", "spent_amount"),
    SavingsGoal: ("target_amount", "current_amount"),
}


def parse_amount(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    return amount if math.isfinite(amount) else None


def _from_record(cls: type, record: Dict[str, Any]) -> Optional[Any]:
    kwargs = {}
    for attr, key in _FIELDS[cls].items():
        if key in record and record[key] is not None:
            kwargs[attr] = record[key]

    for attr in _AMOUNTS[cls]:
        if attr not in kwargs:
            continue
        amount = parse_amount(kwargs[attr])
        if amount is None:
            logger.warning("Invalid %s for %s ID %s: %r", attr, cls.__name__, record.get("id"), kwargs[attr])
            return None
        kwargs[attr] = amount

    for attr, value in kwargs.items():
        if attr == "created_at":
            kwargs[attr] = parse_timestamp(value)
        elif attr == "is_recurring":
            kwargs[attr] = bool(value)
        elif attr not in _AMOUNTS[cls]:
            kwargs[attr] = str(value)

    try:
        return cls(**kwargs)
    except TypeError as e:
        logger.warning("Skipping malformed %s record %s: %s", cls.__name__, record.get("id"), e)
        return None


def transaction_from_record(record: Dict[str, Any]) -> Optional[Transaction]:
    return _from_record(Transaction, record)


def account_from_record(record: Dict[str, Any]) -> Optional[BankAccount]:
    return _from_record(BankAccount, record)


def budget_from_record(record: Dict[str, Any]) -> Optional[Budget]:
    return _from_record(Budget, record)


def goal_from_record(record: Dict[str, Any]) -> Optional[SavingsGoal]:
    return _from_record(SavingsGoal, record)


def _collect(convert: Callable[[Dict[str, Any]], Optional[E]], records: Iterable[Dict[str, Any]]) -> Tuple[E, ...]:
    return tuple(e for e in map(convert, records) if e is not None)


def transactions_from_records(records: Iterable[Dict[str, Any]]) -> Tuple[Transaction, ...]:
    return _collect(transaction_from_record, records)


def accounts_from_records(records: Iterable[Dict[str, Any]]) -> Tuple[BankAccount, ...]:
    return _collect(account_from_record, records)


def budgets_from_records(records: Iterable[Dict[str, Any]]) -> Tuple[Budget, ...]:
    return _collect(budget_from_record, records)


def goals_from_records(records: Iterable[Dict[str, Any]]) -> Tuple[SavingsGoal, ...]:
    return _collect(goal_from_record, records)


def to_record(entity: E) -> Dict[str, Any]:
    values = asdict(entity)
    record = {}
    for attr, key in _FIELDS[type(entity)].items():
        value = values[attr]
        if isinstance(value, datetime):
            value = value.isoformat()
        record[key] = value
    return record


def snapshot_from_records(data: Dict[str, Iterable[Dict[str, Any]]]) -> Snapshot:
    return Snapshot(
        transactions=transactions_from_records(data.get(TRANSACTIONS, ())),
        accounts=accounts_from_records(data.get(BANK_ACCOUNTS, ())),
        budgets=budgets_from_records(data.get(BUDGETS, ())),
        goals=goals_from_records(data.get(SAVINGS_GOALS, ())),
    )
