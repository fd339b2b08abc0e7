import logging
from datetime import datetime

from finpal.domain import Budget, Transaction
from finpal.transforms import (
    account_from_record,
    budgets_from_records,
    parse_amount,
    snapshot_from_records,
    to_record,
    transaction_from_record,
    transactions_from_records,
)


def test_transaction_from_stored_record():
    t = transaction_from_record({
        "id": "t1",
        "date": "2024-06-01",
        "time": "08:15",
        "category": "Groceries",
        "amount": "12.5",
        "description": "Milk",
        "bankAccountId": "a1",
        "isRecurring": True,
        "recurrenceFrequency": "weekly",
        "createdAt": "2024-06-01T10:00:00Z",
        "userId": "u1",
    })
    assert t == Transaction(
        id="t1",
        date="2024-06-01",
        category="Groceries",
        amount=12.5,
        description="Milk",
        time="08:15",
        bank_account_id="a1",
        is_recurring=True,
        recurrence_frequency="weekly",
        created_at=datetime(2024, 6, 1, 10, 0),
        user_id="u1",
    )


def test_null_fields_fall_back_to_defaults():
    t = transaction_from_record({"id": 7, "date": "2024-06-01", "category": "Other", "amount": 3, "bankAccountId": None})
    assert t.id == "7"
    assert t.bank_account_id is None
    assert t.description == ""


def test_bad_amount_is_dropped_with_warning(caplog):
    records = [
        {"id": "t1", "date": "2024-06-01", "category": "Other", "amount": "lots"},
        {"id": "t2", "date": "2024-06-01", "category": "Other", "amount": 5},
    ]
    with caplog.at_level(logging.WARNING, logger="finpal.transforms"):
        trans = transactions_from_records(records)
    assert [t.id for t in trans] == ["t2"]
    assert "t1" in caplog.text


def test_missing_required_field_is_dropped():
    assert transaction_from_record({"id": "t1", "category": "Other", "amount": 5}) is None


def test_parse_amount():
    assert parse_amount("10.25") == 10.25
    assert parse_amount(3) == 3.0
    assert parse_amount(True) is None
    assert parse_amount("nan") is None
    assert parse_amount(None) is None


def test_account_and_budget_records():
    acc = account_from_record({"id": "a1", "name": "Main", "startingBalance": "250", "color": "green"})
    assert acc.starting_balance == 250
    assert acc.color == "green"

    budgets = budgets_from_records([{"id": "b1", "category": "Travel", "allocatedAmount": 100, "spentAmount": 20}])
    assert budgets == (Budget("b1", "Travel", 100, 20),)


def test_to_record_uses_stored_keys():
    t = Transaction(id="t1", date="2024-06-01", category="Gifts", amount=9, bank_account_id="a1",
                    created_at=datetime(2024, 6, 1, 9))
    record = to_record(t)
    assert record["bankAccountId"] == "a1"
    assert record["createdAt"] == "2024-06-01T09:00:00"
    assert transaction_from_record(record) == t


def test_snapshot_from_stored_collections():
    snapshot = snapshot_from_records({
        "expenses": [{"id": "t1", "date": "2024-06-01", "category": "Groceries", "amount": 20}],
        "bankAccounts": [{"id": "a1", "name": "Main", "startingBalance": 100}],
        "savingsGoals": [{"id": "g1", "name": "Bike", "targetAmount": 300, "currentAmount": 20}],
    })
    assert len(snapshot.transactions) == 1
    assert snapshot.accounts[0].name == "Main"
    assert snapshot.budgets == ()
    assert snapshot.goals[0].target_amount == 300
