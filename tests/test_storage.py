import json
from datetime import datetime, timezone

from finpal.storage import GUEST_SCOPE, LocalStore, StoreError
from finpal.transforms import BANK_ACCOUNTS, BUDGETS, TRANSACTIONS


def make_store(path=None):
    return LocalStore(path, clock=lambda: datetime(2024, 6, 1, 12, tzinfo=timezone.utc))


def expense(**changes):
    record = {"date": "2024-06-01", "category": "Groceries", "amount": 20, "description": "Milk"}
    record.update(changes)
    return record


def test_subscribe_delivers_current_collection_immediately():
    store = make_store()
    seen = []
    store.subscribe(GUEST_SCOPE, TRANSACTIONS, seen.append)
    assert seen == [()]


def test_create_assigns_id_and_notifies():
    store = make_store()
    seen = []
    store.subscribe(GUEST_SCOPE, TRANSACTIONS, seen.append)

    result = store.create(GUEST_SCOPE, TRANSACTIONS, expense())

    assert result.is_right()
    record = result.get_or_else(None)
    assert record["id"]
    assert record["createdAt"] == "2024-06-01T12:00:00+00:00"
    assert len(seen) == 2
    assert seen[-1][0]["id"] == record["id"]


def test_create_rejects_duplicate_id():
    store = make_store()
    store.create(GUEST_SCOPE, BUDGETS, {"id": "b1", "category": "Travel", "allocatedAmount": 10})
    result = store.create(GUEST_SCOPE, BUDGETS, {"id": "b1", "category": "Gifts", "allocatedAmount": 10})
    assert result.get_error()["error"] == "duplicate_id"


def test_update_merges_partial_record():
    store = make_store()
    created = store.create(GUEST_SCOPE, TRANSACTIONS, expense()).get_or_else(None)

    result = store.update(GUEST_SCOPE, TRANSACTIONS, created["id"], {"amount": 35, "id": "ignored"})

    updated = result.get_or_else(None)
    assert updated["amount"] == 35
    assert updated["id"] == created["id"]
    assert updated["description"] == "Milk"


def test_update_and_delete_missing_record():
    store = make_store()
    assert store.update(GUEST_SCOPE, TRANSACTIONS, "nope", {}).get_error()["error"] == "not_found"
    assert store.delete(GUEST_SCOPE, TRANSACTIONS, "nope").get_error()["error"] == "not_found"


def test_delete_account_leaves_transactions_dangling():
    store = make_store()
    acc = store.create(GUEST_SCOPE, BANK_ACCOUNTS, {"name": "Main", "startingBalance": 100}).get_or_else(None)
    store.create(GUEST_SCOPE, TRANSACTIONS, expense(bankAccountId=acc["id"]))

    assert store.delete(GUEST_SCOPE, BANK_ACCOUNTS, acc["id"]).is_right()

    snapshot = store.snapshot(GUEST_SCOPE)
    assert snapshot.accounts == ()
    assert snapshot.transactions[0].bank_account_id == acc["id"]


def test_unsubscribe_stops_updates():
    store = make_store()
    seen = []
    unsubscribe = store.subscribe(GUEST_SCOPE, TRANSACTIONS, seen.append)
    unsubscribe()
    store.create(GUEST_SCOPE, TRANSACTIONS, expense())
    assert len(seen) == 1


def test_unknown_scope_and_collection():
    store = make_store()
    assert store.create("user-42", TRANSACTIONS, expense()).get_error()["error"] == "unknown_scope"
    assert store.create(GUEST_SCOPE, "pets", {}).get_error()["error"] == "unknown_collection"

    errors = []
    store.subscribe("user-42", TRANSACTIONS, lambda records: None, errors.append)
    assert isinstance(errors[0], StoreError)


def test_persists_under_namespaced_keys(tmp_path):
    path = tmp_path / "guest.json"
    store = make_store(str(path))
    store.create(GUEST_SCOPE, TRANSACTIONS, expense(id="t1"))

    stored = json.loads(path.read_text(encoding="utf-8"))
    assert [r["id"] for r in stored["guest-expenses"]] == ["t1"]
    assert stored["guest-bankAccounts"] == []

    reopened = make_store(str(path))
    assert reopened.records(GUEST_SCOPE, TRANSACTIONS)[0]["description"] == "Milk"


def test_corrupt_file_reported_through_on_error(tmp_path):
    path = tmp_path / "guest.json"
    path.write_text("{not json", encoding="utf-8")
    store = make_store(str(path))

    errors, seen = [], []
    store.subscribe(GUEST_SCOPE, TRANSACTIONS, seen.append, errors.append)

    assert isinstance(errors[0], StoreError)
    assert seen == []
    assert store.snapshot(GUEST_SCOPE).transactions == ()


def test_write_failure_is_reported_and_rolled_back(tmp_path):
    store = make_store(str(tmp_path / "missing-dir" / "guest.json"))
    result = store.create(GUEST_SCOPE, TRANSACTIONS, expense())
    assert result.get_error()["error"] == "write_failed"
    assert store.records(GUEST_SCOPE, TRANSACTIONS) == ()
