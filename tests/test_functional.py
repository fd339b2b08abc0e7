from finpal.domain import BankAccount, Budget, SavingsGoal, Transaction
from finpal.functional import (
    Left,
    Nothing,
    Right,
    Some,
    find_account,
    pipe,
    validate_account,
    validate_budget,
    validate_goal,
    validate_transaction,
)


def make_tx(**changes):
    base = dict(id="t1", date="2024-06-01", category="Groceries", amount=25.0)
    base.update(changes)
    return Transaction(**base)


def test_maybe_map_and_default():
    assert Some(5).map(lambda x: x * 2).get_or_else(0) == 10
    nothing = Nothing().map(lambda x: x * 2)
    assert nothing.is_none()
    assert nothing.get_or_else(0) == 0


def test_either_map_and_bind():
    def half(x):
        return Left("odd") if x % 2 else Right(x // 2)

    assert Right(8).bind(half).bind(half) == Right(2)
    failed = Right(6).bind(half).bind(half)
    assert failed.is_left()
    assert failed.get_error() == "odd"
    assert failed.map(lambda x: x + 1) == failed
    assert failed.get_or_else(-1) == -1


def test_pipe_runs_left_to_right():
    assert pipe(3, lambda x: x + 1, lambda x: x * 2) == 8


def test_find_account():
    accounts = (BankAccount("a1", "Main", 0), BankAccount("a2", "Spare", 0))
    assert find_account(accounts, "a2") == Some(accounts[1])
    assert find_account(accounts, "deleted").is_none()
    assert find_account(accounts, None).is_none()


def test_validate_transaction_ok():
    t = make_tx()
    assert validate_transaction(t) == Right(t)


def test_validate_transaction_rejects_non_positive_amount():
    result = validate_transaction(make_tx(amount=0))
    assert result.get_error()["error"] == "invalid_amount"
    assert validate_transaction(make_tx(amount=-5)).is_left()


def test_validate_transaction_unknown_category():
    result = validate_transaction(make_tx(category="Yachts"))
    assert result.get_error()["error"] == "category_not_found"


def test_validate_transaction_recurrence():
    assert validate_transaction(make_tx(is_recurring=True, recurrence_frequency="monthly")).is_right()
    result = validate_transaction(make_tx(is_recurring=True, recurrence_frequency="hourly"))
    assert result.get_error()["error"] == "invalid_recurrence"


def test_validate_transaction_account_reference():
    accounts = (BankAccount("a1", "Main", 0),)
    assert validate_transaction(make_tx(bank_account_id="a1"), accounts).is_right()
    result = validate_transaction(make_tx(bank_account_id="zz"), accounts)
    assert result.get_error()["account_id"] == "zz"


def test_validate_account():
    assert validate_account(BankAccount("a1", "Main", 0)).is_right()
    assert validate_account(BankAccount("a1", "Main", -1)).get_error()["error"] == "invalid_amount"
    assert validate_account(BankAccount("a1", "  ", 10)).get_error()["error"] == "missing_name"


def test_validate_budget():
    existing = (Budget("b1", "Groceries", 300),)
    assert validate_budget(Budget("b2", "Travel", 100), existing).is_right()
    assert validate_budget(Budget("b2", "Travel", -100)).get_error()["error"] == "invalid_amount"
    assert validate_budget(Budget("b2", "Groceries", 100), existing).get_error()["error"] == "duplicate_budget"
    # editing the existing budget keeps its category
    assert validate_budget(Budget("b1", "Groceries", 350), existing).is_right()


def test_validate_goal():
    assert validate_goal(SavingsGoal("g1", "Bike", 300, 100)).is_right()
    assert validate_goal(SavingsGoal("g1", "Bike", 0)).is_left()
    assert validate_goal(SavingsGoal("g1", "Bike", 300, 400)).is_left()
    assert validate_goal(SavingsGoal("g1", "Bike", 300, -1)).is_left()
