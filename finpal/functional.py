from abc import ABC, abstractmethod
from typing import Callable, Generic, Iterable, TypeVar

from finpal.domain import (
    ALL_CATEGORIES,
    RECURRENCE_FREQUENCIES,
    BankAccount,
    Budget,
    SavingsGoal,
    Transaction,
)

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):
    """Outcome of an edge operation: ``Right(value)`` or ``Left(error)``."""

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass

    def is_left(self) -> bool:
        return not self.is_right()


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return self

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def pipe(x, *funcs):
    """Pipe a value through a series of functions.

    pipe(x, f, g, h) == h(g(f(x)))
    """
    res = x
    for f in funcs:
        res = f(res)
    return res


def find_account(accounts: Iterable[BankAccount], account_id) -> Maybe[BankAccount]:
    if not account_id:
        return Nothing()
    for acc in accounts:
        if acc.id == account_id:
            return Some(acc)
    return Nothing()


def _invalid(error: str, message: str, **details) -> Left:
    return Left({"error": error, "message": message, **details})


def validate_transaction(
    t: Transaction,
    accounts: tuple[BankAccount, ...] = (),
    categories: tuple[str, ...] = ALL_CATEGORIES,
) -> Either[dict, Transaction]:
    if not t.amount > 0:
        return _invalid("invalid_amount", "Amount must be greater than zero", amount=t.amount)

    if t.category not in categories:
        return _invalid("category_not_found", f"Unknown category {t.category}", category=t.category)

    if t.is_recurring and t.recurrence_frequency not in RECURRENCE_FREQUENCIES:
        return _invalid(
            "invalid_recurrence",
            f"Unknown recurrence frequency {t.recurrence_frequency}",
            recurrence_frequency=t.recurrence_frequency,
        )

    if t.bank_account_id and find_account(accounts, t.bank_account_id).is_none():
        return _invalid(
            "account_not_found",
            f"Account with ID {t.bank_account_id} does not exist",
            account_id=t.bank_account_id,
        )

    return Right(t)


def validate_account(acc: BankAccount) -> Either[dict, BankAccount]:
    if not acc.name.strip():
        return _invalid("missing_name", "Account name is required")
    if acc.starting_balance < 0:
        return _invalid(
            "invalid_amount",
            "Starting balance cannot be negative",
            starting_balance=acc.starting_balance,
        )
    return Right(acc)


def validate_budget(b: Budget, existing: tuple[Budget, ...] = ()) -> Either[dict, Budget]:
    if not b.allocated_amount > 0:
        return _invalid(
            "invalid_amount",
            "Allocated amount must be greater than zero",
            allocated_amount=b.allocated_amount,
        )
    if any(other.category == b.category and other.id != b.id for other in existing):
        return _invalid(
            "duplicate_budget",
            f"A budget for {b.category} already exists",
            category=b.category,
        )
    return Right(b)


def validate_goal(g: SavingsGoal) -> Either[dict, SavingsGoal]:
    if not g.name.strip():
        return _invalid("missing_name", "Goal name is required")
    if not g.target_amount > 0:
        return _invalid(
            "invalid_amount",
            "Target amount must be greater than zero",
            target_amount=g.target_amount,
        )
    if not 0 <= g.current_amount <= g.target_amount:
        return _invalid(
            "invalid_amount",
            "Current amount must be between zero and the target",
            current_amount=g.current_amount,
            target_amount=g.target_amount,
        )
    return Right(g)
