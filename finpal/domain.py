from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple

INCOME_CATEGORIES: Tuple[str, ...] = ("Salary", "Bonus", "Investment", "Freelance", "Other Income")
EXPENSE_CATEGORIES: Tuple[str, ...] = (
    "Groceries",
    "Utilities",
    "Rent/Mortgage",
    "Transportation",
    "Entertainment",
    "Healthcare",
    "Dining Out",
    "Education",
    "Shopping",
    "Travel",
    "Gifts",
    "Subscriptions",
    "Other",
)
ALL_CATEGORIES: Tuple[str, ...] = tuple(dict.fromkeys(EXPENSE_CATEGORIES + INCOME_CATEGORIES))

RECURRENCE_FREQUENCIES: Tuple[str, ...] = ("daily", "weekly", "monthly", "yearly")
ACCOUNT_COLORS: Tuple[str, ...] = ("blue", "green", "red", "yellow", "purple", "orange", "pink", "gray")

# chart palette, indexed by rank
PALETTE: Tuple[str, ...] = (
    "#2563eb",
    "#16a34a",
    "#f59e0b",
    "#dc2626",
    "#9333ea",
    "#0f766e",
    "#db2777",
)

# bank account selector values for TransactionFilters
ALL_ACCOUNTS = "__all__"
NO_ACCOUNT = "__none__"


class EntryKind(Enum):
    INCOME = "income"
    EXPENSE = "expense"


def classify(category: str, income_categories: Tuple[str, ...] = INCOME_CATEGORIES) -> EntryKind:
    return EntryKind.INCOME if category in income_categories else EntryKind.EXPENSE


def is_income(category: str, income_categories: Tuple[str, ...] = INCOME_CATEGORIES) -> bool:
    return classify(category, income_categories) is EntryKind.INCOME


def is_expense(category: str, income_categories: Tuple[str, ...] = INCOME_CATEGORIES) -> bool:
    return classify(category, income_categories) is EntryKind.EXPENSE


def progress_percentage(part: float, whole: float) -> float:
    if whole <= 0:
        return 0.0
    return min(100.0, max(0.0, part / whole * 100))


@dataclass(frozen=True)
class Transaction:
    id: str
    date: str                    # calendar date, e.g. "2025-09-01"
    category: str
    amount: float                # always positive, direction comes from category
    description: str = ""
    time: Optional[str] = None   # clock time, e.g. "14:30"
    bank_account_id: Optional[str] = None
    is_recurring: bool = False
    recurrence_frequency: Optional[str] = None
    recurrence_end_date: Optional[str] = None
    created_at: Optional[datetime] = None
    user_id: Optional[str] = None

    @property
    def kind(self) -> EntryKind:
        return classify(self.category)


@dataclass(frozen=True)
class BankAccount:
    id: str
    name: str
    starting_balance: float
    color: str = "blue"
    user_id: Optional[str] = None


# spent_amount is the stored value shown on the budgets page
@dataclass(frozen=True)
class Budget:
    id: str
    category: str
    allocated_amount: float
    spent_amount: float = 0.0
    user_id: Optional[str] = None


@dataclass(frozen=True)
class SavingsGoal:
    id: str
    name: str
    target_amount: float
    current_amount: float = 0.0
    deadline: Optional[str] = None
    image_url: Optional[str] = None
    user_id: Optional[str] = None


@dataclass(frozen=True)
class Snapshot:
    transactions: Tuple[Transaction, ...] = ()
    accounts: Tuple[BankAccount, ...] = ()
    budgets: Tuple[Budget, ...] = ()
    goals: Tuple[SavingsGoal, ...] = ()


@dataclass(frozen=True)
class TransactionFilters:
    start_date: Optional[date | str] = None
    end_date: Optional[date | str] = None
    category: str = ""
    description: str = ""
    bank_account: str = ALL_ACCOUNTS


@dataclass(frozen=True)
class AccountView:
    account: BankAccount
    total_debits: float
    current_balance: float
    transactions: Tuple[Transaction, ...] = ()

    @property
    def id(self) -> str:
        return self.account.id

    @property
    def name(self) -> str:
        return self.account.name


@dataclass(frozen=True)
class MonthlyTotal:
    month_key: str     # "2024-07"
    label: str         # "Jul 2024"
    total_expenses: float


@dataclass(frozen=True)
class CategoryTotal:
    name: str
    value: float
    fill: str = ""


@dataclass(frozen=True)
class Progress:
    percent: float
    remaining: float
    complete: bool


@dataclass(frozen=True)
class BudgetComparison:
    category: str
    allocated: float
    spent: float

    @property
    def remaining(self) -> float:
        return self.allocated - self.spent

    @property
    def over_budget(self) -> bool:
        return self.spent > self.allocated

    @property
    def percent_spent(self) -> float:
        return progress_percentage(self.spent, self.allocated)


@dataclass(frozen=True)
class DashboardSummary:
    total_income: float
    total_expenses: float
    expense_transaction_count: int
    category_breakdown: Tuple[CategoryTotal, ...] = field(default_factory=tuple)

    @property
    def net(self) -> float:
        return self.total_income - self.total_expenses
