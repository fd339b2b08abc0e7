"""Derived views over the raw entity collections.

Every function here is pure: it reads immutable snapshots, takes "now" and
the income category set as arguments, and returns fresh tuples. Malformed
dates never raise; the affected records are left out of date-scoped views.
"""
import logging
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, Tuple

from finpal.dates import Interval, in_interval, month_interval, month_key, month_label, parse_date
from finpal.domain import (
    INCOME_CATEGORIES,
    PALETTE,
    AccountView,
    BankAccount,
    Budget,
    BudgetComparison,
    CategoryTotal,
    DashboardSummary,
    MonthlyTotal,
    Progress,
    SavingsGoal,
    Transaction,
    is_expense,
    is_income,
    progress_percentage,
)
from finpal.filters import filter_transactions
from finpal.ordering import sort_transactions

logger = logging.getLogger(__name__)

__all__ = [
    "compute_account_balances",
    "filter_transactions",
    "compute_monthly_expense_trend",
    "compute_current_month_category_breakdown",
    "compute_budget_comparison",
    "compute_dashboard_summary",
    "progress_percentage",
    "budget_progress",
    "goal_progress",
    "account_totals",
]


def compute_account_balances(
    accounts: Iterable[BankAccount], trans: Iterable[Transaction]
) -> Tuple[AccountView, ...]:
    # Every linked transaction is a debit, income included.
    trans = tuple(trans)
    views = []
    for acc in accounts:
        linked = tuple(t for t in trans if t.bank_account_id == acc.id)
        total_debits = sum(t.amount for t in linked)
        views.append(
            AccountView(
                account=acc,
                total_debits=total_debits,
                current_balance=acc.starting_balance - total_debits,
                transactions=sort_transactions(linked),
            )
        )
    return tuple(views)


def account_totals(views: Iterable[AccountView]) -> float:
    return sum(v.current_balance for v in views)


def compute_monthly_expense_trend(
    trans: Iterable[Transaction], income_categories: Tuple[str, ...] = INCOME_CATEGORIES
) -> Tuple[MonthlyTotal, ...]:
    monthly: Dict[str, float] = defaultdict(float)

    for t in trans:
        if not is_expense(t.category, income_categories):
            continue
        day = parse_date(t.date)
        if day is None:
            logger.warning("Invalid date format for expense ID %s: %s", t.id, t.date)
            continue
        monthly[month_key(day)] += t.amount

    return tuple(
        MonthlyTotal(month_key=key, label=month_label(key), total_expenses=monthly[key])
        for key in sorted(monthly)
    )


def _current_month_expenses(
    trans: Iterable[Transaction], interval: Interval, income_categories: Tuple[str, ...]
) -> Tuple[Transaction, ...]:
    expenses = []
    for t in trans:
        if not is_expense(t.category, income_categories):
            continue
        if parse_date(t.date) is None:
            logger.debug("Skipping entry ID %s with invalid date: %s", t.id, t.date)
            continue
        if in_interval(t.date, interval):
            expenses.append(t)
    return tuple(expenses)


def _category_breakdown(expenses: Iterable[Transaction]) -> Tuple[CategoryTotal, ...]:
    # dicts keep first-encounter order and sorted() is stable, so equal
    # totals stay in the order their categories first appeared
    totals: Dict[str, float] = {}
    for t in expenses:
        totals[t.category] = totals.get(t.category, 0.0) + t.amount

    ordered = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return tuple(
        CategoryTotal(name=name, value=value, fill=PALETTE[index % len(PALETTE)])
        for index, (name, value) in enumerate(ordered)
    )


def compute_current_month_category_breakdown(
    trans: Iterable[Transaction],
    now: date,
    income_categories: Tuple[str, ...] = INCOME_CATEGORIES,
) -> Tuple[CategoryTotal, ...]:
    expenses = _current_month_expenses(trans, month_interval(now), income_categories)
    return _category_breakdown(expenses)


def compute_budget_comparison(
    budgets: Iterable[Budget],
    trans: Iterable[Transaction],
    now: date,
    income_categories: Tuple[str, ...] = INCOME_CATEGORIES,
) -> Tuple[BudgetComparison, ...]:
    expenses = _current_month_expenses(trans, month_interval(now), income_categories)
    return tuple(
        BudgetComparison(
            category=b.category,
            allocated=b.allocated_amount,
            spent=sum(t.amount for t in expenses if t.category == b.category),
        )
        for b in budgets
    )


def compute_dashboard_summary(
    trans: Iterable[Transaction],
    now: date,
    income_categories: Tuple[str, ...] = INCOME_CATEGORIES,
) -> DashboardSummary:
    interval = month_interval(now)
    in_month = []
    for t in trans:
        if parse_date(t.date) is None:
            logger.warning("Invalid date format for entry ID %s: %s", t.id, t.date)
        elif in_interval(t.date, interval):
            in_month.append(t)

    income = [t for t in in_month if is_income(t.category, income_categories)]
    expenses = [t for t in in_month if not is_income(t.category, income_categories)]

    return DashboardSummary(
        total_income=sum(t.amount for t in income),
        total_expenses=sum(t.amount for t in expenses),
        expense_transaction_count=len(expenses),
        category_breakdown=_category_breakdown(expenses),
    )


def budget_progress(budget: Budget) -> Progress:
    """Progress from the budget's stored spent amount, not from transactions."""
    return Progress(
        percent=progress_percentage(budget.spent_amount, budget.allocated_amount),
        remaining=budget.allocated_amount - budget.spent_amount,
        complete=budget.spent_amount >= budget.allocated_amount,
    )


def goal_progress(goal: SavingsGoal) -> Progress:
    return Progress(
        percent=progress_percentage(goal.current_amount, goal.target_amount),
        remaining=max(0.0, goal.target_amount - goal.current_amount),
        complete=goal.current_amount >= goal.target_amount,
    )
