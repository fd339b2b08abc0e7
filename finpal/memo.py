from datetime import date
from functools import lru_cache
from typing import Optional

from finpal.domain import BankAccount, Budget, Transaction, TransactionFilters
from finpal import reports

# Snapshots are tuples of frozen dataclasses, so equal inputs hit the cache.


@lru_cache(maxsize=32)
def account_balances(accounts: tuple[BankAccount, ...], trans: tuple[Transaction, ...]):
    return reports.compute_account_balances(accounts, trans)


@lru_cache(maxsize=32)
def filtered_transactions(trans: tuple[Transaction, ...], filters: Optional[TransactionFilters] = None):
    return reports.filter_transactions(trans, filters)


@lru_cache(maxsize=32)
def monthly_expense_trend(trans: tuple[Transaction, ...]):
    return reports.compute_monthly_expense_trend(trans)


@lru_cache(maxsize=32)
def category_breakdown(trans: tuple[Transaction, ...], today: date):
    return reports.compute_current_month_category_breakdown(trans, today)


@lru_cache(maxsize=32)
def budget_comparison(budgets: tuple[Budget, ...], trans: tuple[Transaction, ...], today: date):
    return reports.compute_budget_comparison(budgets, trans, today)


@lru_cache(maxsize=32)
def dashboard_summary(trans: tuple[Transaction, ...], today: date):
    return reports.compute_dashboard_summary(trans, today)


def clear() -> None:
    for fn in (
        account_balances,
        filtered_transactions,
        monthly_expense_trend,
        category_breakdown,
        budget_comparison,
        dashboard_summary,
    ):
        fn.cache_clear()
