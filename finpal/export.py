from typing import Iterable, List, Sequence

import pandas as pd

from finpal.domain import BankAccount, Budget, BudgetComparison, MonthlyTotal, SavingsGoal, Transaction
from finpal.functional import find_account


def _money(amount: float) -> str:
    return f"{amount:.2f}"


def _to_csv(rows: List[list], columns: Sequence[str]) -> str:
    # to_csv quotes fields holding a comma, quote or newline and doubles inner quotes
    df = pd.DataFrame(rows, columns=list(columns), dtype=object)
    return df.to_csv(index=False, na_rep="", lineterminator="\n")


def transactions_csv(
    trans: Iterable[Transaction], accounts: Iterable[BankAccount], currency_code: str
) -> str:
    accounts = tuple(accounts)
    columns = [
        "ID",
        "Date",
        "Time",
        "Category",
        f"Amount ({currency_code})",
        "Description",
        "Bank Account Name",
        "Is Recurring",
        "Recurrence Frequency",
        "Recurrence End Date",
    ]
    rows = [
        [
            t.id,
            t.date,
            t.time or "",
            t.category,
            _money(t.amount),
            t.description or "",
            find_account(accounts, t.bank_account_id).map(lambda a: a.name).get_or_else(""),
            "Yes" if t.is_recurring else "No",
            t.recurrence_frequency or "",
            t.recurrence_end_date or "",
        ]
        for t in trans
    ]
    return _to_csv(rows, columns)


def budgets_csv(budgets: Iterable[Budget], currency_code: str) -> str:
    columns = ["ID", "Category", f"Allocated Amount ({currency_code})", f"Spent Amount ({currency_code})"]
    rows = [[b.id, b.category, _money(b.allocated_amount), _money(b.spent_amount)] for b in budgets]
    return _to_csv(rows, columns)


def goals_csv(goals: Iterable[SavingsGoal], currency_code: str) -> str:
    columns = [
        "ID",
        "Name",
        f"Target Amount ({currency_code})",
        f"Current Amount ({currency_code})",
        "Deadline",
        "Image URL",
    ]
    rows = [
        [g.id, g.name, _money(g.target_amount), _money(g.current_amount), g.deadline or "", g.image_url or ""]
        for g in goals
    ]
    return _to_csv(rows, columns)


def monthly_trend_csv(trend: Iterable[MonthlyTotal], currency_code: str) -> str:
    rows = [[m.month_key, _money(m.total_expenses)] for m in trend]
    return _to_csv(rows, ["Month", f"Total Expenses ({currency_code})"])


def budget_comparison_csv(rows: Iterable[BudgetComparison], currency_code: str) -> str:
    data = [[r.category, _money(r.allocated), _money(r.spent)] for r in rows]
    return _to_csv(data, ["Category", f"Allocated ({currency_code})", f"Spent ({currency_code})"])
