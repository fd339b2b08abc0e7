from finpal.domain import (
    INCOME_CATEGORIES,
    BudgetComparison,
    DashboardSummary,
    EntryKind,
    Transaction,
    classify,
    is_expense,
    is_income,
    progress_percentage,
)


def test_classify_income_categories():
    for category in INCOME_CATEGORIES:
        assert classify(category) is EntryKind.INCOME


def test_classify_everything_else_is_expense():
    assert classify("Groceries") is EntryKind.EXPENSE
    assert classify("Something New") is EntryKind.EXPENSE
    assert classify("salary") is EntryKind.EXPENSE  # exact match only


def test_classify_custom_income_set():
    assert is_income("Refund", income_categories=("Refund",))
    assert is_expense("Salary", income_categories=("Refund",))


def test_transaction_kind_follows_category():
    t = Transaction(id="t1", date="2024-06-01", category="Bonus", amount=10)
    assert t.kind is EntryKind.INCOME


def test_progress_percentage_zero_whole():
    assert progress_percentage(50, 0) == 0
    assert progress_percentage(0, 0) == 0


def test_progress_percentage_clamped():
    assert progress_percentage(150, 100) == 100
    assert progress_percentage(-10, 100) == 0
    assert progress_percentage(25, 100) == 25


def test_budget_comparison_properties():
    row = BudgetComparison(category="Groceries", allocated=500, spent=200)
    assert row.remaining == 300
    assert not row.over_budget
    assert row.percent_spent == 40

    over = BudgetComparison(category="Travel", allocated=100, spent=130)
    assert over.over_budget
    assert over.percent_spent == 100

    assert BudgetComparison(category="Gifts", allocated=0, spent=20).percent_spent == 0


def test_dashboard_summary_net():
    summary = DashboardSummary(total_income=2000, total_expenses=50, expense_transaction_count=1)
    assert summary.net == 1950
    assert summary.category_breakdown == ()
