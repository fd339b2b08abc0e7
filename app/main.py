import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dataclasses import replace
from datetime import date

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from finpal.config import configure_logging, format_currency, load_settings
from finpal.domain import (
    ACCOUNT_COLORS,
    ALL_ACCOUNTS,
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    ALL_CATEGORIES,
    NO_ACCOUNT,
    RECURRENCE_FREQUENCIES,
    BankAccount,
    Budget,
    SavingsGoal,
    Transaction,
    TransactionFilters,
    is_income,
)
from finpal.export import budget_comparison_csv, budgets_csv, goals_csv, monthly_trend_csv, transactions_csv
from finpal.functional import find_account, validate_account, validate_budget, validate_goal, validate_transaction
from finpal.reports import account_totals, budget_progress, goal_progress
from finpal.services import LiveViews, save_entity
from finpal.storage import GUEST_SCOPE, LocalStore
from finpal.transforms import BANK_ACCOUNTS, BUDGETS, SAVINGS_GOALS, TRANSACTIONS

st.set_page_config(page_title="Finance Pal", layout="wide")

if "settings" not in st.session_state:
    st.session_state.settings = load_settings()
    configure_logging(st.session_state.settings)
settings = st.session_state.settings
currency = settings.currency


def money(amount: float) -> str:
    return format_currency(amount, currency)


if "store" not in st.session_state:
    st.session_state.store = LocalStore(settings.store_path, namespace=settings.storage_namespace)
    st.session_state.live = LiveViews(
        st.session_state.store,
        GUEST_SCOPE,
        on_update=lambda report: None,
    )
store = st.session_state.store
live = st.session_state.live

for error in live.drain_errors():
    st.error(f"Storage error: {error}")


def save(result, done: str) -> None:
    if result.is_left():
        st.error(f"❌ {result.get_error()['message']}")
    else:
        st.success(done)
        st.rerun()


def submit(collection: str, validation, done: str) -> None:
    save(save_entity(store, GUEST_SCOPE, collection, validation), done)


menu = st.sidebar.radio(
    "Menu",
    ["🏠 Overview", "🧾 Transactions", "🏦 Accounts", "🎯 Budgets", "💰 Savings", "📑 Reports"],
)
st.sidebar.caption(f"Guest mode · {currency.name} ({currency.code})")

report = live.report["result"]
snapshot = live.report["snapshot"]

if menu == "🏠 Overview":
    summary = report["dashboard"]
    st.title("🏠 Overview")
    st.caption(f"A quick overview of your finances for {date.today():%B %Y}.")
    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Income", money(summary.total_income))
    with k2:
        st.metric("Expenses", money(summary.total_expenses))
    with k3:
        st.metric("Expense entries", summary.expense_transaction_count)
    with k4:
        st.metric("Net", money(summary.net))

    if summary.category_breakdown:
        fig = px.pie(
            names=[c.name for c in summary.category_breakdown],
            values=[c.value for c in summary.category_breakdown],
            color=[c.name for c in summary.category_breakdown],
            color_discrete_map={c.name: c.fill for c in summary.category_breakdown},
            title="Spending by category",
            template="plotly_dark",
        )
        st.plotly_chart(fig, use_container_width=True)
    else:
        st.info("No expenses logged this month.")

elif menu == "🧾 Transactions":
    st.title("🧾 Transactions")
    accounts = snapshot.accounts
    account_names = {a.id: a.name for a in accounts}

    st.subheader("➕ Add entry")
    kind = st.radio("Type", ["Expense", "Income"], horizontal=True)
    with st.form("transaction_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            day = st.date_input("Date", value=date.today())
            clock = st.text_input("Time (HH:MM, optional)")
            amount = st.number_input(f"Amount ({currency.code})", min_value=0.0, step=10.0, format="%.2f")
        with col2:
            category = st.selectbox("Category", INCOME_CATEGORIES if kind == "Income" else EXPENSE_CATEGORIES)
            account_id = st.selectbox(
                "Bank account",
                [""] + list(account_names),
                format_func=lambda i: account_names.get(i, "Unassigned"),
            )
            recurring = st.checkbox("Recurring")
        description = st.text_input("Description")
        c1, c2 = st.columns(2)
        with c1:
            frequency = st.selectbox("Frequency", RECURRENCE_FREQUENCIES, index=2)
        with c2:
            end = st.text_input("Recurrence end date (YYYY-MM-DD, optional)")
        if st.form_submit_button("Save"):
            t = Transaction(
                id="",
                date=day.isoformat(),
                time=clock or None,
                category=category,
                amount=amount,
                description=description,
                bank_account_id=account_id or None,
                is_recurring=recurring,
                recurrence_frequency=frequency if recurring else None,
                recurrence_end_date=(end or None) if recurring else None,
            )
            submit(TRANSACTIONS, validate_transaction(t, accounts), f"✅ {kind} added!")

    st.subheader("🔎 Filters")
    f1, f2, f3, f4, f5 = st.columns(5)
    with f1:
        start = st.date_input("Start date", value=None)
    with f2:
        end_date = st.date_input("End date", value=None)
    with f3:
        cat = st.selectbox("Category", [""] + list(ALL_CATEGORIES), format_func=lambda c: c or "All categories")
    with f4:
        text = st.text_input("Description contains")
    with f5:
        selector = st.selectbox(
            "Bank account",
            [ALL_ACCOUNTS, NO_ACCOUNT] + list(account_names),
            format_func=lambda i: {ALL_ACCOUNTS: "All accounts", NO_ACCOUNT: "No account"}.get(i, account_names.get(i, i)),
        )
    filters = TransactionFilters(start, end_date, cat, text, selector)
    if filters != live.filters:
        live.set_filters(filters)
    filtered = live.report["result"]["transactions"]

    if filtered:
        table = pd.DataFrame(
            [
                {
                    "Date": t.date,
                    "Time": t.time or "",
                    "Type": "Income" if is_income(t.category) else "Expense",
                    "Category": t.category,
                    "Amount": money(t.amount),
                    "Description": t.description,
                    "Account": find_account(accounts, t.bank_account_id).map(lambda a: a.name).get_or_else("Unassigned"),
                    "Recurring": t.recurrence_frequency if t.is_recurring else "",
                }
                for t in filtered
            ]
        )
        st.dataframe(table, use_container_width=True)
        st.download_button(
            "⬇ Download CSV",
            transactions_csv(filtered, accounts, currency.code),
            file_name="financial_entries.csv",
            mime="text/csv",
        )
        to_delete = st.selectbox("Delete entry", [""] + [t.id for t in filtered])
        if to_delete and st.button("🗑 Delete"):
            save(store.delete(GUEST_SCOPE, TRANSACTIONS, to_delete), "Entry removed")

        st.subheader("✏️ Edit entry")
        by_id = {t.id: t for t in filtered}
        to_edit = st.selectbox(
            "Entry",
            [""] + list(by_id),
            format_func=lambda i: f"{by_id[i].date} · {by_id[i].category} · {money(by_id[i].amount)}" if i else "Choose…",
        )
        if to_edit:
            current = by_id[to_edit]
            with st.form(f"edit_transaction_{to_edit}"):
                col1, col2 = st.columns(2)
                with col1:
                    new_date = st.text_input("Date (YYYY-MM-DD)", value=current.date, key=f"edit_date_{to_edit}")
                    new_time = st.text_input("Time (HH:MM, optional)", value=current.time or "", key=f"edit_time_{to_edit}")
                    new_amount = st.number_input(
                        f"Amount ({currency.code})", min_value=0.0, step=10.0, format="%.2f", value=float(current.amount),
                        key=f"edit_amount_{to_edit}",
                    )
                with col2:
                    options = list(ALL_CATEGORIES)
                    new_category = st.selectbox(
                        "Category", options, index=options.index(current.category) if current.category in options else 0,
                        key=f"edit_category_{to_edit}",
                    )
                    account_options = [""] + list(account_names)
                    new_account = st.selectbox(
                        "Bank account",
                        account_options,
                        index=account_options.index(current.bank_account_id) if current.bank_account_id in account_options else 0,
                        format_func=lambda i: account_names.get(i, "Unassigned"),
                        key=f"edit_account_{to_edit}",
                    )
                    new_recurring = st.checkbox("Recurring", value=current.is_recurring, key=f"edit_recurring_{to_edit}")
                new_description = st.text_input("Description", value=current.description, key=f"edit_description_{to_edit}")
                new_frequency = st.selectbox(
                    "Frequency",
                    RECURRENCE_FREQUENCIES,
                    index=RECURRENCE_FREQUENCIES.index(current.recurrence_frequency)
                    if current.recurrence_frequency in RECURRENCE_FREQUENCIES else 2,
                    key=f"edit_frequency_{to_edit}",
                )
                new_end = st.text_input("Recurrence end date (YYYY-MM-DD, optional)", value=current.recurrence_end_date or "",
                                        key=f"edit_end_{to_edit}")
                if st.form_submit_button("Update"):
                    edited = replace(
                        current,
                        date=new_date,
                        time=new_time or None,
                        category=new_category,
                        amount=new_amount,
                        description=new_description,
                        bank_account_id=new_account or None,
                        is_recurring=new_recurring,
                        recurrence_frequency=new_frequency if new_recurring else None,
                        recurrence_end_date=(new_end or None) if new_recurring else None,
                    )
                    submit(TRANSACTIONS, validate_transaction(edited, accounts), "✅ Entry updated!")
    else:
        st.info("No entries match your current filters.")

elif menu == "🏦 Accounts":
    st.title("🏦 Bank accounts")
    with st.form("account_form", clear_on_submit=True):
        name = st.text_input("Name")
        starting = st.number_input(f"Starting balance ({currency.code})", min_value=0.0, step=100.0, format="%.2f")
        color = st.selectbox("Color", ACCOUNT_COLORS)
        if st.form_submit_button("Add account"):
            acc = BankAccount(id="", name=name, starting_balance=starting, color=color)
            submit(BANK_ACCOUNTS, validate_account(acc), "✅ Account added!")

    views = report["balances"]
    if not views:
        st.info("No bank accounts yet.")
    else:
        st.metric("Total balance", money(account_totals(views)))
    for view in views:
        with st.expander(f"{view.name} · {money(view.current_balance)}"):
            st.caption(f"Starting {money(view.account.starting_balance)} · Debits {money(view.total_debits)}")
            if view.transactions:
                st.table(pd.DataFrame(
                    [{"Date": t.date, "Category": t.category, "Amount": money(t.amount), "Description": t.description}
                     for t in view.transactions]
                ))
            if st.button("🗑 Delete account", key=f"del_{view.id}"):
                save(store.delete(GUEST_SCOPE, BANK_ACCOUNTS, view.id), "Account removed")

elif menu == "🎯 Budgets":
    st.title("🎯 Budgets")
    with st.form("budget_form", clear_on_submit=True):
        category = st.selectbox("Category", EXPENSE_CATEGORIES)
        allocated = st.number_input(f"Allocated ({currency.code})", min_value=0.0, step=50.0, format="%.2f")
        if st.form_submit_button("Add budget"):
            b = Budget(id="", category=category, allocated_amount=allocated)
            submit(BUDGETS, validate_budget(b, snapshot.budgets), "✅ Budget added!")

    for b in sorted(snapshot.budgets, key=lambda b: b.category):
        progress = budget_progress(b)
        st.metric(b.category, f"{money(b.spent_amount)} / {money(b.allocated_amount)}")
        st.progress(progress.percent / 100)
        if b.spent_amount > b.allocated_amount:
            st.caption(f"Over budget by {money(b.spent_amount - b.allocated_amount)}")
        else:
            st.caption(f"{money(progress.remaining)} remaining")
    if snapshot.budgets:
        st.subheader("✏️ Edit budget")
        budgets_by_id = {b.id: b for b in snapshot.budgets}
        budget_id = st.selectbox("Budget", list(budgets_by_id), format_func=lambda i: budgets_by_id[i].category)
        existing = budgets_by_id[budget_id]
        with st.form(f"edit_budget_{budget_id}"):
            options = list(EXPENSE_CATEGORIES)
            new_category = st.selectbox(
                "Category", options, index=options.index(existing.category) if existing.category in options else 0,
                key=f"edit_budget_category_{budget_id}",
            )
            new_allocated = st.number_input(
                f"Allocated ({currency.code})", min_value=0.0, step=50.0, format="%.2f",
                value=float(existing.allocated_amount),
                key=f"edit_allocated_{budget_id}",
            )
            if st.form_submit_button("Update budget"):
                edited = Budget(
                    id=existing.id,
                    category=new_category,
                    allocated_amount=new_allocated,
                    spent_amount=existing.spent_amount,
                )
                submit(BUDGETS, validate_budget(edited, snapshot.budgets), "✅ Budget updated!")

        st.download_button("⬇ Download CSV", budgets_csv(snapshot.budgets, currency.code), file_name="budgets.csv")

elif menu == "💰 Savings":
    st.title("💰 Savings goals")
    with st.form("goal_form", clear_on_submit=True):
        name = st.text_input("Goal name")
        target = st.number_input(f"Target ({currency.code})", min_value=0.0, step=100.0, format="%.2f")
        current = st.number_input(f"Saved so far ({currency.code})", min_value=0.0, step=100.0, format="%.2f")
        deadline = st.date_input("Deadline", value=None)
        if st.form_submit_button("Add goal"):
            g = SavingsGoal(
                id="",
                name=name,
                target_amount=target,
                current_amount=current,
                deadline=deadline.isoformat() if deadline else None,
            )
            submit(SAVINGS_GOALS, validate_goal(g), "✅ Goal added!")

    for g in snapshot.goals:
        progress = goal_progress(g)
        st.metric(g.name, f"{money(g.current_amount)} / {money(g.target_amount)}")
        st.progress(progress.percent / 100)
        st.caption(
            f"{progress.percent:.0f}% completed."
            + ("" if progress.complete else f" {money(progress.remaining)} to go!")
        )
    if snapshot.goals:
        st.subheader("✏️ Edit goal")
        goals_by_id = {g.id: g for g in snapshot.goals}
        goal_id = st.selectbox("Goal", list(goals_by_id), format_func=lambda i: goals_by_id[i].name)
        goal = goals_by_id[goal_id]
        with st.form(f"edit_goal_{goal_id}"):
            new_name = st.text_input("Goal name", value=goal.name, key=f"edit_goal_name_{goal_id}")
            new_target = st.number_input(
                f"Target ({currency.code})", min_value=0.0, step=100.0, format="%.2f", value=float(goal.target_amount),
                key=f"edit_target_{goal_id}",
            )
            new_current = st.number_input(
                f"Saved so far ({currency.code})", min_value=0.0, step=100.0, format="%.2f",
                value=float(goal.current_amount),
                key=f"edit_current_{goal_id}",
            )
            new_deadline = st.text_input("Deadline (YYYY-MM-DD, optional)", value=goal.deadline or "", key=f"edit_deadline_{goal_id}")
            if st.form_submit_button("Update goal"):
                edited = replace(
                    goal,
                    name=new_name,
                    target_amount=new_target,
                    current_amount=new_current,
                    deadline=new_deadline or None,
                )
                submit(SAVINGS_GOALS, validate_goal(edited), "✅ Goal updated!")

        st.download_button("⬇ Download CSV", goals_csv(snapshot.goals, currency.code), file_name="savings_goals.csv")

elif menu == "📑 Reports":
    st.title("📑 Reports")
    trend = report["monthly_trend"]
    if trend:
        fig_trend = px.bar(
            x=[m.label for m in trend],
            y=[m.total_expenses for m in trend],
            labels={"x": "Month", "y": f"Total expenses ({currency.code})"},
            title="Monthly expenses",
            template="plotly_dark",
        )
        st.plotly_chart(fig_trend, use_container_width=True)
        st.download_button("⬇ Trend CSV", monthly_trend_csv(trend, currency.code), file_name="monthly_expenses.csv")
    else:
        st.info("No expense data yet.")

    breakdown = report["category_breakdown"]
    if breakdown:
        fig_pie = go.Figure(go.Pie(
            labels=[c.name for c in breakdown],
            values=[c.value for c in breakdown],
            marker=dict(colors=[c.fill for c in breakdown]),
        ))
        fig_pie.update_layout(title=f"Expenses for {date.today():%B %Y}", template="plotly_dark")
        st.plotly_chart(fig_pie, use_container_width=True)

    comparison = report["budget_comparison"]
    if comparison:
        rows = sorted(comparison, key=lambda r: r.category)
        fig_budget = go.Figure()
        fig_budget.add_trace(go.Bar(x=[r.category for r in rows], y=[r.allocated for r in rows], name="Allocated"))
        fig_budget.add_trace(go.Bar(x=[r.category for r in rows], y=[r.spent for r in rows], name="Spent"))
        fig_budget.update_layout(barmode="group", title="Budget vs actual", template="plotly_dark")
        st.plotly_chart(fig_budget, use_container_width=True)
        st.download_button(
            "⬇ Budget CSV",
            budget_comparison_csv(rows, currency.code),
            file_name="budget_comparison.csv",
        )
