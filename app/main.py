import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date
from decimal import Decimal
from uuid import uuid4

import numpy as np
import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from budget_core.aggregate import spending_notice
from budget_core.config import get_settings
from budget_core.domain import (
    ALL,
    Category,
    FilterCriteria,
    NotificationFrequency,
    ProgressStatus,
    RolloverPolicy,
    Transaction,
    TransactionType,
)
from budget_core.events import (
    BUDGET_CHANGED,
    FILTER_CHANGED,
    TRANSACTIONS_CHANGED,
    EventBus,
    register_default_handlers,
)
from budget_core.export import format_currency, to_csv
from budget_core.filters import category_options, filter_transactions
from budget_core.functional import parse_amount, pipe, validate_transaction
from budget_core.log import configure_logging
from budget_core.services import DashboardService, ReportService
from budget_core.transforms import (
    add_category,
    add_transaction,
    delete_transaction,
    load_seed,
    remove_category,
    set_budget_total,
    set_rollover_policy,
    update_category,
    update_transaction,
)

settings = get_settings()
configure_logging(settings.log_level, settings.log_json)

st.set_page_config(page_title="Zenith Budget", layout="wide")

STATUS_COLORS = {
    ProgressStatus.NOMINAL: "#22c55e",
    ProgressStatus.WARNING: "#eab308",
    ProgressStatus.CRITICAL: "#ef4444",
}


def money(amount) -> str:
    return format_currency(amount, settings.currency_symbol)


if "transactions" not in st.session_state:
    st.session_state.transactions, st.session_state.budget = load_seed(settings.seed_path)
    st.session_state.confirmed_period = (date.today().year, date.today().month)

if "bus" not in st.session_state:
    bus = EventBus()
    register_default_handlers(
        bus,
        DashboardService(settings.donut_config()),
        ReportService(settings.bar_config(), chronological=True),
    )
    st.session_state.bus = bus

bus: EventBus = st.session_state.bus
today = date.today()


def publish(name: str) -> None:
    """Run the handlers for an event and keep their results for rendering."""
    payload = {
        "transactions": st.session_state.transactions,
        "budget": st.session_state.budget,
        "today": today,
        "confirmed_period": st.session_state.confirmed_period,
        "criteria": st.session_state.criteria,
    }
    for r in bus.publish(name, payload):
        st.session_state.views[r["view"]] = r["result"]


if "views" not in st.session_state:
    st.session_state.criteria = ReportService.default_criteria(today)
    st.session_state.views = {}
    publish(TRANSACTIONS_CHANGED)


def donut_figure(slices) -> go.Figure:
    fig = go.Figure()
    for s in slices:
        # fraction 0 points up, slices run clockwise
        steps = max(2, int(s.fraction * 120) + 2)
        angles = np.pi / 2 - 2 * np.pi * np.linspace(s.start_fraction, s.end_fraction, steps)
        xs = np.concatenate([s.outer_radius * np.cos(angles), s.inner_radius * np.cos(angles[::-1])])
        ys = np.concatenate([s.outer_radius * np.sin(angles), s.inner_radius * np.sin(angles[::-1])])
        fig.add_trace(go.Scatter(
            x=np.append(xs, xs[0]),
            y=np.append(ys, ys[0]),
            fill="toself",
            mode="lines",
            line=dict(width=0),
            fillcolor=s.color,
            name=s.label or "No expenses",
            hoverinfo="name",
        ))
    fig.update_xaxes(visible=False, range=[-1, 1])
    fig.update_yaxes(visible=False, range=[-1, 1], scaleanchor="x")
    fig.update_layout(height=320, margin=dict(t=10, b=10, l=10, r=10), showlegend=True)
    return fig


def bar_figure(layout) -> go.Figure:
    fig = go.Figure()
    for g in layout.groups:
        for rect, color, name in ((g.a, "#22c55e", "Income"), (g.b, "#ef4444", "Expense")):
            fig.add_shape(
                type="rect",
                x0=rect.x, x1=rect.x + rect.width,
                y0=rect.y, y1=rect.y + rect.height,
                fillcolor=color, line=dict(width=0),
            )
            fig.add_trace(go.Scatter(
                x=[rect.x + rect.width / 2], y=[rect.y + rect.height],
                mode="markers", marker=dict(size=1, color=color),
                name=f"{g.label} {name}", hovertext=money(rect.value), hoverinfo="text",
                showlegend=False,
            ))
    fig.update_xaxes(
        tickvals=[g.center for g in layout.groups],
        ticktext=[g.label for g in layout.groups],
        range=[-10, max(layout.width, 1) + 10],
    )
    fig.update_yaxes(
        tickvals=[t.y for t in layout.ticks],
        ticktext=[f"{settings.currency_symbol}{round(t.value / 1000)}k" for t in layout.ticks],
        range=[0, layout.plot_height * 1.05],
        showgrid=True, griddash="dot",
    )
    fig.update_layout(height=320, margin=dict(t=10, b=10, l=10, r=10))
    return fig


def transactions_df(trans) -> pd.DataFrame:
    return pd.DataFrame([
        {
            "Date": t.date,
            "Type": t.type.value,
            "Description": t.description,
            "Category": t.category,
            "Amount": money(t.amount),
            "id": t.id,
        }
        for t in trans
    ])


st.sidebar.markdown("### 💰 Zenith Budget")
menu = st.sidebar.radio("Menu", ["🏠 Dashboard", "🧾 Transactions", "📑 Reports", "🎯 Budget", "⚙️ Settings"])

frequency = NotificationFrequency(st.session_state.get("notification_frequency", "off"))
notice = spending_notice(st.session_state.transactions, frequency, today)
if notice.is_right() and notice.get_or_else(None):
    spent, text = notice.get_or_else(None)
    st.sidebar.info(f"You've spent {money(spent)} {text}.")

if menu == "🏠 Dashboard":
    result = st.session_state.views["dashboard"]
    if result.is_left():
        st.error(result.get_error().message)
        st.stop()
    snap = result.get_or_else(None)

    if snap["period"].needs_confirmation:
        st.warning("A new month has started. Confirm to roll the budget over.")
        if st.button("Start new month"):
            st.session_state.confirmed_period = (today.year, today.month)
            publish(BUDGET_CHANGED)
            st.rerun()

    k1, k2, k3 = st.columns(3)
    k1.metric("Remaining Budget", money(snap["remaining"]))
    k2.metric("Monthly Income", money(snap["income"]))
    k3.metric("Monthly Expenses", money(snap["expenses"]))

    left, right = st.columns([3, 2])
    with left:
        st.subheader("Category Budgets")
        if not snap["progress"]:
            st.info("No categories set up.")
        for row in snap["progress"]:
            cat = row["category"]
            st.markdown(
                f"**{cat.name}** {money(row['spent'])} / {money(cat.budget)} "
                f"<span style='color:{STATUS_COLORS[row['status']]}'>●</span>",
                unsafe_allow_html=True,
            )
            st.progress(row["percent"] / 100)
    with right:
        st.subheader("Spending Breakdown")
        if snap["donut"][0].empty:
            st.info("No expenses this month.")
        st.plotly_chart(donut_figure(snap["donut"]), use_container_width=True)

    st.subheader("Recent Transactions")
    if snap["recent"]:
        st.table(transactions_df(snap["recent"]).drop(columns=["id"]))
    else:
        st.info("No recent transactions.")

elif menu == "🧾 Transactions":
    st.title("🧾 Transactions")
    budget = st.session_state.budget
    trans = st.session_state.transactions

    c1, c2, c3, c4 = st.columns(4)
    kind = c1.selectbox("Type", [ALL, TransactionType.INCOME.value, TransactionType.EXPENSE.value])
    category = c2.selectbox("Category", [ALL, *category_options(trans, budget)])
    start = c3.text_input("Start date (YYYY-MM-DD)", "")
    end = c4.text_input("End date (YYYY-MM-DD)", "")

    filtered = filter_transactions(trans, FilterCriteria(type=kind, category=category, start=start or None, end=end or None))
    if filtered.is_left():
        st.error(filtered.get_error().message)
    else:
        rows = filtered.get_or_else(())
        if rows:
            st.dataframe(transactions_df(rows).drop(columns=["id"]), use_container_width=True)
            st.download_button("⬇ Download CSV", to_csv(rows), file_name="transactions.csv", mime="text/csv")
        else:
            st.info("No transactions match the selected filters")

    st.subheader("➕ Add / ✏️ Edit Transaction")
    editing_id = st.selectbox("Edit existing", ["(new)", *[t.id for t in trans]])
    current = next((t for t in trans if t.id == editing_id), None)
    with st.form("transaction_form", clear_on_submit=True):
        f1, f2 = st.columns(2)
        t_type = f1.selectbox("Type", [TransactionType.EXPENSE.value, TransactionType.INCOME.value],
                              index=0 if current is None or current.type == TransactionType.EXPENSE else 1)
        t_amount = f1.text_input("Amount", str(current.amount) if current else "")
        t_date = f2.date_input("Date", value=date.fromisoformat(current.date) if current else today)
        t_category = f2.text_input("Category", current.category if current else (budget.categories[0].name if budget.categories else ""))
        t_desc = st.text_input("Description (optional)", current.description if current else "")
        c_save, c_delete = st.columns(2)
        saved = c_save.form_submit_button("Save")
        deleted = c_delete.form_submit_button("Delete", disabled=current is None)

    if saved:
        tx = Transaction(
            id=current.id if current else str(uuid4()),
            type=TransactionType(t_type),
            amount=parse_amount(t_amount),
            category=t_category,
            date=t_date.isoformat(),
            description=t_desc,
        )
        checked = validate_transaction(tx, budget)
        if checked.is_left():
            st.error(checked.get_error().message)
        else:
            op = update_transaction if current else add_transaction
            st.session_state.transactions = op(trans, tx)
            publish(TRANSACTIONS_CHANGED)
            st.rerun()
    if deleted and current is not None:
        st.session_state.transactions = delete_transaction(trans, current.id)
        publish(TRANSACTIONS_CHANGED)
        st.rerun()

elif menu == "📑 Reports":
    st.title("📑 Reports & Analysis")
    current = st.session_state.criteria
    c1, c2 = st.columns(2)
    start = c1.date_input("Start Date", value=date.fromisoformat(current.start))
    end = c2.date_input("End Date", value=date.fromisoformat(current.end))

    criteria = FilterCriteria(start=start.isoformat(), end=end.isoformat())
    if criteria != current:
        st.session_state.criteria = criteria
        publish(FILTER_CHANGED)

    result = st.session_state.views["report"]
    if result.is_left():
        st.error(result.get_error().message)
        st.stop()
    rpt = result.get_or_else(None)

    st.subheader("Monthly Summary")
    if rpt["monthly"]:
        st.plotly_chart(bar_figure(rpt["bars"]), use_container_width=True)
    else:
        st.info("No data available for the selected period.")

    st.subheader("Spending by Category")
    if rpt["categories"]:
        st.table(pd.DataFrame([
            {"Category": c.name, "Amount Spent": money(c.spent), "% of Total": f"{c.percentage:.2f}%"}
            for c in rpt["categories"]
        ]))
    else:
        st.info("No expenses recorded for this period.")

    st.subheader(rpt["title"])
    st.table(rpt["table"])
    st.download_button("⬇ Export as CSV", rpt["csv"], file_name=rpt["csv_name"], mime="text/csv")

elif menu == "🎯 Budget":
    st.title("🎯 Budget")
    budget = st.session_state.budget

    total = st.text_input("Total Monthly Budget", str(budget.total))
    policy = st.radio(
        "Rollover",
        [RolloverPolicy.AUTO_RESET.value, RolloverPolicy.MANUAL_CONFIRM.value],
        index=0 if budget.rollover == RolloverPolicy.AUTO_RESET else 1,
        horizontal=True,
    )
    budget = pipe(
        budget,
        lambda b: set_budget_total(b, parse_amount(total)),
        lambda b: set_rollover_policy(b, RolloverPolicy(policy)),
    )

    st.subheader("Categories")
    for cat in budget.categories:
        c1, c2, c3, c4 = st.columns([3, 2, 1, 1])
        name = c1.text_input("Name", cat.name, key=f"name_{cat.id}")
        limit = c2.text_input("Budget", str(cat.budget), key=f"limit_{cat.id}")
        color = c3.color_picker("Color", cat.color, key=f"color_{cat.id}")
        if c4.button("🗑️", key=f"remove_{cat.id}"):
            budget = remove_category(budget, cat.id)
            continue
        edited = update_category(budget, Category(id=cat.id, name=name, budget=parse_amount(limit), color=color))
        if edited.is_left():
            st.error(edited.get_error().message)
        budget = edited.get_or_else(budget)

    new_name = st.text_input("New category name")
    if st.button("Add Category") and new_name:
        added = add_category(budget, new_name, Decimal(0))
        if added.is_left():
            st.error(added.get_error().message)
        budget = added.get_or_else(budget)

    if budget != st.session_state.budget:
        st.session_state.budget = budget
        publish(BUDGET_CHANGED)
        st.rerun()

elif menu == "⚙️ Settings":
    st.title("⚙️ Settings")
    options = [f.value for f in NotificationFrequency]
    choice = st.selectbox("Spending summary", options, index=options.index(frequency.value))
    st.session_state["notification_frequency"] = choice
