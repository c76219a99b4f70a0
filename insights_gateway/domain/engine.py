"""Insight engine - derives lookup tables from a finance snapshot and runs every analyzer"""

import asyncio
from collections import defaultdict
from datetime import date, datetime
from typing import Dict, List, Tuple
from insights_gateway.domain.anomalies import detect_anomalies
from insights_gateway.domain.budgets import analyze_budgets
from insights_gateway.domain.goals import analyze_goal_progress, predict_trends
from insights_gateway.domain.models import (
    Budget,
    BudgetAllocation,
    Category,
    CategorySpending,
    FinancialSnapshot,
    Insight,
    MonthlySummary,
    Transaction,
    TransactionType,
)
from insights_gateway.domain.savings import analyze_saving_opportunities
from insights_gateway.domain.spending import analyze_spending_patterns
from insights_gateway.utils.date_utils import month_start


def build_category_spending(
    transactions: List[Transaction],
    categories: List[Category],
) -> List[CategorySpending]:
    """Expense totals per category; transactions in unknown categories are ignored"""
    names = {c.category_id: c.name for c in categories}
    totals: Dict[str, float] = defaultdict(float)
    counts: Dict[str, int] = defaultdict(int)

    for txn in transactions:
        if txn.is_expense and txn.category_id in names:
            totals[txn.category_id] += txn.amount
            counts[txn.category_id] += 1

    return [
        CategorySpending(
            category_id=category_id,
            category_name=names[category_id],
            total=totals[category_id],
            count=counts[category_id],
            avg_amount=totals[category_id] / counts[category_id],
        )
        for category_id in sorted(totals)
    ]


def build_budgets(
    allocations: List[BudgetAllocation],
    transactions: List[Transaction],
    categories: List[Category],
    now: datetime,
) -> List[Budget]:
    """Apply current-month expenses to each budget's category"""
    current_month = month_start(now)
    names = {c.category_id: c.name for c in categories}
    spent: Dict[str, float] = defaultdict(float)
    for txn in transactions:
        if txn.is_expense and txn.category_id and txn.date >= current_month:
            spent[txn.category_id] += txn.amount

    return [
        Budget(
            budget_id=allocation.budget_id,
            category_id=allocation.category_id,
            amount=allocation.amount,
            spent=spent.get(allocation.category_id, 0.0),
            category_name=names.get(allocation.category_id),
        )
        for allocation in allocations
    ]


def build_monthly_summaries(transactions: List[Transaction]) -> List[MonthlySummary]:
    """Income/expense totals per calendar month, oldest first"""
    income: Dict[date, float] = defaultdict(float)
    expenses: Dict[date, float] = defaultdict(float)
    for txn in transactions:
        month = month_start(txn.date)
        if txn.type == TransactionType.INCOME:
            income[month] += txn.amount
        else:
            expenses[month] += txn.amount

    months = sorted(set(income) | set(expenses))
    return [MonthlySummary(month=m, income=income.get(m, 0.0), expenses=expenses.get(m, 0.0)) for m in months]


def current_month_totals(transactions: List[Transaction], now: datetime) -> Tuple[float, float]:
    """(income, expenses) since the first of the current month"""
    current_month = month_start(now)
    recent = [t for t in transactions if t.date >= current_month]
    income = sum(t.amount for t in recent if t.type == TransactionType.INCOME)
    expenses = sum(t.amount for t in recent if t.is_expense)
    return income, expenses


def sort_insights(insights: List[Insight]) -> List[Insight]:
    """Priority (critical first), then creation time; ties keep their input order"""
    return sorted(insights, key=lambda i: (-i.priority.rank, i.created_at))


async def generate_all_insights(
    user_id: str,
    snapshot: FinancialSnapshot,
    now: datetime,
) -> List[Insight]:
    """
    Main entry point: run all analyzers over one user's snapshot.

    Flow:
    1. Derive category spending, budget utilization, monthly summaries
    2. Run the six analyzer calls concurrently (they share read-only inputs)
    3. Concatenate in a fixed order and sort by priority

    Pure computation: no I/O, no persistence, no deduplication against
    earlier runs. `user_id` scopes the run for callers; the snapshot is
    assumed to be already filtered to that user.
    """
    transactions = snapshot.transactions
    category_spending = build_category_spending(transactions, snapshot.categories)
    budgets = build_budgets(snapshot.budgets, transactions, snapshot.categories, now)
    monthly_summaries = build_monthly_summaries(transactions)
    monthly_income, monthly_expenses = current_month_totals(transactions, now)

    results = await asyncio.gather(
        asyncio.to_thread(analyze_spending_patterns, transactions, category_spending, now),
        asyncio.to_thread(analyze_saving_opportunities, transactions, category_spending, now),
        asyncio.to_thread(analyze_budgets, budgets, category_spending, now),
        asyncio.to_thread(detect_anomalies, transactions, now),
        asyncio.to_thread(analyze_goal_progress, snapshot.goal, monthly_income, monthly_expenses, now),
        asyncio.to_thread(predict_trends, monthly_summaries, snapshot.goal, now),
    )

    insights = [insight for batch in results for insight in batch]
    return sort_insights(insights)
