"""Anomaly insights: outlier expenses, daily spending spikes, missing recurring charges"""

import math
from collections import defaultdict
from datetime import date, datetime
from typing import Dict, List
from insights_gateway.domain.models import (
    Insight,
    InsightPriority,
    InsightSeverity,
    InsightType,
    Transaction,
    ViewTransactionsAction,
)
from insights_gateway.domain.recurrence import find_recurring_charges
from insights_gateway.utils.date_utils import days_since, expires_in
from insights_gateway.utils.formatting import format_currency, format_percent

LARGE_EXPENSE_MULTIPLE = 3.0
LARGE_EXPENSE_MIN = 200.0
MAX_LARGE_EXPENSES = 3
SPIKE_MULTIPLE = 2.5
SPIKE_MIN = 300.0
EXPECTED_INTERVAL_DAYS = 30
GRACE_DAYS = 5


def detect_anomalies(transactions: List[Transaction], now: datetime) -> List[Insight]:
    # Newest first so the reported outliers are the most recent ones
    expenses = sorted(
        (t for t in transactions if t.is_expense),
        key=lambda t: (t.date, t.transaction_id),
        reverse=True,
    )
    insights: List[Insight] = []
    insights.extend(_large_expenses(expenses, now))
    insights.extend(_daily_spike(expenses, now))
    insights.extend(_missing_recurring(transactions, now))
    return insights


def _large_expenses(expenses: List[Transaction], now: datetime) -> List[Insight]:
    if not expenses:
        return []

    avg_expense = sum(t.amount for t in expenses) / len(expenses)
    large = [
        t for t in expenses
        if t.amount > avg_expense * LARGE_EXPENSE_MULTIPLE and t.amount > LARGE_EXPENSE_MIN
    ]

    insights = []
    for expense in large[:MAX_LARGE_EXPENSES]:
        merchant_text = f" at {expense.merchant}" if expense.merchant else ""
        percent_above = (expense.amount / avg_expense - 1) * 100
        insights.append(
            Insight(
                insight_id=f"large-expense-{expense.transaction_id}",
                type=InsightType.ANOMALY,
                severity=InsightSeverity.WARNING,
                priority=InsightPriority.HIGH,
                title="Unusual Large Expense Detected",
                description=(
                    f"A large expense of {format_currency(expense.amount)} was detected{merchant_text} "
                    f"on {expense.date.isoformat()}. This is {format_percent(percent_above)} above your average"
                ),
                value=expense.amount,
                metadata={
                    "transaction_id": expense.transaction_id,
                    "amount": expense.amount,
                    "date": expense.date.isoformat(),
                    "merchant": expense.merchant,
                    "avg_expense": avg_expense,
                },
                actionable=True,
                actions=[ViewTransactionsAction(label="View Transaction", transaction_id=expense.transaction_id)],
                created_at=now,
                expires_at=expires_in(now, 7),
            )
        )

    return insights


def _daily_spike(expenses: List[Transaction], now: datetime) -> List[Insight]:
    """Report the most recent day whose total is far above the daily average (one per run)"""
    daily: Dict[date, float] = defaultdict(float)
    for txn in expenses:
        daily[txn.date] += txn.amount

    if not daily:
        return []

    avg_daily = sum(daily.values()) / len(daily)
    for day in sorted(daily, reverse=True):
        amount = daily[day]
        if amount <= avg_daily * SPIKE_MULTIPLE or amount <= SPIKE_MIN:
            continue

        percent_above = (amount / avg_daily - 1) * 100
        return [
            Insight(
                insight_id=f"spending-spike-{day.isoformat()}",
                type=InsightType.ANOMALY,
                severity=InsightSeverity.WARNING,
                priority=InsightPriority.MEDIUM,
                title="Spending Spike Detected",
                description=(
                    f"You spent {format_currency(amount)} on {day.isoformat()}, which is "
                    f"{format_percent(percent_above)} above your daily average"
                ),
                value=amount,
                metadata={"date": day.isoformat(), "amount": amount, "avg_daily_spending": avg_daily},
                actionable=True,
                actions=[ViewTransactionsAction(label="View Day", date=day)],
                created_at=now,
                expires_at=expires_in(now, 14),
            )
        ]

    return []


def _missing_recurring(transactions: List[Transaction], now: datetime) -> List[Insight]:
    insights = []
    for charge in find_recurring_charges(transactions):
        elapsed = days_since(charge.last_date, now)
        if elapsed <= EXPECTED_INTERVAL_DAYS + GRACE_DAYS:
            continue

        insights.append(
            Insight(
                insight_id=f"missing-recurring-{charge.merchant}",
                type=InsightType.ANOMALY,
                severity=InsightSeverity.NEUTRAL,
                priority=InsightPriority.LOW,
                title="Expected Transaction Not Found",
                description=(
                    f"Your usual {charge.merchant} transaction ({format_currency(charge.amount)}) "
                    f"has not appeared this month"
                ),
                value=charge.amount,
                metadata={
                    "merchant": charge.merchant,
                    "amount": charge.amount,
                    "last_transaction": charge.last_date.isoformat(),
                    "days_since": math.floor(elapsed),
                },
                actionable=False,
                created_at=now,
                expires_at=expires_in(now, 7),
            )
        )

    return insights
