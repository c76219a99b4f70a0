"""Spending-pattern insights: category month-over-month deltas, weekend habits, small frequent purchases"""

from collections import defaultdict
from datetime import datetime
from typing import Dict, List
from insights_gateway.domain.models import (
    AnalyticsTab,
    CategorySpending,
    CreateBudgetAction,
    Insight,
    InsightPriority,
    InsightSeverity,
    InsightType,
    Transaction,
    ViewAnalyticsAction,
    ViewCategoryAction,
    ViewMerchantAction,
)
from insights_gateway.utils.date_utils import expires_in, is_weekend, month_start
from insights_gateway.utils.formatting import format_currency, format_percent

CHANGE_THRESHOLD_PCT = 25.0
HIGH_CHANGE_THRESHOLD_PCT = 50.0
WEEKEND_RATIO_THRESHOLD = 1.3
SMALL_AMOUNT_MIN = 2.0
SMALL_AMOUNT_MAX = 20.0
SMALL_MERCHANT_MIN_COUNT = 10
SMALL_MERCHANT_MIN_MONTHLY = 50.0


def analyze_spending_patterns(
    transactions: List[Transaction],
    category_spending: List[CategorySpending],
    now: datetime,
) -> List[Insight]:
    expenses = [t for t in transactions if t.is_expense]
    insights: List[Insight] = []
    insights.extend(_category_changes(expenses, category_spending, now))
    insights.extend(_weekend_pattern(expenses, now))
    insights.extend(_frequent_small_purchases(transactions, now))
    return insights


def _category_changes(
    expenses: List[Transaction],
    category_spending: List[CategorySpending],
    now: datetime,
) -> List[Insight]:
    """
    Compare spending since the start of last month against the month before.

    Categories with no spending in the earlier month are skipped, which also
    covers histories shorter than two months.
    """
    last_month = month_start(now, months_back=1)
    two_months_ago = month_start(now, months_back=2)

    current: Dict[str, float] = defaultdict(float)
    previous: Dict[str, float] = defaultdict(float)
    for txn in expenses:
        if txn.category_id is None:
            continue
        if txn.date >= last_month:
            current[txn.category_id] += txn.amount
        elif txn.date >= two_months_ago:
            previous[txn.category_id] += txn.amount

    insights = []
    for category in category_spending:
        previous_amount = previous.get(category.category_id, 0.0)
        if previous_amount <= 0:
            continue

        current_amount = current.get(category.category_id, 0.0)
        percent_change = (current_amount - previous_amount) / previous_amount * 100
        if abs(percent_change) < CHANGE_THRESHOLD_PCT:
            continue

        increased = percent_change > 0
        direction = "increased" if increased else "decreased"
        insights.append(
            Insight(
                insight_id=f"spending-change-{category.category_id}",
                type=InsightType.SPENDING_PATTERN,
                severity=InsightSeverity.WARNING if increased else InsightSeverity.POSITIVE,
                priority=(
                    InsightPriority.HIGH
                    if abs(percent_change) >= HIGH_CHANGE_THRESHOLD_PCT
                    else InsightPriority.MEDIUM
                ),
                title=f"{category.category_name} Spending {direction.capitalize()}",
                description=(
                    f"Your {category.category_name.lower()} spending {direction} by "
                    f"{format_percent(abs(percent_change))} this month "
                    f"({format_currency(current_amount)} vs {format_currency(previous_amount)})"
                ),
                value=percent_change,
                metadata={
                    "category_id": category.category_id,
                    "category_name": category.category_name,
                    "current_amount": current_amount,
                    "previous_amount": previous_amount,
                },
                actionable=True,
                actions=[
                    ViewCategoryAction(label="View Transactions", category_id=category.category_id),
                    ViewAnalyticsAction(label="View Analytics", tab=AnalyticsTab.CATEGORIES),
                ],
                created_at=now,
                expires_at=expires_in(now, 7),
            )
        )

    return insights


def _weekend_pattern(expenses: List[Transaction], now: datetime) -> List[Insight]:
    weekend_total = sum(t.amount for t in expenses if is_weekend(t.date))
    weekday_total = sum(t.amount for t in expenses if not is_weekend(t.date))

    # Day counts are estimated from transaction volume, floored at 1
    weeks = len(expenses) // 7
    avg_weekend = weekend_total / max(weeks * 2, 1)
    avg_weekday = weekday_total / max(weeks * 5, 1)

    if avg_weekday <= 0 or avg_weekend < avg_weekday * WEEKEND_RATIO_THRESHOLD:
        return []

    return [
        Insight(
            insight_id="weekend-spending-pattern",
            type=InsightType.SPENDING_PATTERN,
            severity=InsightSeverity.NEUTRAL,
            priority=InsightPriority.LOW,
            title="Weekend Spending Pattern Detected",
            description=(
                f"You typically spend {format_percent((avg_weekend / avg_weekday - 1) * 100)} more on "
                f"weekends ({format_currency(avg_weekend)}/day) compared to weekdays "
                f"({format_currency(avg_weekday)}/day)"
            ),
            value=avg_weekend - avg_weekday,
            metadata={
                "avg_weekend_spending": avg_weekend,
                "avg_weekday_spending": avg_weekday,
            },
            actionable=True,
            actions=[ViewAnalyticsAction(label="View Spending Patterns", tab=AnalyticsTab.PATTERNS)],
            created_at=now,
            expires_at=expires_in(now, 30),
        )
    ]


def _frequent_small_purchases(transactions: List[Transaction], now: datetime) -> List[Insight]:
    """
    Coffee-run style merchants: many small charges adding up to a real monthly cost.

    Only charges between $2 and $20 count toward the frequency threshold, but the
    monthly estimate covers everything paid to the merchant, spread over the
    whole history.
    """
    counts: Dict[str, int] = defaultdict(int)
    totals: Dict[str, float] = defaultdict(float)
    for txn in transactions:
        if not txn.merchant:
            continue
        totals[txn.merchant] += txn.amount
        if SMALL_AMOUNT_MIN < txn.amount < SMALL_AMOUNT_MAX:
            counts[txn.merchant] += 1

    insights = []
    for merchant in sorted(counts):
        count = counts[merchant]
        if count < SMALL_MERCHANT_MIN_COUNT:
            continue

        monthly_estimate = totals[merchant] / len(transactions) * 30
        if monthly_estimate < SMALL_MERCHANT_MIN_MONTHLY:
            continue

        insights.append(
            Insight(
                insight_id=f"recurring-expense-{merchant}",
                type=InsightType.SPENDING_PATTERN,
                severity=InsightSeverity.NEUTRAL,
                priority=InsightPriority.MEDIUM,
                title=f"Frequent Small Purchases at {merchant}",
                description=(
                    f"Your purchases at {merchant} add up to approximately "
                    f"{format_currency(monthly_estimate)}/month ({count} transactions)"
                ),
                value=monthly_estimate,
                metadata={"merchant": merchant, "count": count, "total": totals[merchant]},
                actionable=True,
                actions=[
                    ViewMerchantAction(label="View Merchant", merchant=merchant),
                    CreateBudgetAction(label="Create Budget", amount=monthly_estimate),
                ],
                created_at=now,
                expires_at=expires_in(now, 14),
            )
        )

    return insights
