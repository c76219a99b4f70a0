"""Saving-opportunity insights: category reduction targets, cheaper merchants, stale subscriptions"""

from collections import defaultdict
from dataclasses import dataclass
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
from insights_gateway.domain.recurrence import find_recurring_charges
from insights_gateway.utils.date_utils import days_since, expires_in
from insights_gateway.utils.formatting import format_currency

TOP_CATEGORY_COUNT = 3
REDUCTION_RATE = 0.15
MIN_CATEGORY_SAVINGS = 50.0
HIGH_CATEGORY_SAVINGS = 200.0
MIN_PRICE_GAP_RATIO = 0.2
MIN_MERCHANT_SAVINGS = 30.0
SUBSCRIPTION_MAX_AMOUNT = 50.0
SUBSCRIPTION_MIN_FREQUENCY = 0.9
SUBSCRIPTION_STALE_DAYS = 60


@dataclass
class _MerchantTotals:
    name: str
    total: float = 0.0
    count: int = 0

    @property
    def avg(self) -> float:
        return self.total / self.count if self.count else 0.0


def analyze_saving_opportunities(
    transactions: List[Transaction],
    category_spending: List[CategorySpending],
    now: datetime,
) -> List[Insight]:
    insights: List[Insight] = []
    insights.extend(_category_reductions(category_spending, now))
    insights.extend(_merchant_comparisons(transactions, category_spending, now))
    insights.extend(_unused_subscriptions(transactions, now))
    return insights


def _category_reductions(category_spending: List[CategorySpending], now: datetime) -> List[Insight]:
    """Assume the biggest categories can shrink by a flat 15%"""
    top = sorted(category_spending, key=lambda c: c.total, reverse=True)[:TOP_CATEGORY_COUNT]

    insights = []
    for category in top:
        potential = category.total * REDUCTION_RATE
        if potential < MIN_CATEGORY_SAVINGS:
            continue

        target = category.total * (1 - REDUCTION_RATE)
        insights.append(
            Insight(
                insight_id=f"saving-opportunity-{category.category_id}",
                type=InsightType.SAVING_OPPORTUNITY,
                severity=InsightSeverity.POSITIVE,
                priority=InsightPriority.HIGH if potential >= HIGH_CATEGORY_SAVINGS else InsightPriority.MEDIUM,
                title=f"Potential Savings in {category.category_name}",
                description=(
                    f"You could save approximately {format_currency(potential)}/month by reducing "
                    f"{category.category_name.lower()} spending by 15%"
                ),
                value=potential,
                metadata={
                    "category_id": category.category_id,
                    "category_name": category.category_name,
                    "current_spending": category.total,
                    "target_spending": target,
                },
                actionable=True,
                actions=[
                    ViewCategoryAction(label="View Category", category_id=category.category_id),
                    CreateBudgetAction(label="Set Budget", amount=target, category_id=category.category_id),
                ],
                created_at=now,
                expires_at=expires_in(now, 30),
            )
        )

    return insights


def _merchant_comparisons(
    transactions: List[Transaction],
    category_spending: List[CategorySpending],
    now: datetime,
) -> List[Insight]:
    """Within a category, compare the two merchants the user spends most at"""
    by_category: Dict[str, Dict[str, _MerchantTotals]] = defaultdict(dict)
    for txn in transactions:
        if not txn.is_expense or not txn.merchant or not txn.category_id:
            continue
        merchants = by_category[txn.category_id]
        totals = merchants.setdefault(txn.merchant, _MerchantTotals(name=txn.merchant))
        totals.total += txn.amount
        totals.count += 1

    names = {c.category_id: c.category_name for c in category_spending}

    insights = []
    for category_id in sorted(by_category):
        ranked = sorted(by_category[category_id].values(), key=lambda m: (-m.total, m.name))
        if len(ranked) < 2:
            continue

        pricier, cheaper = ranked[0], ranked[1]
        if pricier.avg <= 0:
            continue
        price_gap = pricier.avg - cheaper.avg
        potential = price_gap * pricier.count
        if price_gap / pricier.avg < MIN_PRICE_GAP_RATIO or potential < MIN_MERCHANT_SAVINGS:
            continue

        category_name = names.get(category_id, "this category")
        insights.append(
            Insight(
                insight_id=f"merchant-comparison-{category_id}",
                type=InsightType.SAVING_OPPORTUNITY,
                severity=InsightSeverity.POSITIVE,
                priority=InsightPriority.MEDIUM,
                title="Merchant Savings Opportunity",
                description=(
                    f"Shopping at {cheaper.name} instead of {pricier.name} could save you "
                    f"{format_currency(potential)}/month in {category_name}"
                ),
                value=potential,
                metadata={
                    "category_id": category_id,
                    "expensive_merchant": pricier.name,
                    "cheaper_merchant": cheaper.name,
                    "avg_expensive": pricier.avg,
                    "avg_cheaper": cheaper.avg,
                },
                actionable=True,
                actions=[ViewAnalyticsAction(label="Compare Merchants", tab=AnalyticsTab.MERCHANTS)],
                created_at=now,
                expires_at=expires_in(now, 30),
            )
        )

    return insights


def _unused_subscriptions(transactions: List[Transaction], now: datetime) -> List[Insight]:
    """Small, regular charges that stopped showing up more than 60 days ago"""
    insights = []
    for charge in find_recurring_charges(transactions):
        if (
            charge.amount >= SUBSCRIPTION_MAX_AMOUNT
            or charge.frequency < SUBSCRIPTION_MIN_FREQUENCY
            or days_since(charge.last_date, now) <= SUBSCRIPTION_STALE_DAYS
        ):
            continue

        annual = charge.amount * 12
        insights.append(
            Insight(
                insight_id=f"unused-subscription-{charge.merchant}",
                type=InsightType.SAVING_OPPORTUNITY,
                severity=InsightSeverity.WARNING,
                priority=InsightPriority.HIGH,
                title="Potential Unused Subscription",
                description=(
                    f"{charge.merchant} charges {format_currency(charge.amount)}/month but hasn't been "
                    f"used in 60+ days. Consider canceling to save {format_currency(annual)}/year"
                ),
                value=annual,
                metadata={
                    "merchant": charge.merchant,
                    "amount": charge.amount,
                    "last_transaction": charge.last_date.isoformat(),
                },
                actionable=True,
                actions=[ViewMerchantAction(label="View Transactions", merchant=charge.merchant)],
                created_at=now,
                expires_at=expires_in(now, 30),
            )
        )

    return insights
