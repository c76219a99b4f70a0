"""Budget recommendations from current-period utilization"""

from datetime import datetime
from typing import List
from insights_gateway.domain.models import (
    AdjustBudgetAction,
    AnalyticsTab,
    Budget,
    CategorySpending,
    CreateBudgetAction,
    Insight,
    InsightPriority,
    InsightSeverity,
    InsightType,
    ViewAnalyticsAction,
    ViewCategoryAction,
)
from insights_gateway.utils.date_utils import expires_in
from insights_gateway.utils.formatting import format_currency

OVER_UTILIZATION = 1.2
UNDER_UTILIZATION = 0.5
MIN_UNDERUSED_BUDGET = 100.0
MISSING_BUDGET_MIN_SPEND = 200.0


def analyze_budgets(
    budgets: List[Budget],
    category_spending: List[CategorySpending],
    now: datetime,
) -> List[Insight]:
    """
    Flag budgets that are too tight or too loose, and big categories without one.

    Thresholds:
    - utilization >= 1.2: suggest raising the budget to 110% of spending
    - utilization <= 0.5 on budgets of 100+: suggest 120% of spending and
      reallocating the remainder
    - category spend >= 200 with no budget: suggest 110% of spending
    """
    names = {c.category_id: c.category_name for c in category_spending}
    insights: List[Insight] = []

    for budget in budgets:
        if budget.amount <= 0:
            continue

        utilization = budget.spent / budget.amount
        category_name = budget.category_name or names.get(budget.category_id, "Uncategorized")

        if utilization >= OVER_UTILIZATION:
            suggested = budget.spent * 1.1
            insights.append(
                Insight(
                    insight_id=f"budget-too-low-{budget.budget_id}",
                    type=InsightType.BUDGET_RECOMMENDATION,
                    severity=InsightSeverity.WARNING,
                    priority=InsightPriority.HIGH,
                    title=f"{category_name} Budget May Be Too Low",
                    description=(
                        f"You're consistently over budget in {category_name}. Consider increasing "
                        f"from {format_currency(budget.amount)} to {format_currency(suggested)}"
                    ),
                    value=suggested - budget.amount,
                    metadata={
                        "budget_id": budget.budget_id,
                        "category_id": budget.category_id,
                        "current_budget": budget.amount,
                        "suggested_budget": suggested,
                        "utilization": utilization,
                    },
                    actionable=True,
                    actions=[
                        AdjustBudgetAction(label="Adjust Budget", budget_id=budget.budget_id, amount=suggested),
                        ViewCategoryAction(label="View Budget", category_id=budget.category_id),
                    ],
                    created_at=now,
                    expires_at=expires_in(now, 7),
                )
            )

        if utilization <= UNDER_UTILIZATION and budget.amount >= MIN_UNDERUSED_BUDGET:
            suggested = budget.spent * 1.2
            insights.append(
                Insight(
                    insight_id=f"budget-too-high-{budget.budget_id}",
                    type=InsightType.BUDGET_RECOMMENDATION,
                    severity=InsightSeverity.NEUTRAL,
                    priority=InsightPriority.MEDIUM,
                    title=f"{category_name} Budget Underutilized",
                    description=(
                        f"You're consistently under budget in {category_name}. Consider reallocating "
                        f"{format_currency(budget.remaining)} to other categories"
                    ),
                    value=budget.remaining,
                    metadata={
                        "budget_id": budget.budget_id,
                        "category_id": budget.category_id,
                        "current_budget": budget.amount,
                        "suggested_budget": suggested,
                        "utilization": utilization,
                    },
                    actionable=True,
                    actions=[
                        AdjustBudgetAction(label="Adjust Budget", budget_id=budget.budget_id, amount=suggested),
                        ViewAnalyticsAction(label="View All Budgets", tab=AnalyticsTab.OVERVIEW),
                    ],
                    created_at=now,
                    expires_at=expires_in(now, 14),
                )
            )

    budgeted = {b.category_id for b in budgets}
    for category in category_spending:
        if category.category_id in budgeted or category.total < MISSING_BUDGET_MIN_SPEND:
            continue

        suggested = category.total * 1.1
        insights.append(
            Insight(
                insight_id=f"missing-budget-{category.category_id}",
                type=InsightType.BUDGET_RECOMMENDATION,
                severity=InsightSeverity.NEUTRAL,
                priority=InsightPriority.MEDIUM,
                title=f"Consider Creating Budget for {category.category_name}",
                description=(
                    f"You spent {format_currency(category.total)} on {category.category_name.lower()} "
                    f"but don't have a budget set. Creating a budget helps track spending"
                ),
                value=category.total,
                metadata={
                    "category_id": category.category_id,
                    "category_name": category.category_name,
                    "suggested_budget": suggested,
                },
                actionable=True,
                actions=[
                    CreateBudgetAction(label="Create Budget", amount=suggested, category_id=category.category_id)
                ],
                created_at=now,
                expires_at=expires_in(now, 30),
            )
        )

    return insights
