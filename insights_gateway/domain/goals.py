"""Savings-goal tracking and income/expense trend projections"""

import math
from datetime import datetime
from typing import List, Optional
from insights_gateway.domain.models import (
    AnalyticsTab,
    Insight,
    InsightPriority,
    InsightSeverity,
    InsightType,
    MonthlySummary,
    SavingsGoal,
    SetGoalAction,
    ViewAnalyticsAction,
)
from insights_gateway.domain.trends import calculate_linear_trend
from insights_gateway.utils.date_utils import add_months, expires_in
from insights_gateway.utils.formatting import format_currency, format_percent

ON_TRACK_PCT = 80.0
OFF_TRACK_PCT = 50.0
CATCH_UP_MONTHS = 6
RECOMMENDED_SAVINGS_RATE = 20.0
LOW_SAVINGS_RATE = 10.0
MILESTONE_BAND = 5.0
MIN_TREND_MONTHS = 3


def analyze_goal_progress(
    goal: Optional[SavingsGoal],
    monthly_income: float,
    monthly_expenses: float,
    now: datetime,
) -> List[Insight]:
    """
    Classify savings-goal progress and this month's savings rate.

    Goal progress (needs a goal with a positive target):
    - >= 80%: on track
    - < 50%: off track, with the contribution needed to finish in 6 months

    Savings rate (needs income this month), against a 20% benchmark:
    - > 20%: excellent
    - < 10%: low
    - 20% to 25%: milestone; fires alongside "excellent"
    """
    monthly_savings = monthly_income - monthly_expenses
    insights: List[Insight] = []

    if goal is not None and goal.target_amount > 0:
        insights.extend(_goal_progress(goal, monthly_savings, now))

    if monthly_income > 0:
        savings_rate = monthly_savings / monthly_income * 100
        insights.extend(_savings_rate(savings_rate, monthly_savings, monthly_income, now))

    return insights


def _goal_progress(goal: SavingsGoal, monthly_savings: float, now: datetime) -> List[Insight]:
    progress = goal.current_amount / goal.target_amount * 100

    if progress >= ON_TRACK_PCT:
        return [
            Insight(
                insight_id="goal-on-track",
                type=InsightType.GOAL_TRACKING,
                severity=InsightSeverity.POSITIVE,
                priority=InsightPriority.HIGH,
                title="Great Progress on Savings Goal!",
                description=(
                    f"You're {format_percent(progress)} of the way to your savings goal of "
                    f"{format_currency(goal.target_amount)}. Keep up the great work!"
                ),
                value=goal.current_amount,
                metadata={
                    "goal_id": goal.goal_id,
                    "goal": goal.target_amount,
                    "current": goal.current_amount,
                    "remaining": goal.remaining,
                    "progress_percent": progress,
                },
                actionable=False,
                created_at=now,
                expires_at=expires_in(now, 30),
            )
        ]

    if progress < OFF_TRACK_PCT:
        months_to_goal = math.ceil(goal.remaining / monthly_savings) if monthly_savings > 0 else None
        needed_monthly = goal.remaining / CATCH_UP_MONTHS
        return [
            Insight(
                insight_id="goal-off-track",
                type=InsightType.GOAL_TRACKING,
                severity=InsightSeverity.WARNING,
                priority=InsightPriority.HIGH,
                title="Savings Goal Needs Attention",
                description=(
                    f"You're {format_percent(progress)} toward your goal. To reach "
                    f"{format_currency(goal.target_amount)} in {CATCH_UP_MONTHS} months, increase monthly "
                    f"savings to {format_currency(needed_monthly)}"
                ),
                value=needed_monthly - monthly_savings,
                metadata={
                    "goal_id": goal.goal_id,
                    "goal": goal.target_amount,
                    "current": goal.current_amount,
                    "current_monthly_savings": monthly_savings,
                    "needed_monthly_savings": needed_monthly,
                    "months_to_goal": months_to_goal,
                },
                actionable=True,
                actions=[
                    ViewAnalyticsAction(label="View Savings Tips", tab=AnalyticsTab.OVERVIEW),
                    SetGoalAction(
                        label="Adjust Goal",
                        amount=goal.current_amount + monthly_savings * CATCH_UP_MONTHS,
                    ),
                ],
                created_at=now,
                expires_at=expires_in(now, 30),
            )
        ]

    return []


def _savings_rate(
    savings_rate: float,
    monthly_savings: float,
    monthly_income: float,
    now: datetime,
) -> List[Insight]:
    figures = {
        "savings_rate": savings_rate,
        "monthly_savings": monthly_savings,
        "monthly_income": monthly_income,
    }
    insights = []

    if savings_rate > RECOMMENDED_SAVINGS_RATE:
        insights.append(
            Insight(
                insight_id="savings-rate-excellent",
                type=InsightType.GOAL_TRACKING,
                severity=InsightSeverity.POSITIVE,
                priority=InsightPriority.MEDIUM,
                title="Excellent Savings Rate!",
                description=(
                    f"You're saving {format_percent(savings_rate)} of your income, which is above the "
                    f"recommended {format_percent(RECOMMENDED_SAVINGS_RATE)}. You're building wealth effectively!"
                ),
                value=savings_rate,
                metadata=dict(figures),
                actionable=False,
                created_at=now,
                expires_at=expires_in(now, 30),
            )
        )
    elif savings_rate < LOW_SAVINGS_RATE:
        insights.append(
            Insight(
                insight_id="savings-rate-low",
                type=InsightType.GOAL_TRACKING,
                severity=InsightSeverity.WARNING,
                priority=InsightPriority.HIGH,
                title="Low Savings Rate",
                description=(
                    f"You're only saving {format_percent(savings_rate)} of your income. Try to reach at least "
                    f"{format_percent(RECOMMENDED_SAVINGS_RATE)} by reducing expenses or increasing income"
                ),
                value=savings_rate,
                metadata={**figures, "target_savings": monthly_income * RECOMMENDED_SAVINGS_RATE / 100},
                actionable=True,
                actions=[ViewAnalyticsAction(label="View Saving Opportunities", tab=AnalyticsTab.OVERVIEW)],
                created_at=now,
                expires_at=expires_in(now, 30),
            )
        )

    if RECOMMENDED_SAVINGS_RATE <= savings_rate < RECOMMENDED_SAVINGS_RATE + MILESTONE_BAND:
        insights.append(
            Insight(
                insight_id="savings-rate-milestone",
                type=InsightType.GOAL_TRACKING,
                severity=InsightSeverity.POSITIVE,
                priority=InsightPriority.MEDIUM,
                title="Savings Rate Milestone Reached!",
                description=(
                    f"Congratulations! You've reached the recommended {format_percent(RECOMMENDED_SAVINGS_RATE)} "
                    f"savings rate with {format_percent(savings_rate)} this month"
                ),
                value=savings_rate,
                metadata=dict(figures),
                actionable=False,
                created_at=now,
                expires_at=expires_in(now, 7),
            )
        )

    return insights


def predict_trends(
    monthly_summaries: List[MonthlySummary],
    goal: Optional[SavingsGoal],
    now: datetime,
) -> List[Insight]:
    """Project next month's income and expenses; estimate when the goal is reached"""
    if len(monthly_summaries) < MIN_TREND_MONTHS:
        return []

    next_index = len(monthly_summaries)
    expense_trend = calculate_linear_trend([m.expenses for m in monthly_summaries])
    income_trend = calculate_linear_trend([m.income for m in monthly_summaries])
    next_expenses = expense_trend.predict(next_index)
    next_income = income_trend.predict(next_index)
    expenses_rising = expense_trend.slope > 0
    income_rising = income_trend.slope > 0

    insights = [
        Insight(
            insight_id="expense-prediction",
            type=InsightType.TREND_PREDICTION,
            severity=InsightSeverity.WARNING if expenses_rising else InsightSeverity.POSITIVE,
            priority=InsightPriority.MEDIUM,
            title="Next Month Expense Projection",
            description=(
                f"Based on your spending trends, you're projected to spend {format_currency(next_expenses)} "
                f"next month{', an increase from recent months' if expenses_rising else ''}"
            ),
            value=next_expenses,
            metadata={
                "projection": next_expenses,
                "trend": "increasing" if expenses_rising else "decreasing",
                "confidence": expense_trend.r2,
            },
            actionable=True,
            actions=[ViewAnalyticsAction(label="View Trends", tab=AnalyticsTab.TIME_SERIES)],
            created_at=now,
            expires_at=expires_in(now, 30),
        ),
        Insight(
            insight_id="income-prediction",
            type=InsightType.TREND_PREDICTION,
            severity=InsightSeverity.POSITIVE if income_rising else InsightSeverity.WARNING,
            priority=InsightPriority.MEDIUM,
            title="Next Month Income Projection",
            description=(
                f"Your projected income for next month is {format_currency(next_income)} based on recent trends"
            ),
            value=next_income,
            metadata={
                "projection": next_income,
                "trend": "increasing" if income_rising else "decreasing",
                "confidence": income_trend.r2,
            },
            actionable=False,
            created_at=now,
            expires_at=expires_in(now, 30),
        ),
    ]

    avg_savings = sum(m.net for m in monthly_summaries) / len(monthly_summaries)
    if goal is None or goal.remaining <= 0 or avg_savings <= 0:
        return insights

    months_to_goal = math.ceil(goal.remaining / avg_savings)
    target_date = add_months(now, months_to_goal)
    insights.append(
        Insight(
            insight_id="goal-achievement-prediction",
            type=InsightType.TREND_PREDICTION,
            severity=InsightSeverity.POSITIVE,
            priority=InsightPriority.HIGH,
            title="Savings Goal Timeline",
            description=(
                f"At your current savings rate of {format_currency(avg_savings)}/month, you'll reach your goal "
                f"of {format_currency(goal.target_amount)} by {target_date.strftime('%B %Y')}"
            ),
            value=months_to_goal,
            metadata={
                "goal_id": goal.goal_id,
                "goal": goal.target_amount,
                "current": goal.current_amount,
                "monthly_savings": avg_savings,
                "months_to_goal": months_to_goal,
                "target_date": target_date.isoformat(),
            },
            actionable=False,
            created_at=now,
            expires_at=expires_in(now, 30),
        )
    )

    return insights
