"""Domain models - pure Python dataclasses representing finance records and insights"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Union


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class InsightType(str, Enum):
    SPENDING_PATTERN = "spending_pattern"
    SAVING_OPPORTUNITY = "saving_opportunity"
    BUDGET_RECOMMENDATION = "budget_recommendation"
    ANOMALY = "anomaly"
    GOAL_TRACKING = "goal_tracking"
    TREND_PREDICTION = "trend_prediction"


class InsightSeverity(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    WARNING = "warning"


class InsightPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return PRIORITY_RANK[self]


PRIORITY_RANK = {
    InsightPriority.CRITICAL: 4,
    InsightPriority.HIGH: 3,
    InsightPriority.MEDIUM: 2,
    InsightPriority.LOW: 1,
}


class ActionKind(str, Enum):
    CREATE_BUDGET = "create_budget"
    VIEW_TRANSACTIONS = "view_transactions"
    VIEW_CATEGORY = "view_category"
    VIEW_MERCHANT = "view_merchant"
    ADJUST_BUDGET = "adjust_budget"
    SET_GOAL = "set_goal"
    VIEW_ANALYTICS = "view_analytics"


class AnalyticsTab(str, Enum):
    OVERVIEW = "overview"
    CATEGORIES = "categories"
    MERCHANTS = "merchants"
    PATTERNS = "patterns"
    TIME_SERIES = "time-series"


@dataclass
class Transaction:
    """Income or expense record; amount is always a positive magnitude"""

    transaction_id: str
    amount: float
    date: date
    type: TransactionType
    category_id: Optional[str] = None
    merchant: Optional[str] = None

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE


@dataclass
class Category:
    category_id: str
    name: str
    type: str = "expense"


@dataclass
class CategorySpending:
    """Expense totals for one category across the analysis window"""

    category_id: str
    category_name: str
    total: float
    count: int
    avg_amount: float


@dataclass
class BudgetAllocation:
    """Budget as stored upstream, before spending is applied"""

    budget_id: str
    category_id: str
    amount: float
    period: str = "monthly"


@dataclass
class Budget:
    """Budget with current-period spending applied"""

    budget_id: str
    category_id: str
    amount: float
    spent: float
    category_name: Optional[str] = None

    @property
    def remaining(self) -> float:
        return self.amount - self.spent


@dataclass
class SavingsGoal:
    goal_id: str
    target_amount: float
    current_amount: float
    target_date: Optional[date] = None

    @property
    def remaining(self) -> float:
        return self.target_amount - self.current_amount


@dataclass
class MonthlySummary:
    """Income and expense totals for one calendar month (month = first day)"""

    month: date
    income: float
    expenses: float

    @property
    def net(self) -> float:
        return self.income - self.expenses


@dataclass
class RecurringCharge:
    """Merchant charged a near-constant amount at least three times"""

    merchant: str
    amount: float
    frequency: float  # occurrences per month over a 3-month reference window
    last_date: date


@dataclass
class TrendModel:
    """Least-squares line fitted against time-step indices"""

    slope: float
    intercept: float
    r2: float

    def predict(self, x: float) -> float:
        return self.slope * x + self.intercept


@dataclass
class FinancialSnapshot:
    """Already-fetched, tenant-scoped records the engine runs over"""

    transactions: List[Transaction] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    budgets: List[BudgetAllocation] = field(default_factory=list)
    goal: Optional[SavingsGoal] = None


# Insight actions: one dataclass per kind, each with its own parameters


@dataclass(frozen=True)
class CreateBudgetAction:
    kind: ClassVar[ActionKind] = ActionKind.CREATE_BUDGET

    label: str
    amount: float
    category_id: Optional[str] = None

    def params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {"amount": self.amount}
        if self.category_id is not None:
            params["category_id"] = self.category_id
        return params


@dataclass(frozen=True)
class AdjustBudgetAction:
    kind: ClassVar[ActionKind] = ActionKind.ADJUST_BUDGET

    label: str
    budget_id: str
    amount: float

    def params(self) -> Dict[str, Any]:
        return {"budget_id": self.budget_id, "amount": self.amount}


@dataclass(frozen=True)
class ViewTransactionsAction:
    kind: ClassVar[ActionKind] = ActionKind.VIEW_TRANSACTIONS

    label: str
    transaction_id: Optional[str] = None
    date: Optional[date] = None

    def params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if self.transaction_id is not None:
            params["transaction_id"] = self.transaction_id
        if self.date is not None:
            params["date"] = self.date.isoformat()
        return params


@dataclass(frozen=True)
class ViewCategoryAction:
    kind: ClassVar[ActionKind] = ActionKind.VIEW_CATEGORY

    label: str
    category_id: str

    def params(self) -> Dict[str, Any]:
        return {"category_id": self.category_id}


@dataclass(frozen=True)
class ViewMerchantAction:
    kind: ClassVar[ActionKind] = ActionKind.VIEW_MERCHANT

    label: str
    merchant: str

    def params(self) -> Dict[str, Any]:
        return {"merchant": self.merchant}


@dataclass(frozen=True)
class SetGoalAction:
    kind: ClassVar[ActionKind] = ActionKind.SET_GOAL

    label: str
    amount: float

    def params(self) -> Dict[str, Any]:
        return {"amount": self.amount}


@dataclass(frozen=True)
class ViewAnalyticsAction:
    kind: ClassVar[ActionKind] = ActionKind.VIEW_ANALYTICS

    label: str
    tab: AnalyticsTab = AnalyticsTab.OVERVIEW

    def params(self) -> Dict[str, Any]:
        return {"tab": self.tab.value}


InsightAction = Union[
    CreateBudgetAction,
    AdjustBudgetAction,
    ViewTransactionsAction,
    ViewCategoryAction,
    ViewMerchantAction,
    SetGoalAction,
    ViewAnalyticsAction,
]


def action_to_dict(action: InsightAction) -> Dict[str, Any]:
    """Wire format consumed by the UI layer"""
    return {"label": action.label, "action": action.kind.value, "params": action.params()}


@dataclass
class Insight:
    """Derived finding produced by one generation run"""

    insight_id: str  # deterministic per trigger, e.g. "spending-change-<category_id>"
    type: InsightType
    severity: InsightSeverity
    priority: InsightPriority
    title: str
    description: str
    created_at: datetime
    value: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    actionable: bool = False
    actions: List[InsightAction] = field(default_factory=list)
    expires_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.insight_id,
            "type": self.type.value,
            "severity": self.severity.value,
            "priority": self.priority.value,
            "title": self.title,
            "description": self.description,
            "value": self.value,
            "metadata": self.metadata,
            "actionable": self.actionable,
            "actions": [action_to_dict(a) for a in self.actions],
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }
