"""Finance data API HTTP client for fetching a user's transactions, categories, budgets and goals"""

import asyncio
import httpx
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional
from insights_gateway.domain.models import (
    BudgetAllocation,
    Category,
    FinancialSnapshot,
    SavingsGoal,
    Transaction,
    TransactionType,
)
from insights_gateway.domain.exceptions import FinanceAPIError, InvalidFinanceDataError
from insights_gateway.config import settings


def parse_transaction(raw: Dict[str, Any]) -> Transaction:
    return Transaction(
        transaction_id=str(raw["id"]),
        amount=abs(float(raw["amount"])),
        date=date.fromisoformat(raw["date"][:10]),
        type=TransactionType(raw["type"]),
        category_id=str(raw["category_id"]) if raw.get("category_id") is not None else None,
        merchant=raw.get("merchant_name") or None,
    )


def parse_category(raw: Dict[str, Any]) -> Category:
    return Category(category_id=str(raw["id"]), name=raw["name"], type=raw.get("type", "expense"))


def parse_budget(raw: Dict[str, Any]) -> BudgetAllocation:
    return BudgetAllocation(
        budget_id=str(raw["id"]),
        category_id=str(raw["category_id"]),
        amount=float(raw["amount"]),
        period=raw.get("period", "monthly"),
    )


def parse_goal(raw: Dict[str, Any]) -> SavingsGoal:
    target_date = raw.get("target_date")
    return SavingsGoal(
        goal_id=str(raw["id"]),
        target_amount=float(raw["target_amount"]),
        current_amount=float(raw.get("current_amount") or 0),
        target_date=date.fromisoformat(target_date[:10]) if target_date else None,
    )


def latest_goal(goals: List[Dict[str, Any]]) -> Optional[SavingsGoal]:
    """Most recently created active goal, if any"""
    if not goals:
        return None
    newest = max(goals, key=lambda g: g.get("created_at") or "")
    return parse_goal(newest)


class FinanceClient:
    """Client for the hosted finance data API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.finance_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def _get(self, client: httpx.AsyncClient, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        response = await client.get(f"{self.base_url}{path}", params=params)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise InvalidFinanceDataError(f"Finance API returned {type(data).__name__} for {path}, expected an object")
        return data

    async def get_snapshot(self, user_id: str, now: datetime) -> FinancialSnapshot:
        """
        Fetch everything the insight engine needs for one user.

        The four requests run concurrently: transactions for the lookback
        window (default 90 days), category metadata, budgets, and active goals.

        Raises:
            FinanceAPIError: On timeout or HTTP errors
            InvalidFinanceDataError: On malformed records
        """
        since = (now - timedelta(days=settings.lookback_days)).date().isoformat()

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                txn_data, category_data, budget_data, goal_data = await asyncio.gather(
                    self._get(client, "/finance/transactions", {"user_id": user_id, "since": since}),
                    self._get(client, "/finance/categories", {"user_id": user_id}),
                    self._get(client, "/finance/budgets", {"user_id": user_id}),
                    self._get(client, "/finance/goals", {"user_id": user_id, "status": "active"}),
                )
            except httpx.TimeoutException as e:
                raise FinanceAPIError(f"Finance API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise FinanceAPIError(f"Finance API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise FinanceAPIError(f"Finance API unreachable: {e}") from e
            except ValueError as e:
                raise InvalidFinanceDataError(f"Finance API returned invalid JSON: {e}") from e

        try:
            return FinancialSnapshot(
                transactions=[parse_transaction(t) for t in txn_data.get("transactions", [])],
                categories=[parse_category(c) for c in category_data.get("categories", [])],
                budgets=[parse_budget(b) for b in budget_data.get("budgets", [])],
                goal=latest_goal(goal_data.get("goals", [])),
            )
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise InvalidFinanceDataError(f"Invalid finance data: {e}") from e
