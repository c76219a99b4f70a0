"""Dependency injection for FastAPI endpoints"""

from datetime import datetime, timezone
from fastapi import Request
from insights_gateway.infrastructure.clients.finance import FinanceClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_finance_client() -> FinanceClient:
    """Provide finance data API client instance"""
    return FinanceClient()


def get_now() -> datetime:
    """Current UTC time; overridden in tests to pin expiry timestamps"""
    return datetime.now(timezone.utc)
