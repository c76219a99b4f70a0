"""Pytest fixtures for testing"""

import pytest
from datetime import date, datetime, timezone
from typing import Callable, Generator, Optional
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session
from insights_gateway.api.main import create_app
from insights_gateway.api.dependencies import get_now
from insights_gateway.infrastructure.database.models import Base
from insights_gateway.infrastructure.database.session import build_engine, get_db
from insights_gateway.domain.models import (
    BudgetAllocation,
    Category,
    FinancialSnapshot,
    SavingsGoal,
    Transaction,
    TransactionType,
)

# Wednesday; last month = May 2025, the month before = April 2025
NOW = datetime(2025, 6, 18, 12, 0, tzinfo=timezone.utc)

# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = build_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_txn() -> Callable[..., Transaction]:
    """Factory for transactions with sequential ids"""
    counter = {"n": 0}

    def _make(
        amount: float,
        on: date,
        type: TransactionType = TransactionType.EXPENSE,
        category_id: Optional[str] = None,
        merchant: Optional[str] = None,
    ) -> Transaction:
        counter["n"] += 1
        return Transaction(
            transaction_id=f"txn_{counter['n']:03d}",
            amount=amount,
            date=on,
            type=type,
            category_id=category_id,
            merchant=merchant,
        )

    return _make


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database and a pinned clock"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_now] = lambda: NOW
    return TestClient(app)


@pytest.fixture
def sample_snapshot(make_txn) -> FinancialSnapshot:
    """
    Three months of history for one user.

    Produces at least: an over-budget dining budget, a stale $9.99
    subscription, a large one-off purchase and salary-driven trend insights.
    """
    transactions = []

    # Monthly salary and rent
    for on in (date(2025, 4, 1), date(2025, 5, 1), date(2025, 6, 1)):
        transactions.append(make_txn(5000.00, on, TransactionType.INCOME, merchant="Employer"))
        transactions.append(make_txn(1500.00, on, category_id="cat_rent", merchant="Landlord"))

    # Subscription that stopped 75 days ago
    for on in (date(2025, 1, 4), date(2025, 2, 4), date(2025, 3, 4), date(2025, 4, 4)):
        transactions.append(make_txn(9.99, on, category_id="cat_fun", merchant="StreamFlix"))

    # Dining this month, well over its 200 budget
    for day in (2, 5, 9, 12, 16):
        transactions.append(make_txn(50.00, date(2025, 6, day), category_id="cat_dining", merchant="Bistro"))

    # One-off large purchase
    transactions.append(make_txn(1800.00, date(2025, 6, 10), category_id="cat_shopping", merchant="TechStore"))

    return FinancialSnapshot(
        transactions=transactions,
        categories=[
            Category("cat_rent", "Rent"),
            Category("cat_fun", "Entertainment"),
            Category("cat_dining", "Dining"),
            Category("cat_shopping", "Shopping"),
        ],
        budgets=[BudgetAllocation("bud_dining", "cat_dining", 200.00)],
        goal=SavingsGoal("goal_1", target_amount=20000.00, current_amount=4000.00),
    )
