from datetime import date, timedelta
from fastapi import FastAPI, HTTPException
from pathlib import Path
from typing import Optional
import json
import os

app = FastAPI(title="Mock Finance Data Server", version="1.0.0")
# Support both local development and Docker
DATA_DIR = Path("/finance_stub") if os.path.exists("/finance_stub") else Path(__file__).resolve().parents[1] / "finance_stub"


def load_user(user_id: str) -> dict:
    file = DATA_DIR / f"{user_id}.json"
    if not file.exists():
        raise HTTPException(status_code=404, detail="user not found")
    return json.loads(file.read_text())


def resolve_dates(records: list) -> list:
    """Fixtures store `days_ago` so personas stay current; turn it into an ISO date"""
    today = date.today()
    resolved = []
    for record in records:
        record = dict(record)
        if "days_ago" in record:
            record["date"] = (today - timedelta(days=record.pop("days_ago"))).isoformat()
        resolved.append(record)
    return resolved


@app.get("/health")
def health(): return {"status": "ok"}


@app.get("/finance/transactions")
def get_transactions(user_id: str, since: Optional[str] = None):
    transactions = resolve_dates(load_user(user_id).get("transactions", []))
    if since:
        transactions = [t for t in transactions if t["date"] >= since]
    transactions.sort(key=lambda t: t["date"], reverse=True)
    return {"transactions": transactions}


@app.get("/finance/categories")
def get_categories(user_id: str):
    return {"categories": load_user(user_id).get("categories", [])}


@app.get("/finance/budgets")
def get_budgets(user_id: str):
    return {"budgets": load_user(user_id).get("budgets", [])}


@app.get("/finance/goals")
def get_goals(user_id: str, status: str = "active"):
    goals = [g for g in load_user(user_id).get("goals", []) if g.get("status", "active") == status]
    return {"goals": goals}
