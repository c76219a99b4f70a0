"""Active insight listing and per-insight state: dismiss, snooze, feedback, actions, expiry"""

import uuid
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from insights_gateway.api.v1.schemas import (
    ActionRequest,
    ActiveInsightsResponse,
    ExpireResponse,
    FeedbackRequest,
    InsightSchema,
    InsightStateRequest,
    InsightStateResponse,
    SnoozeRequest,
)
from insights_gateway.api.dependencies import get_now, get_request_id
from insights_gateway.config import settings
from insights_gateway.infrastructure.database.session import get_db
from insights_gateway.infrastructure.database.repositories import InsightRepository
from insights_gateway.infrastructure.observability.metrics import insight_events_counter
from insights_gateway.infrastructure.observability.logging import log_insight_event

router = APIRouter()


def parse_insight_id(insight_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(insight_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid insight ID format")


def record_event(request: Request, user_id: str, insight_id: str, event: str) -> None:
    insight_events_counter.labels(event=event).inc()
    log_insight_event(get_request_id(request), user_id, insight_id, event)


@router.get("/insights", response_model=ActiveInsightsResponse)
def list_active_insights(
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """
    Retrieve insights the user should currently see.

    Dismissed, snoozed and expired insights are excluded; results are ordered
    by priority, newest first within a priority.
    """
    records = InsightRepository(db).get_active_insights(user_id, now)
    return ActiveInsightsResponse(
        user_id=user_id,
        insights=[InsightSchema.from_record(r) for r in records],
    )


@router.post("/insights/expire", response_model=ExpireResponse)
def expire_insights(db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    """Mark every insight past its expiry as dismissed"""
    expired = InsightRepository(db).expire_stale(now)
    db.commit()
    if expired:
        insight_events_counter.labels(event="expired").inc(expired)
    return ExpireResponse(expired=expired)


@router.post("/insights/{insight_id}/dismiss", response_model=InsightStateResponse)
def dismiss_insight(
    insight_id: str,
    request_body: InsightStateRequest,
    request: Request,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    InsightRepository(db).dismiss(parse_insight_id(insight_id), request_body.user_id, now)
    db.commit()
    record_event(request, request_body.user_id, insight_id, "dismissed")
    return InsightStateResponse(insight_id=insight_id)


@router.post("/insights/{insight_id}/snooze", response_model=InsightStateResponse)
def snooze_insight(
    insight_id: str,
    request_body: SnoozeRequest,
    request: Request,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Hide an insight for `days` days (default from settings)"""
    days = request_body.days or settings.default_snooze_days
    InsightRepository(db).snooze(parse_insight_id(insight_id), request_body.user_id, days, now)
    db.commit()
    record_event(request, request_body.user_id, insight_id, "snoozed")
    return InsightStateResponse(insight_id=insight_id, snoozed_days=days)


@router.post("/insights/{insight_id}/feedback", response_model=InsightStateResponse)
def insight_feedback(
    insight_id: str,
    request_body: FeedbackRequest,
    request: Request,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    InsightRepository(db).mark_helpful(parse_insight_id(insight_id), request_body.user_id, request_body.helpful, now)
    db.commit()
    event = "marked_helpful" if request_body.helpful else "marked_not_helpful"
    record_event(request, request_body.user_id, insight_id, event)
    return InsightStateResponse(insight_id=insight_id, helpful=request_body.helpful)


@router.post("/insights/{insight_id}/action", response_model=InsightStateResponse)
def insight_action(
    insight_id: str,
    request_body: ActionRequest,
    request: Request,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Record that the user followed one of the insight's suggested actions"""
    InsightRepository(db).record_action(
        parse_insight_id(insight_id),
        request_body.user_id,
        request_body.action_type.value,
        request_body.action_data,
        now,
    )
    db.commit()
    record_event(request, request_body.user_id, insight_id, "action_taken")
    return InsightStateResponse(insight_id=insight_id)
