"""GET /v1/insights/analytics - engagement summary for a user's insights"""

from datetime import datetime, timedelta
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from insights_gateway.api.v1.schemas import InsightAnalyticsResponse
from insights_gateway.api.dependencies import get_now
from insights_gateway.config import settings
from insights_gateway.infrastructure.database.session import get_db
from insights_gateway.infrastructure.database.repositories import InsightRepository

router = APIRouter()


@router.get("/insights/analytics", response_model=InsightAnalyticsResponse)
def get_insight_analytics(
    user_id: str = Query(..., min_length=1, description="User identifier"),
    days: Optional[int] = Query(None, ge=1, le=365, description="Trailing window in days"),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """
    Summarize how the user engaged with insights over a trailing window.

    Returns:
        Generated/dismissed/snoozed/helpful counts, actions taken, and the
        insight types rated most and least helpful
    """
    days = days or settings.analytics_window_days
    analytics = InsightRepository(db).get_analytics(user_id, now - timedelta(days=days))

    return InsightAnalyticsResponse(
        user_id=user_id,
        days=days,
        total_generated=analytics.total_generated,
        total_dismissed=analytics.total_dismissed,
        total_snoozed=analytics.total_snoozed,
        total_helpful=analytics.total_helpful,
        total_not_helpful=analytics.total_not_helpful,
        actions_taken=analytics.actions_taken,
        most_helpful_type=analytics.most_helpful_type,
        least_helpful_type=analytics.least_helpful_type,
    )
