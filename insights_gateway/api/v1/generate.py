"""POST /v1/insights/generate - run the insight engine for a user and store the results"""

import time
import logging
from datetime import datetime, timedelta
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from insights_gateway.api.v1.schemas import GenerateInsightsRequest, GenerateInsightsResponse, InsightSchema
from insights_gateway.api.dependencies import get_finance_client, get_now, get_request_id
from insights_gateway.config import settings
from insights_gateway.infrastructure.database.session import get_db
from insights_gateway.infrastructure.database.repositories import InsightRepository
from insights_gateway.infrastructure.clients.finance import FinanceClient
from insights_gateway.domain.engine import generate_all_insights
from insights_gateway.domain.exceptions import FinanceAPIError, InvalidFinanceDataError
from insights_gateway.infrastructure.observability.metrics import (
    finance_fetch_failures_counter,
    generation_duration_histogram,
    generation_skipped_counter,
    record_generation,
)
from insights_gateway.infrastructure.observability.logging import log_generation, log_generation_failure

router = APIRouter()


@router.post("/insights/generate", response_model=GenerateInsightsResponse)
async def generate_insights(
    request_body: GenerateInsightsRequest,
    request: Request,
    db: Session = Depends(get_db),
    finance_client: FinanceClient = Depends(get_finance_client),
    now: datetime = Depends(get_now),
):
    """
    Generate fresh insights from the user's recent finances.

    Flow:
    1. Skip if insights were generated within the cooldown (unless regenerate)
    2. Fetch transactions, categories, budgets and the active goal
    3. Run the insight engine
    4. Persist insights with a 'generated' history event each
    5. Return the stored insights, most urgent first
    """
    start_time = time.time()
    request_id = get_request_id(request)
    user_id = request_body.user_id
    repo = InsightRepository(db)

    if not request_body.regenerate:
        since = now - timedelta(hours=settings.regeneration_cooldown_hours)
        if repo.has_recent_insights(user_id, since):
            generation_skipped_counter.inc()
            return GenerateInsightsResponse(
                generated=False,
                message="Insights already generated recently",
            )

    try:
        with generation_duration_histogram.time():
            snapshot = await finance_client.get_snapshot(user_id, now)
            insights = await generate_all_insights(user_id, snapshot, now)

        records = repo.save_insights(user_id, insights)
        db.commit()

        duration_ms = (time.time() - start_time) * 1000
        record_generation(insights)
        log_generation(request_id, user_id, len(records), duration_ms)

        return GenerateInsightsResponse(
            generated=True,
            message="Insights generated successfully",
            count=len(records),
            insights=[InsightSchema.from_record(r) for r in records],
        )

    except FinanceAPIError as e:
        finance_fetch_failures_counter.inc()
        db.rollback()
        log_generation_failure(request_id, user_id, str(e), 503)
        raise HTTPException(status_code=503, detail="Finance data service unavailable")

    except InvalidFinanceDataError as e:
        db.rollback()
        log_generation_failure(request_id, user_id, str(e), 502)
        raise HTTPException(status_code=502, detail="Finance data service returned invalid data")

    except Exception as e:
        db.rollback()
        logging.exception("Unexpected error during insight generation", extra={"request_id": request_id})
        log_generation_failure(request_id, user_id, str(e), 500)
        raise HTTPException(status_code=500, detail="Internal server error")
