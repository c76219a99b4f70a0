"""FastAPI application factory"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from insights_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from insights_gateway.api.v1 import analytics, generate, insights
from insights_gateway.domain.exceptions import InsightNotFoundError
from insights_gateway.infrastructure.observability.logging import setup_logging
from insights_gateway.config import settings

setup_logging(settings.log_level)


async def insight_not_found_handler(request: Request, exc: InsightNotFoundError) -> JSONResponse:
    # Unknown ids and other users' insights look the same to the caller
    return JSONResponse(status_code=404, content={"detail": "Insight not found"})


def create_app() -> FastAPI:
    app = FastAPI(
        title="Insights Gateway",
        description="Personal-finance insight generation and tracking service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Last added runs first: request IDs are assigned before timing starts
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(InsightNotFoundError, insight_not_found_handler)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(generate.router, prefix="/v1", tags=["generation"])
    app.include_router(analytics.router, prefix="/v1", tags=["analytics"])
    app.include_router(insights.router, prefix="/v1", tags=["insights"])

    return app


app = create_app()
