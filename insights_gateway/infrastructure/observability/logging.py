"""Structured JSON logging for generation runs and insight interactions"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from insights_gateway.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Adds event time (UTC), level and service name to every record"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Route the root logger to stdout as one JSON object per line"""
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    root.addHandler(handler)


def log_generation(
    request_id: str,
    user_id: str,
    insight_count: int,
    duration_ms: float,
) -> None:
    logging.info(
        "Insights generated",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "generation_complete",
            "insight_count": insight_count,
            "duration_ms": duration_ms,
        },
    )


def log_generation_failure(request_id: str, user_id: str, reason: str, status_code: int) -> None:
    """Log a generation run that ended in an error response"""
    logging.error(
        "Insight generation failed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "generation_failed",
            "reason": reason,
            "status_code": status_code,
        },
    )


def log_insight_event(request_id: str, user_id: str, insight_id: str, event: str) -> None:
    """Log a user interaction with a stored insight (dismiss, snooze, feedback, action)"""
    logging.info(
        "Insight event recorded",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "insight_id": insight_id,
            "event": event,
        },
    )
