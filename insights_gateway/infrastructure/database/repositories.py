"""Data access layer for stored insights"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from sqlalchemy import case, func, or_
from sqlalchemy.orm import Session
from insights_gateway.infrastructure.database.models import InsightEvent, InsightRecord
from insights_gateway.domain.exceptions import InsightNotFoundError
from insights_gateway.domain.models import Insight, action_to_dict

PRIORITY_ORDER = case(
    {"critical": 4, "high": 3, "medium": 2, "low": 1},
    value=InsightRecord.priority,
    else_=0,
)


@dataclass
class InsightAnalytics:
    """Engagement summary over a trailing window"""

    total_generated: int
    total_dismissed: int
    total_snoozed: int
    total_helpful: int
    total_not_helpful: int
    actions_taken: int
    most_helpful_type: Optional[str]
    least_helpful_type: Optional[str]


class InsightRepository:
    """Repository for generated insights and their interaction history"""

    def __init__(self, db: Session):
        self.db = db

    def _log_event(
        self,
        record: InsightRecord,
        event_type: str,
        now: datetime,
        event_data: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.db.add(
            InsightEvent(
                insight_id=record.id,
                user_id=record.user_id,
                event_type=event_type,
                event_data=event_data or {},
                created_at=now,
            )
        )

    def save_insights(self, user_id: str, insights: List[Insight]) -> List[InsightRecord]:
        """Persist a generation run; each row gets a 'generated' history event"""
        records = []
        for insight in insights:
            record = InsightRecord(
                insight_key=insight.insight_id,
                user_id=user_id,
                type=insight.type.value,
                severity=insight.severity.value,
                priority=insight.priority.value,
                title=insight.title,
                description=insight.description,
                value=insight.value,
                details=insight.metadata,
                actionable=insight.actionable,
                actions=[action_to_dict(a) for a in insight.actions],
                created_at=insight.created_at,
                expires_at=insight.expires_at,
            )
            self.db.add(record)
            records.append(record)

        self.db.flush()  # Assign IDs before logging events
        for record in records:
            self._log_event(record, "generated", record.created_at)

        return records

    def has_recent_insights(self, user_id: str, since: datetime) -> bool:
        """True if any insight was generated for the user at or after `since`"""
        return (
            self.db.query(InsightRecord.id)
            .filter(InsightRecord.user_id == user_id, InsightRecord.created_at >= since)
            .first()
            is not None
        )

    def get_active_insights(self, user_id: str, now: datetime, limit: int = 100) -> List[InsightRecord]:
        """Insights that are not dismissed, not snoozed and not expired; most urgent first"""
        return (
            self.db.query(InsightRecord)
            .filter(
                InsightRecord.user_id == user_id,
                InsightRecord.dismissed.is_(False),
                or_(InsightRecord.snoozed_until.is_(None), InsightRecord.snoozed_until < now),
                or_(InsightRecord.expires_at.is_(None), InsightRecord.expires_at > now),
            )
            .order_by(PRIORITY_ORDER.desc(), InsightRecord.created_at.desc())
            .limit(limit)
            .all()
        )

    def get_owned(self, insight_id: uuid.UUID, user_id: str) -> InsightRecord:
        """
        Fetch a user's insight.

        Raises:
            InsightNotFoundError: Unknown id, or the insight belongs to someone else
        """
        record = (
            self.db.query(InsightRecord)
            .filter(InsightRecord.id == insight_id, InsightRecord.user_id == user_id)
            .first()
        )
        if record is None:
            raise InsightNotFoundError(f"Insight {insight_id} not found")
        return record

    def dismiss(self, insight_id: uuid.UUID, user_id: str, now: datetime) -> InsightRecord:
        record = self.get_owned(insight_id, user_id)
        record.dismissed = True
        record.dismissed_at = now
        self._log_event(record, "dismissed", now)
        return record

    def snooze(self, insight_id: uuid.UUID, user_id: str, days: int, now: datetime) -> InsightRecord:
        record = self.get_owned(insight_id, user_id)
        record.snoozed_until = now + timedelta(days=days)
        self._log_event(record, "snoozed", now, {"days": days})
        return record

    def mark_helpful(self, insight_id: uuid.UUID, user_id: str, helpful: bool, now: datetime) -> InsightRecord:
        record = self.get_owned(insight_id, user_id)
        record.helpful = helpful
        record.feedback_at = now
        event = "marked_helpful" if helpful else "marked_not_helpful"
        self._log_event(record, event, now, {"helpful": helpful})
        return record

    def record_action(
        self,
        insight_id: uuid.UUID,
        user_id: str,
        action_type: str,
        action_data: Dict[str, Any],
        now: datetime,
    ) -> InsightRecord:
        record = self.get_owned(insight_id, user_id)
        self._log_event(record, "action_taken", now, {"action": action_type, **action_data})
        return record

    def expire_stale(self, now: datetime) -> int:
        """Dismiss every insight past its expiry and log an 'expired' event; returns the count"""
        expired = (
            self.db.query(InsightRecord)
            .filter(
                InsightRecord.dismissed.is_(False),
                InsightRecord.expires_at.isnot(None),
                InsightRecord.expires_at < now,
            )
            .all()
        )
        for record in expired:
            record.dismissed = True
            record.dismissed_at = now
            self._log_event(record, "expired", now)
        return len(expired)

    def get_analytics(self, user_id: str, since: datetime) -> InsightAnalytics:
        """Counts of generated/dismissed/snoozed/helpful insights and actions since `since`"""
        window = self.db.query(InsightRecord).filter(
            InsightRecord.user_id == user_id,
            InsightRecord.created_at >= since,
        )
        actions_taken = (
            self.db.query(InsightEvent)
            .filter(
                InsightEvent.user_id == user_id,
                InsightEvent.event_type == "action_taken",
                InsightEvent.created_at >= since,
            )
            .count()
        )

        helpful_count = func.sum(case((InsightRecord.helpful.is_(True), 1), else_=0))
        not_helpful_count = func.sum(case((InsightRecord.helpful.is_(False), 1), else_=0))
        by_type = (
            self.db.query(InsightRecord.type, helpful_count, not_helpful_count)
            .filter(
                InsightRecord.user_id == user_id,
                InsightRecord.created_at >= since,
                InsightRecord.helpful.isnot(None),
            )
            .group_by(InsightRecord.type)
            .order_by(InsightRecord.type)
            .all()
        )

        most_helpful = max(by_type, key=lambda row: row[1], default=None)
        least_helpful = max(by_type, key=lambda row: row[2], default=None)

        return InsightAnalytics(
            total_generated=window.count(),
            total_dismissed=window.filter(InsightRecord.dismissed.is_(True)).count(),
            total_snoozed=window.filter(InsightRecord.snoozed_until.isnot(None)).count(),
            total_helpful=window.filter(InsightRecord.helpful.is_(True)).count(),
            total_not_helpful=window.filter(InsightRecord.helpful.is_(False)).count(),
            actions_taken=actions_taken,
            most_helpful_type=most_helpful[0] if most_helpful else None,
            least_helpful_type=least_helpful[0] if least_helpful else None,
        )
