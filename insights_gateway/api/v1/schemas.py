"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from insights_gateway.domain.models import (
    ActionKind,
    InsightPriority,
    InsightSeverity,
    InsightType,
)


class GenerateInsightsRequest(BaseModel):
    """Request body for POST /v1/insights/generate"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    regenerate: bool = Field(False, description="Ignore the regeneration cooldown")


class InsightActionSchema(BaseModel):
    """Suggested follow-up; params depend on the action kind"""

    label: str
    action: ActionKind
    params: Dict[str, Any] = Field(default_factory=dict)


class InsightSchema(BaseModel):
    """Stored insight as returned to clients"""

    id: str
    key: str
    type: InsightType
    severity: InsightSeverity
    priority: InsightPriority
    title: str
    description: str
    value: Optional[float] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    actionable: bool
    actions: List[InsightActionSchema] = Field(default_factory=list)
    created_at: str
    expires_at: Optional[str] = None

    @classmethod
    def from_record(cls, record) -> "InsightSchema":
        """Build from an InsightRecord row"""
        return cls(
            id=str(record.id),
            key=record.insight_key,
            type=record.type,
            severity=record.severity,
            priority=record.priority,
            title=record.title,
            description=record.description,
            value=record.value,
            metadata=record.details or {},
            actionable=record.actionable,
            actions=[InsightActionSchema(**a) for a in record.actions or []],
            created_at=record.created_at.isoformat(),
            expires_at=record.expires_at.isoformat() if record.expires_at else None,
        )


class GenerateInsightsResponse(BaseModel):
    """Response for POST /v1/insights/generate"""

    generated: bool
    message: str
    count: int = 0
    insights: List[InsightSchema] = Field(default_factory=list)


class ActiveInsightsResponse(BaseModel):
    """Response for GET /v1/insights"""

    user_id: str
    insights: List[InsightSchema]


class InsightStateRequest(BaseModel):
    """Request body for POST /v1/insights/{insight_id}/dismiss"""

    user_id: str = Field(..., min_length=1)


class SnoozeRequest(InsightStateRequest):
    days: Optional[int] = Field(None, ge=1, le=90, description="Defaults to the configured snooze length")


class FeedbackRequest(InsightStateRequest):
    helpful: bool


class ActionRequest(InsightStateRequest):
    action_type: ActionKind
    action_data: Dict[str, Any] = Field(default_factory=dict)


class InsightStateResponse(BaseModel):
    """Acknowledgement for state changes on a single insight"""

    success: bool = True
    insight_id: str
    snoozed_days: Optional[int] = None
    helpful: Optional[bool] = None


class ExpireResponse(BaseModel):
    expired: int


class InsightAnalyticsResponse(BaseModel):
    """Response for GET /v1/insights/analytics"""

    user_id: str
    days: int
    total_generated: int
    total_dismissed: int
    total_snoozed: int
    total_helpful: int
    total_not_helpful: int
    actions_taken: int
    most_helpful_type: Optional[str] = None
    least_helpful_type: Optional[str] = None
