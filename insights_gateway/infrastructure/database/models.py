"""SQLAlchemy ORM models for stored insights and their interaction history"""

import uuid
from sqlalchemy import Column, Boolean, Float, DateTime, ForeignKey, Text, JSON, Uuid
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class InsightRecord(Base):
    """Insight persisted from a generation run, plus per-user state"""

    __tablename__ = "insights"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    insight_key = Column(Text, nullable=False, index=True)  # deterministic engine id
    user_id = Column(Text, nullable=False, index=True)
    type = Column(Text, nullable=False, index=True)
    severity = Column(Text, nullable=False)
    priority = Column(Text, nullable=False, index=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    value = Column(Float, nullable=True)
    details = Column("metadata", JSON, nullable=False, default=dict)
    actionable = Column(Boolean, nullable=False, default=False)
    actions = Column(JSON, nullable=False, default=list)

    # State management
    dismissed = Column(Boolean, nullable=False, default=False)
    dismissed_at = Column(DateTime(timezone=True), nullable=True)
    snoozed_until = Column(DateTime(timezone=True), nullable=True)
    helpful = Column(Boolean, nullable=True)
    feedback_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    events = relationship("InsightEvent", back_populates="insight", cascade="all, delete-orphan")


class InsightEvent(Base):
    """Interaction log: generated, dismissed, snoozed, action_taken, marked_(not_)helpful, expired"""

    __tablename__ = "insight_history"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    insight_id = Column(Uuid(as_uuid=True), ForeignKey("insights.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Text, nullable=False, index=True)
    event_type = Column(Text, nullable=False, index=True)
    event_data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    insight = relationship("InsightRecord", back_populates="events")
