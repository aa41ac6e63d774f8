"""Notification for a user (merchant), with read state and a type-specific payload.

type: notification kind ('meal_expired', 'meal_expiring_soon', or other producers' kinds).
is_read: set by the client; read rows older than the retention window are purged.
data: JSON payload (meal_id, meal_title, ...). JSONB on Postgres.
"""
from sqlalchemy import JSON, Boolean, Column, DateTime, Index, Integer, String, Text, false
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from foodsave.db.base import Base


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_type_created", "type", "created_at"),
        Index("ix_notifications_read_created", "is_read", "created_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    title = Column(String(256), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(32), nullable=False)
    payload = Column("data", JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=dict)
    is_read = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
