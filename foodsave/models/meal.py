"""Meal listed by a merchant: sellable until available_until while status is 'available'.

Owned by the catalog; the expiry check only flips status to 'expired' and refreshes updated_at.
remaining_quantity is decremented by checkout and only read here.
"""
import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, Index, Integer, String
from sqlalchemy.sql import func

from foodsave.db.base import Base


class Meal(Base):
    __tablename__ = "meals"
    __table_args__ = (
        Index("ix_meals_status_available_until", "status", "available_until"),
        CheckConstraint("remaining_quantity >= 0", name="ck_meals_remaining_quantity"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(256), nullable=False)
    merchant_id = Column(String(36), nullable=False, index=True)
    available_until = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(20), nullable=False, server_default="available")
    remaining_quantity = Column(Integer, nullable=False, server_default="0")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
