"""Persistence models for loyalty accounts and their event ledger."""

from __future__ import annotations

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import UUID

from loyalty_points.db.base import Base


class LoyaltyAccount(Base):
    """Running point balance per member."""

    __tablename__ = "loyalty_accounts"

    member_id = Column(UUID(as_uuid=True), primary_key=True)
    points = Column(Integer, nullable=False, default=0)
    event_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class LoyaltyEventRecord(Base):
    """Immutable ledger entry; ``sequence`` preserves insertion order.

    Event ids are unique per member, not globally.
    """

    __tablename__ = "loyalty_events"
    __table_args__ = (UniqueConstraint("member_id", "sequence", name="uq_loyalty_events_member_sequence"),)

    member_id = Column(
        UUID(as_uuid=True),
        ForeignKey("loyalty_accounts.member_id", ondelete="CASCADE"),
        primary_key=True,
    )
    event_id = Column(UUID(as_uuid=True), primary_key=True)
    sequence = Column(Integer, nullable=False)
    delta_points = Column(Integer, nullable=False)
    reason = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
