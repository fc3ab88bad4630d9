"""Database models."""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from smartalk.database import Base


def _utcnow() -> datetime:
    return datetime.now(UTC)


class User(Base):
    """Learner account. Only the fields the engine reads are modelled."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False, index=True
    )

    def __repr__(self) -> str:
        """String representation of User."""
        return f"<User(id={self.id}, name='{self.name}')>"


class LearningItem(Base):
    """One keyword of a unit group (a drama and its keyword set)."""

    __tablename__ = "learning_items"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    unit_group_id: Mapped[int] = mapped_column(nullable=False, index=True)
    word: Mapped[str] = mapped_column(String(100), nullable=False)
    sort_order: Mapped[int] = mapped_column(default=0, nullable=False)
    required: Mapped[bool] = mapped_column(default=True, nullable=False)

    def __repr__(self) -> str:
        """String representation of LearningItem."""
        return f"<LearningItem(id={self.id}, unit_group_id={self.unit_group_id})>"


class AnalyticsEvent(Base):
    """Append-only behavioral event."""

    __tablename__ = "analytics_events"
    __table_args__ = (
        Index("ix_analytics_events_user_timestamp", "user_id", "timestamp"),
        Index("ix_analytics_events_type_timestamp", "event_type", "timestamp"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    event_type: Mapped[str] = mapped_column(String(50), nullable=False)
    event_data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False, index=True
    )

    def __repr__(self) -> str:
        """String representation of AnalyticsEvent."""
        return f"<AnalyticsEvent(id={self.id}, user_id={self.user_id}, type='{self.event_type}')>"


class UserProgress(Base):
    """Progress of a user on one item of a unit group."""

    __tablename__ = "user_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "unit_group_id", "item_id", name="uq_user_progress_key"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    unit_group_id: Mapped[int] = mapped_column(nullable=False, index=True)
    item_id: Mapped[int] = mapped_column(nullable=False)
    attempts: Mapped[int] = mapped_column(default=0, nullable=False)
    correct_attempts: Mapped[int] = mapped_column(default=0, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="locked", nullable=False)
    last_attempt_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    def __repr__(self) -> str:
        """String representation of UserProgress."""
        return (
            f"<UserProgress(user_id={self.user_id}, item_id={self.item_id}, "
            f"status='{self.status}')>"
        )
