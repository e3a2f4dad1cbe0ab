"""Audit trail of storage operations performed by faculty and staff."""

import enum
from datetime import UTC, datetime

from sqlalchemy import BigInteger, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db import Base


class ActivityActionType(enum.Enum):
    create = "CREATE"
    update = "UPDATE"
    delete = "DELETE"
    upload = "UPLOAD"
    patch = "PATCH"


class ActivityLog(Base):
    __tablename__ = "activity_logs"
    __table_args__ = (
        Index("ix_activity_logs_entity", "entity_name", "entity_id"),
        Index("ix_activity_logs_performed_by", "performed_by_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    performed_by_id: Mapped[int] = mapped_column(Integer, nullable=False)
    performed_by_type: Mapped[int | None] = mapped_column(Integer)
    action_type: Mapped[str] = mapped_column(String(20), nullable=False)
    entity_name: Mapped[str] = mapped_column(String(100), nullable=False)
    entity_id: Mapped[int | None] = mapped_column(BigInteger().with_variant(Integer, "sqlite"))
    ip_address: Mapped[str | None] = mapped_column(String(45))
    user_agent: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )
