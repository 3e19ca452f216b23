"""SQLAlchemy model for stored clip analyses ("tracebacks")."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.dialects.postgresql import JSONB

from trace_api.models.base import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Traceback(Base):
    __tablename__ = "tracebacks"

    id = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        nullable=False,
    )
    sent_at = Column(DateTime(timezone=True), nullable=False, index=True)
    filename = Column(String(512), nullable=True)
    filesize = Column(String(64), nullable=True)
    duration = Column(String(32), nullable=True)
    analysis = Column(
        JSON().with_variant(JSONB, "postgresql"),
        nullable=False,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)


__all__ = ["Traceback"]
