"""Persisted sync run status, polled by the API."""

import uuid
from sqlalchemy import Boolean, DateTime, Float, Integer, String, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from manaledger.models.base import Base


class SyncRun(Base):
    __tablename__ = "sync_runs"

    run_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    state: Mapped[str] = mapped_column(
        String,
        nullable=False,  # idle | clearing | fetching_cards | ... | completed | failed
    )

    progress: Mapped[str | None] = mapped_column(String, nullable=True)

    clear_first: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    imported: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    errors: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    duration: Mapped[float | None] = mapped_column(Float, nullable=True)

    error_message: Mapped[str | None] = mapped_column(String, nullable=True)

    result: Mapped[dict | None] = mapped_column(JSONB, nullable=True)

    started_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    ended_at: Mapped[DateTime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
