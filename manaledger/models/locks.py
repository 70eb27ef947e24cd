"""Advisory lock rows; one row per lock name means the lock is held."""

import uuid
from sqlalchemy import DateTime, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from manaledger.models.base import Base


class SyncLock(Base):
    __tablename__ = "sync_locks"

    name: Mapped[str] = mapped_column(String, primary_key=True)

    run_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)

    acquired_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
