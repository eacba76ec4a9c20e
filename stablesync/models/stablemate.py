"""Stablemate model."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stablesync.database import Base
from stablesync.models.base import TimestampMixin


class DataFetchStatus(str, enum.Enum):
    """Per-stablemate import status."""

    IDLE = "IDLE"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


# A rerun may start from any settled state; concurrent runs re-enter IN_PROGRESS.
ALLOWED_STATUS_TRANSITIONS: dict[DataFetchStatus, frozenset[DataFetchStatus]] = {
    DataFetchStatus.IDLE: frozenset({DataFetchStatus.IN_PROGRESS}),
    DataFetchStatus.IN_PROGRESS: frozenset(
        {DataFetchStatus.IN_PROGRESS, DataFetchStatus.COMPLETED, DataFetchStatus.FAILED}
    ),
    DataFetchStatus.COMPLETED: frozenset({DataFetchStatus.IN_PROGRESS}),
    DataFetchStatus.FAILED: frozenset({DataFetchStatus.IN_PROGRESS}),
}


def can_transition(current: DataFetchStatus, target: DataFetchStatus) -> bool:
    """Return True if ``current -> target`` is a legal status change."""
    return target in ALLOWED_STATUS_TRANSITIONS[current]


class Stablemate(Base, TimestampMixin):
    """Stablemate (eküri) table model."""

    __tablename__ = "stablemates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    data_fetch_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=DataFetchStatus.IDLE.value
    )
    data_fetch_started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    data_fetch_completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    horses = relationship("Horse", back_populates="stablemate")

    def __repr__(self) -> str:
        return f"<Stablemate(id={self.id}, name='{self.name}', status={self.data_fetch_status})>"
