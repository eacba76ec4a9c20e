"""Gallop (training session) model."""

from datetime import date

from sqlalchemy import JSON, Date, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stablesync.database import Base
from stablesync.models.base import TimestampMixin


class HorseGallop(Base, TimestampMixin):
    """Gallop table model (idman). Append-only."""

    __tablename__ = "horse_gallops"
    __table_args__ = (UniqueConstraint("horse_id", "natural_key", name="uq_gallop_natural_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    horse_id: Mapped[int] = mapped_column(Integer, ForeignKey("horses.id"), nullable=False, index=True)
    natural_key: Mapped[str] = mapped_column(String(255), nullable=False)

    gallop_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str | None] = mapped_column(String(50), nullable=True)  # Durum
    racecourse: Mapped[str | None] = mapped_column(String(50), nullable=True)  # İ. Hip.
    surface: Mapped[str | None] = mapped_column(String(20), nullable=True)  # Pist
    jockey_name: Mapped[str | None] = mapped_column(String(100), nullable=True)  # İ. Jokeyi
    distances: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)  # {"1400": "1.02.20"}

    # Relationships
    horse = relationship("Horse", back_populates="gallops")

    def __repr__(self) -> str:
        return f"<HorseGallop(id={self.id}, horse_id={self.horse_id}, gallop_date={self.gallop_date})>"
