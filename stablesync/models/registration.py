"""Race registration / declaration model."""

import enum
from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stablesync.database import Base
from stablesync.models.base import TimestampMixin


class RegistrationType(str, enum.Enum):
    """Pending race entry state."""

    KAYIT = "KAYIT"  # registered, jockey pending
    DEKLARE = "DEKLARE"  # declared, jockey fixed


class HorseRegistration(Base, TimestampMixin):
    """Upcoming race entry table model (kayıt / deklare)."""

    __tablename__ = "horse_registrations"
    __table_args__ = (UniqueConstraint("horse_id", "natural_key", name="uq_registration_natural_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    horse_id: Mapped[int] = mapped_column(Integer, ForeignKey("horses.id"), nullable=False, index=True)
    natural_key: Mapped[str] = mapped_column(String(255), nullable=False)

    race_date: Mapped[date] = mapped_column(Date, nullable=False)
    city: Mapped[str | None] = mapped_column(String(50), nullable=True)
    distance: Mapped[int | None] = mapped_column(Integer, nullable=True)
    surface: Mapped[str | None] = mapped_column(String(20), nullable=True)
    surface_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    race_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    type: Mapped[str] = mapped_column(String(10), nullable=False, default=RegistrationType.KAYIT.value)
    jockey_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    jockey_id: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Relationships
    horse = relationship("Horse", back_populates="registrations")

    def __repr__(self) -> str:
        return f"<HorseRegistration(id={self.id}, horse_id={self.horse_id}, type={self.type})>"
