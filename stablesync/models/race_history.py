"""Race history model."""

from datetime import date

from sqlalchemy import Date, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stablesync.database import Base
from stablesync.models.base import TimestampMixin


class HorseRaceHistory(Base, TimestampMixin):
    """Completed race result table model (koşu geçmişi). Append-only."""

    __tablename__ = "horse_race_history"
    __table_args__ = (UniqueConstraint("horse_id", "natural_key", name="uq_race_history_natural_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    horse_id: Mapped[int] = mapped_column(Integer, ForeignKey("horses.id"), nullable=False, index=True)
    natural_key: Mapped[str] = mapped_column(String(255), nullable=False)

    race_date: Mapped[date] = mapped_column(Date, nullable=False)
    city: Mapped[str | None] = mapped_column(String(50), nullable=True)  # Şehir
    distance: Mapped[int | None] = mapped_column(Integer, nullable=True)  # Mesafe (m)
    surface: Mapped[str | None] = mapped_column(String(20), nullable=True)  # Çim/Kum/Sentetik
    surface_type: Mapped[str | None] = mapped_column(String(50), nullable=True)  # "Ç:Normal 3.3"
    position: Mapped[int | None] = mapped_column(Integer, nullable=True)  # S
    finish_time: Mapped[str | None] = mapped_column(String(20), nullable=True)  # Derece
    weight: Mapped[float | None] = mapped_column(Float, nullable=True)  # Sıklet
    jockey_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    jockey_id: Mapped[str | None] = mapped_column(String(20), nullable=True)
    race_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    race_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    race_type: Mapped[str | None] = mapped_column(String(100), nullable=True)  # K.Cins
    trainer_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    trainer_id: Mapped[str | None] = mapped_column(String(20), nullable=True)
    handicap_points: Mapped[int | None] = mapped_column(Integer, nullable=True)
    prize_money: Mapped[float | None] = mapped_column(Float, nullable=True)
    video_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    photo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Relationships
    horse = relationship("Horse", back_populates="race_history")

    def __repr__(self) -> str:
        return f"<HorseRaceHistory(id={self.id}, horse_id={self.horse_id}, race_date={self.race_date})>"
