"""Horse model."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stablesync.database import Base
from stablesync.models.base import TimestampMixin


class HorseStatus(str, enum.Enum):
    """Horse lifecycle status."""

    ACTIVE = "ACTIVE"
    RETIRED = "RETIRED"
    DEAD = "DEAD"


# Ancestors in generation order: parents, grandparents, great-grandparents
PEDIGREE_SLOTS: tuple[str, ...] = (
    "sire_name",
    "dam_name",
    "sire_sire",
    "sire_dam",
    "dam_sire",
    "dam_dam",
    "sire_sire_sire",
    "sire_sire_dam",
    "sire_dam_sire",
    "sire_dam_dam",
    "dam_sire_sire",
    "dam_sire_dam",
    "dam_dam_sire",
    "dam_dam_dam",
)

SUMMARY_FIELDS: tuple[str, ...] = (
    "handicap_points",
    "total_earnings",
    "prize_money",
    "owner_premium",
    "breeder_premium",
    "total_races",
    "first_places",
    "second_places",
    "third_places",
    "fourth_places",
    "fifth_places",
    "turf_races",
    "turf_firsts",
    "turf_earnings",
    "dirt_races",
    "dirt_firsts",
    "dirt_earnings",
    "synthetic_races",
    "synthetic_firsts",
    "synthetic_earnings",
)


class Horse(Base, TimestampMixin):
    """Horse table model."""

    __tablename__ = "horses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    stablemate_id: Mapped[int] = mapped_column(Integer, ForeignKey("stablemates.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    external_ref: Mapped[str | None] = mapped_column(String(20), nullable=True, unique=True)  # TJK AtId
    status: Mapped[str] = mapped_column(String(10), nullable=False, default=HorseStatus.ACTIVE.value)

    # Özet (summary snapshot)
    handicap_points: Mapped[int | None] = mapped_column(Integer, nullable=True)
    total_earnings: Mapped[float | None] = mapped_column(Float, nullable=True)  # Kazanç
    prize_money: Mapped[float | None] = mapped_column(Float, nullable=True)  # İkramiye
    owner_premium: Mapped[float | None] = mapped_column(Float, nullable=True)  # At Sahibi Primi
    breeder_premium: Mapped[float | None] = mapped_column(Float, nullable=True)  # Yetiştiricilik Primi
    total_races: Mapped[int | None] = mapped_column(Integer, nullable=True)
    first_places: Mapped[int | None] = mapped_column(Integer, nullable=True)
    second_places: Mapped[int | None] = mapped_column(Integer, nullable=True)
    third_places: Mapped[int | None] = mapped_column(Integer, nullable=True)
    fourth_places: Mapped[int | None] = mapped_column(Integer, nullable=True)
    fifth_places: Mapped[int | None] = mapped_column(Integer, nullable=True)
    turf_races: Mapped[int | None] = mapped_column(Integer, nullable=True)  # Çim
    turf_firsts: Mapped[int | None] = mapped_column(Integer, nullable=True)
    turf_earnings: Mapped[float | None] = mapped_column(Float, nullable=True)
    dirt_races: Mapped[int | None] = mapped_column(Integer, nullable=True)  # Kum
    dirt_firsts: Mapped[int | None] = mapped_column(Integer, nullable=True)
    dirt_earnings: Mapped[float | None] = mapped_column(Float, nullable=True)
    synthetic_races: Mapped[int | None] = mapped_column(Integer, nullable=True)  # Sentetik
    synthetic_firsts: Mapped[int | None] = mapped_column(Integer, nullable=True)
    synthetic_earnings: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Pedigri
    sire_name: Mapped[str | None] = mapped_column(String(100), nullable=True)  # Baba
    dam_name: Mapped[str | None] = mapped_column(String(100), nullable=True)  # Anne
    sire_sire: Mapped[str | None] = mapped_column(String(100), nullable=True)
    sire_dam: Mapped[str | None] = mapped_column(String(100), nullable=True)
    dam_sire: Mapped[str | None] = mapped_column(String(100), nullable=True)
    dam_dam: Mapped[str | None] = mapped_column(String(100), nullable=True)
    sire_sire_sire: Mapped[str | None] = mapped_column(String(100), nullable=True)
    sire_sire_dam: Mapped[str | None] = mapped_column(String(100), nullable=True)
    sire_dam_sire: Mapped[str | None] = mapped_column(String(100), nullable=True)
    sire_dam_dam: Mapped[str | None] = mapped_column(String(100), nullable=True)
    dam_sire_sire: Mapped[str | None] = mapped_column(String(100), nullable=True)
    dam_sire_dam: Mapped[str | None] = mapped_column(String(100), nullable=True)
    dam_dam_sire: Mapped[str | None] = mapped_column(String(100), nullable=True)
    dam_dam_dam: Mapped[str | None] = mapped_column(String(100), nullable=True)

    data_fetched_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    data_fetch_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    stablemate = relationship("Stablemate", back_populates="horses")
    race_history = relationship("HorseRaceHistory", back_populates="horse", cascade="all, delete-orphan")
    registrations = relationship("HorseRegistration", back_populates="horse", cascade="all, delete-orphan")
    gallops = relationship("HorseGallop", back_populates="horse", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Horse(id={self.id}, name='{self.name}', external_ref={self.external_ref})>"
