import enum
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from fleet_portal.models.base import Base


class TripStatus(str, enum.Enum):
    BOOKED = "booked"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TuroTrip(Base):
    __tablename__ = "turo_trips"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reservation_id: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    car_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("cars.id", ondelete="SET NULL"), nullable=True
    )
    guest_name: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[TripStatus] = mapped_column(
        Enum(TripStatus), nullable=False, default=TripStatus.BOOKED
    )
    trip_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    trip_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    earnings: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_distance: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
