import enum
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from fleet_portal.models.base import Base


class CarStatus(str, enum.Enum):
    AVAILABLE = "available"
    RENTED = "rented"
    MAINTENANCE = "maintenance"
    OFFBOARDED = "offboarded"


class Car(Base):
    __tablename__ = "cars"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    make: Mapped[str] = mapped_column(String(100), nullable=False)
    model: Mapped[str] = mapped_column(String(100), nullable=False)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    vin: Mapped[str | None] = mapped_column(String(50), nullable=True, unique=True)
    license_plate: Mapped[str | None] = mapped_column(String(20), nullable=True)
    status: Mapped[CarStatus] = mapped_column(
        Enum(CarStatus),
        nullable=False,
        default=CarStatus.AVAILABLE,
    )
    client_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("clients.id", ondelete="SET NULL"), nullable=True
    )
    turo_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    admin_turo_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    fuel_gas: Mapped[str | None] = mapped_column(String(50), nullable=True)
    tire_size: Mapped[str | None] = mapped_column(String(50), nullable=True)
    oil_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    @property
    def make_model(self) -> str:
        return f"{self.make} {self.model}"
