from sqlalchemy import JSON, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from fleet_portal.models.base import Base


class FormulaSetting(Base):
    """Per car/year management split mode for each month (50 or 70)."""

    __tablename__ = "formula_settings"
    __table_args__ = (UniqueConstraint("car_id", "year", name="uq_formula_car_year"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    car_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cars.id", ondelete="CASCADE"), nullable=False
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    # JSON object keys are strings: {"1": 50, "2": 70, ...}
    month_modes: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
