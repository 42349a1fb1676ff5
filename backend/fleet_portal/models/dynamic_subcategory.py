from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleet_portal.models.base import Base


class DynamicSubcategory(Base):
    __tablename__ = "dynamic_subcategories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    car_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cars.id", ondelete="CASCADE"), nullable=False, index=True
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    category_type: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    values: Mapped[list["DynamicSubcategoryValue"]] = relationship(
        back_populates="subcategory",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="DynamicSubcategoryValue.month",
    )


class DynamicSubcategoryValue(Base):
    __tablename__ = "dynamic_subcategory_values"
    __table_args__ = (
        UniqueConstraint("subcategory_id", "month", name="uq_dynamic_value_month"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subcategory_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("dynamic_subcategories.id", ondelete="CASCADE"),
        nullable=False,
    )
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    value: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    subcategory: Mapped[DynamicSubcategory] = relationship(back_populates="values")
