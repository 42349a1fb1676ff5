from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from fleet_portal.models.base import Base


class QuickLink(Base):
    """Admin-configured external URL shown to selected roles."""

    __tablename__ = "quick_links"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="General")
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    visible_to_admins: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    visible_to_clients: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    visible_to_employees: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
