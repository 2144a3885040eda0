import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from holiday_calendar.database import Base

CATEGORY_COLORS: dict[str, str] = {
    "federal": "#06427F",
    "fun": "#7B7E77",
    "company": "#06427F",
}


def default_color(category: str) -> str:
    """Return the display color used when a holiday has none of its own."""
    return CATEGORY_COLORS.get(category, CATEGORY_COLORS["federal"])


class Holiday(Base):
    __tablename__ = "holidays"
    __table_args__ = (
        UniqueConstraint("title", "date", "source", name="uq_holidays_title_date_source"),
        Index("ix_holidays_date", "date"),
        Index("ix_holidays_recurring", "recurring"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD
    category: Mapped[str] = mapped_column(String(20), nullable=False)  # 'federal', 'fun', 'company'
    color: Mapped[str] = mapped_column(String(20), nullable=False)
    source: Mapped[str] = mapped_column(String(100), nullable=False)  # 'custom' or a provider id
    visible: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    recurring: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<Holiday(id={self.id}, date={self.date}, title={self.title!r})>"
