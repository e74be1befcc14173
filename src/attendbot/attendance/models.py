"""SQLAlchemy ORM models for attendance records."""

from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, Enum as SQLEnum, Float, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func

from attendbot.attendance.schemas import Category


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class AttendanceRecord(Base):
    """One attendance entry (WFH, leave, late, early...) for a Slack user."""

    __tablename__ = "leave_table"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Who
    user_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    user_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    email: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Source message
    channel_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    message_ts: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Classification
    category: Mapped[Category] = mapped_column(
        SQLEnum(
            Category,
            name="attendance_category",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        default=Category.UNKNOWN,
        nullable=False,
    )
    confidence: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Extracted details
    is_working_from_home: Mapped[bool] = mapped_column(Boolean, default=False)
    is_leave_requested: Mapped[bool] = mapped_column(Boolean, default=False)
    is_coming_late: Mapped[bool] = mapped_column(Boolean, default=False)
    is_leave_early: Mapped[bool] = mapped_column(Boolean, default=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
    duration_days: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    @property
    def display_name(self) -> str:
        """User name, falling back to first and last name."""
        if self.user_name:
            return self.user_name
        full_name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return full_name or self.user_id

    def to_dict(self) -> dict:
        """Convert the model to a dictionary."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "channel_id": self.channel_id,
            "message_ts": self.message_ts,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "message": self.message,
            "category": self.category.value,
            "confidence": self.confidence,
            "is_working_from_home": self.is_working_from_home,
            "is_leave_requested": self.is_leave_requested,
            "is_coming_late": self.is_coming_late,
            "is_leave_early": self.is_leave_early,
            "reason": self.reason,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "duration_days": self.duration_days,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
