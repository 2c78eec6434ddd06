"""Daily habit checklist model."""

from datetime import date

from sqlalchemy import Boolean, Date, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from fittrack.models.base import BaseModel


class HabitLog(BaseModel):
    """Daily habits: meditation, journaling, creatine."""

    __tablename__ = "habit_logs"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_habit_logs_user_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    date: Mapped[date] = mapped_column(Date, index=True)
    meditation: Mapped[bool] = mapped_column(Boolean, default=False)
    journal: Mapped[bool] = mapped_column(Boolean, default=False)
    creatine: Mapped[bool] = mapped_column(Boolean, default=False)
