"""Monthly milestone model."""

from typing import Optional

from sqlalchemy import Boolean, Float, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from fittrack.models.base import BaseModel


class Milestone(BaseModel):
    """Weight and lift targets for one month of the year."""

    __tablename__ = "milestones"
    __table_args__ = (
        UniqueConstraint("user_id", "year", "month", name="uq_milestones_user_year_month"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    year: Mapped[int] = mapped_column(Integer, index=True)
    month: Mapped[int] = mapped_column(Integer)  # 1-12

    target_weight: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    # {"exercise_id": lbs}
    target_lifts: Mapped[dict] = mapped_column(JSONB, default=dict)
    achieved_weight: Mapped[bool] = mapped_column(Boolean, default=False)
    # {"exercise_id": bool}
    achieved_lifts: Mapped[dict] = mapped_column(JSONB, default=dict)

    def __repr__(self) -> str:
        return f"<Milestone(user_id={self.user_id}, {self.year}-{self.month:02d})>"
