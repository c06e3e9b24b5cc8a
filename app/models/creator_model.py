"""
Creator model: a content creator managed by an agency.
"""

from datetime import datetime

from sqlalchemy import DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import AgencyScopedMixin, BaseModel


class CreatorModel(AgencyScopedMixin, BaseModel):
    """Content creator profile, scoped to one agency."""

    __tablename__ = "creator_models"

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    platform: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="tiktok, instagram, ..."
    )

    username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    instagram_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    tiktok_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    other_social_urls: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    onboarded_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Audience figures
    followers: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    engagement: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    average_reach: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    revenue: Mapped[float] = mapped_column(Float, default=0, nullable=False)

    __table_args__ = (
        Index("idx_creator_model_agency_created", "agency_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<CreatorModel(id={self.id}, name={self.name})>"
