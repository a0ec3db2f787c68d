"""
tally.database.models — SQLAlchemy 2.0 Data Models
===================================================

Tables:
- user_progress — Activity points and level per Discord user
- guild_welcome — Per-guild welcome channel and message
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, Integer, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Tally ORM models."""


# ---------------------------------------------------------------------------
# UserProgress — one row per Discord user seen talking
# ---------------------------------------------------------------------------
class UserProgress(Base):
    __tablename__ = "user_progress"

    user_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)  # Discord snowflake
    point: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("point >= 0", name="ck_user_progress_point_nonneg"),
        CheckConstraint("level >= 1", name="ck_user_progress_level_positive"),
    )

    def __repr__(self) -> str:
        return f"<UserProgress user={self.user_id} pt={self.point} lvl={self.level}>"


# ---------------------------------------------------------------------------
# WelcomeConfig — where and what to announce when a member joins
# ---------------------------------------------------------------------------
class WelcomeConfig(Base):
    """Written by operators (or the config seeder), read-only for the bot."""
    __tablename__ = "guild_welcome"

    guild_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    channel_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<WelcomeConfig guild={self.guild_id} channel={self.channel_id}>"
