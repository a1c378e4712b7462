from datetime import datetime
from sqlalchemy import Integer, String, Boolean, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from goodday.db.base import Base


class User(Base):
    """A Good Day participant: where their data lives and when to prompt them."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    slackid: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    ghuser: Mapped[str | None] = mapped_column(String(128), nullable=True)
    ghrepo: Mapped[str | None] = mapped_column(String(128), nullable=True)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="UTC")
    # Local wall-clock time ("HH:MM") at which the daily prompt is sent.
    prompt_time: Mapped[str] = mapped_column(String(5), nullable=False, default="16:00")
    is_unsubscribed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
