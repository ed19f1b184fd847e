"""SQLAlchemy models.

Define all ORM models here. They must inherit from Base so that
Alembic's autogenerate can detect them.
"""

from datetime import date, datetime

from sqlalchemy import CheckConstraint, DateTime, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from diyapi.db.session import Base


class Movie(Base):
    __tablename__ = "movies"
    __table_args__ = (
        UniqueConstraint("title", "released", name="uq_movie_title_released"),
        CheckConstraint("run_time > 0", name="run_time_positive"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    external_id: Mapped[str] = mapped_column(String(32), unique=True)
    title: Mapped[str] = mapped_column(String(200))
    rated: Mapped[str] = mapped_column(String(10))
    released: Mapped[date]
    run_time: Mapped[int]
    director: Mapped[str] = mapped_column(String(100))
    writer: Mapped[str] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
