from datetime import datetime

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from oceanview.db.session import Base
from oceanview.db.types import UTCDateTime


class Testimonial(Base):
    __tablename__ = "testimonials"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120))
    cruise_name: Mapped[str] = mapped_column(String(200))
    comment: Mapped[str] = mapped_column(Text)
    rating: Mapped[int] = mapped_column(Integer)
    avatar_url: Mapped[str] = mapped_column(String(512), nullable=True)
    cruise_id: Mapped[int] = mapped_column(Integer, nullable=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)
