from sqlalchemy import Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from oceanview.db.session import Base


class Destination(Base):
    __tablename__ = "destinations"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), index=True)
    description: Mapped[str] = mapped_column(Text)
    image_url: Mapped[str] = mapped_column(String(512))
    price_from: Mapped[int] = mapped_column(Integer)
    rating: Mapped[float] = mapped_column(Float)
    cruise_count: Mapped[int] = mapped_column(Integer, default=0)
    duration_range: Mapped[str] = mapped_column(String(40))
