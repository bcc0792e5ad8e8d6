from sqlalchemy import JSON, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from oceanview.db.session import Base


class CabinType(Base):
    __tablename__ = "cabin_types"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    cruise_id: Mapped[int] = mapped_column(Integer, index=True)
    name: Mapped[str] = mapped_column(String(80))
    description: Mapped[str] = mapped_column(Text)
    price_modifier: Mapped[int] = mapped_column(Integer, default=0)
    capacity: Mapped[int] = mapped_column(Integer)
    amenities: Mapped[list] = mapped_column(JSON, nullable=True)
    image_url: Mapped[str] = mapped_column(String(512), nullable=True)
