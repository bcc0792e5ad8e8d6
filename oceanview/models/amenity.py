from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from oceanview.db.session import Base


class Amenity(Base):
    __tablename__ = "amenities"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120))
    description: Mapped[str] = mapped_column(Text)
    image_url: Mapped[str] = mapped_column(String(512))
    category: Mapped[str] = mapped_column(String(60), nullable=True)
