from sqlalchemy import JSON, Boolean, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from oceanview.db.session import Base


class Cruise(Base):
    __tablename__ = "cruises"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text)
    destination_id: Mapped[int] = mapped_column(Integer, index=True)
    image_url: Mapped[str] = mapped_column(String(512))
    departure_from: Mapped[str] = mapped_column(String(120))
    duration: Mapped[int] = mapped_column(Integer)  # nights
    price_per_person: Mapped[int] = mapped_column(Integer)
    original_price: Mapped[int] = mapped_column(Integer, nullable=True)
    cabin_type: Mapped[str] = mapped_column(String(80))
    inclusions: Mapped[str] = mapped_column(Text)
    is_best_seller: Mapped[bool] = mapped_column(Boolean, default=False)
    is_new_itinerary: Mapped[bool] = mapped_column(Boolean, default=False)
    rating: Mapped[float] = mapped_column(Float)
    available_packages: Mapped[list] = mapped_column(JSON, default=list)
    available_dates: Mapped[list] = mapped_column(JSON, nullable=True)  # ISO dates
