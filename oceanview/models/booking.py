from datetime import date, datetime

from sqlalchemy import JSON, Boolean, Date, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from oceanview.db.session import Base
from oceanview.db.types import UTCDateTime


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    booking_reference: Mapped[str] = mapped_column(String(40), unique=True, index=True)

    user_id: Mapped[int] = mapped_column(Integer, index=True)
    cruise_id: Mapped[int] = mapped_column(Integer, index=True)
    cabin_type_id: Mapped[int] = mapped_column(Integer, nullable=True)
    cabin_type: Mapped[str] = mapped_column(String(80))

    booking_date: Mapped[datetime] = mapped_column(UTCDateTime)
    departure_date: Mapped[date] = mapped_column(Date, index=True)
    return_date: Mapped[date] = mapped_column(Date)

    total_price: Mapped[int] = mapped_column(Integer)
    number_of_guests: Mapped[int] = mapped_column(Integer)
    guest_details: Mapped[list] = mapped_column(JSON, nullable=True)
    special_requests: Mapped[str] = mapped_column(Text, nullable=True)
    terms_accepted: Mapped[bool] = mapped_column(Boolean, default=False)

    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)  # pending, confirmed, in_progress, completed, cancelled, refunded
    status_history: Mapped[list] = mapped_column(JSON, default=list)  # [{from, to, timestamp, reason}]
    payment_status: Mapped[str] = mapped_column(String(20), default="pending")
    payment_id: Mapped[int] = mapped_column(Integer, nullable=True)

    cancellation_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=True)
    cancellation_reason: Mapped[str] = mapped_column(String(30), nullable=True)
    cancellation_notes: Mapped[str] = mapped_column(Text, nullable=True)
    refund_amount: Mapped[int] = mapped_column(Integer, nullable=True)
    refund_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=True)

    checked_in: Mapped[bool] = mapped_column(Boolean, default=False)
    check_in_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=True)
    last_notification_sent: Mapped[datetime] = mapped_column(UTCDateTime, nullable=True)

    updated_at: Mapped[datetime] = mapped_column(UTCDateTime)
