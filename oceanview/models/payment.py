from datetime import datetime

from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from oceanview.db.session import Base
from oceanview.db.types import UTCDateTime


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    booking_id: Mapped[int] = mapped_column(Integer, index=True)
    amount: Mapped[int] = mapped_column(Integer)
    currency: Mapped[str] = mapped_column(String(3), default="USD")
    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)  # pending, processing, completed, failed, refunded, partially_refunded
    payment_method: Mapped[str] = mapped_column(String(20))
    transaction_id: Mapped[str] = mapped_column(String(120), nullable=True)
    payment_intent_id: Mapped[str] = mapped_column(String(120), nullable=True)
    payment_date: Mapped[datetime] = mapped_column(UTCDateTime)
    billing_address: Mapped[dict] = mapped_column(JSON, nullable=True)
    # Masked card metadata only
    card_last4: Mapped[str] = mapped_column(String(4), nullable=True)
    expiry_month: Mapped[str] = mapped_column(String(2), nullable=True)
    expiry_year: Mapped[str] = mapped_column(String(4), nullable=True)
    cardholder_name: Mapped[str] = mapped_column(String(200), nullable=True)
    refund_amount: Mapped[int] = mapped_column(Integer, nullable=True)
    refund_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=True)
    gateway_response: Mapped[dict] = mapped_column(JSON, nullable=True)
