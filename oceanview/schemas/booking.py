from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import AliasChoices, Field, model_validator

from oceanview.schemas.common import ApiModel, Entity
from oceanview.schemas.enums import BookingStatus, CancellationReason, PaymentStatus


class StatusChange(ApiModel):
    from_status: BookingStatus = Field(
        validation_alias=AliasChoices("from", "from_status", "fromStatus"), serialization_alias="from"
    )
    to_status: BookingStatus = Field(
        validation_alias=AliasChoices("to", "to_status", "toStatus"), serialization_alias="to"
    )
    timestamp: datetime
    reason: Optional[str] = None


class BookingDetails(ApiModel):
    """What a guest submits at checkout; the acting user is added by the caller."""
    cruise_id: int
    cabin_type_id: Optional[int] = None
    departure_date: date
    return_date: date
    total_price: int = Field(ge=0)
    number_of_guests: int = Field(ge=1)
    cabin_type: str
    guest_details: Any = Field(default_factory=list)
    special_requests: Optional[str] = None
    terms_accepted: bool = False

    @model_validator(mode="after")
    def check_dates(self):
        if self.return_date < self.departure_date:
            raise ValueError("return date must not be before departure date")
        return self


class BookingCreate(BookingDetails):
    user_id: int
    status: BookingStatus = BookingStatus.pending
    payment_status: PaymentStatus = PaymentStatus.pending


class Booking(Entity):
    id: int
    user_id: int
    cruise_id: int
    cabin_type_id: Optional[int] = None
    booking_date: datetime
    departure_date: date
    return_date: date
    total_price: int
    number_of_guests: int
    cabin_type: str
    guest_details: Any = None
    status: BookingStatus = BookingStatus.pending
    status_history: List[StatusChange] = Field(default_factory=list)
    payment_status: PaymentStatus = PaymentStatus.pending
    payment_id: Optional[int] = None
    special_requests: Optional[str] = None
    booking_reference: str
    updated_at: datetime
    cancellation_date: Optional[datetime] = None
    cancellation_reason: Optional[CancellationReason] = None
    cancellation_notes: Optional[str] = None
    refund_amount: Optional[int] = None
    refund_date: Optional[datetime] = None
    checked_in: bool = False
    check_in_date: Optional[datetime] = None
    terms_accepted: bool = False
    last_notification_sent: Optional[datetime] = None


class BookingStatusUpdate(ApiModel):
    status: BookingStatus
    reason: Optional[str] = None


class BookingCancel(ApiModel):
    reason: Optional[str] = None
    cancellation_reason: Optional[CancellationReason] = None


class RefundRequest(ApiModel):
    amount: int = Field(gt=0)


class BookingResponse(ApiModel):
    message: str
    booking: Booking
