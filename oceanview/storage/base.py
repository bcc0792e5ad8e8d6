"""The storage contract shared by the in-memory and SQL backends.

Every method is one atomic operation. Lookups and mutations that target an
unknown id return ``None``; rule violations raise the ``ValueError``
subclasses in :mod:`oceanview.storage.errors`. Returned entities are
snapshots: changing them never changes the store.
"""
from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional

from oceanview.schemas.booking import Booking, BookingCreate
from oceanview.schemas.catalog import (
    Amenity, AmenityCreate, CabinType, CabinTypeCreate, Cruise, CruiseCreate, CruiseSearch,
    Destination, DestinationCreate,
)
from oceanview.schemas.enums import BookingStatus, CancellationReason, EnquiryStatus, PaymentStatus
from oceanview.schemas.feedback import (
    Enquiry, EnquiryCreate, EnquiryResponse, EnquiryResponseCreate, Testimonial, TestimonialCreate,
)
from oceanview.schemas.payments import Payment, PaymentCreate, StripePaymentData
from oceanview.schemas.user import User, UserCreate, UserUpdate

Clock = Callable[[], datetime]

DEFAULT_RESET_TOKEN_TTL = timedelta(hours=2)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Storage(ABC):
    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or utcnow

    def now(self) -> datetime:
        return self._clock()

    def today(self) -> date:
        return self.now().date()

    # Users

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]: ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]: ...

    @abstractmethod
    def create_user(self, data: UserCreate) -> User:
        """Raises ConflictError when the username or e-mail is taken."""

    @abstractmethod
    def update_user(self, user_id: int, data: UserUpdate) -> Optional[User]:
        """Apply only the fields set on ``data``."""

    @abstractmethod
    def update_user_password(self, user_id: int, password_hash: str) -> Optional[User]:
        """Replace the hash and invalidate any outstanding reset token."""

    @abstractmethod
    def update_user_last_login(self, user_id: int) -> Optional[User]: ...

    @abstractmethod
    def create_password_reset_token(self, email: str, ttl: timedelta = DEFAULT_RESET_TOKEN_TTL) -> Optional[str]: ...

    @abstractmethod
    def reset_password(self, token: str, password_hash: str) -> bool:
        """True when ``token`` belonged to a user and had not expired."""

    # Catalog

    @abstractmethod
    def get_destinations(self) -> list[Destination]: ...

    @abstractmethod
    def get_destination(self, destination_id: int) -> Optional[Destination]: ...

    @abstractmethod
    def create_destination(self, data: DestinationCreate) -> Destination: ...

    @abstractmethod
    def get_cruises(self) -> list[Cruise]: ...

    @abstractmethod
    def get_cruise(self, cruise_id: int) -> Optional[Cruise]: ...

    @abstractmethod
    def get_cruises_by_destination(self, destination_id: int) -> list[Cruise]: ...

    @abstractmethod
    def create_cruise(self, data: CruiseCreate) -> Cruise: ...

    @abstractmethod
    def search_cruises(self, params: CruiseSearch) -> list[Cruise]: ...

    @abstractmethod
    def get_cabin_types(self, cruise_id: int) -> list[CabinType]: ...

    @abstractmethod
    def get_cabin_type(self, cabin_type_id: int) -> Optional[CabinType]: ...

    @abstractmethod
    def create_cabin_type(self, data: CabinTypeCreate) -> CabinType: ...

    @abstractmethod
    def get_amenities(self) -> list[Amenity]: ...

    @abstractmethod
    def get_amenity(self, amenity_id: int) -> Optional[Amenity]: ...

    @abstractmethod
    def create_amenity(self, data: AmenityCreate) -> Amenity: ...

    # Bookings

    @abstractmethod
    def get_bookings(self, user_id: int) -> list[Booking]: ...

    @abstractmethod
    def get_booking(self, booking_id: int) -> Optional[Booking]: ...

    @abstractmethod
    def get_booking_by_reference(self, reference: str) -> Optional[Booking]: ...

    @abstractmethod
    def create_booking(self, data: BookingCreate) -> Booking:
        """Assign an id and a unique reference; history starts empty."""

    @abstractmethod
    def update_booking_status(self, booking_id: int, status: BookingStatus, reason: str | None = None) -> Optional[Booking]:
        """Validated move that always appends to the status history."""

    def update_booking_status_history(self, booking_id: int, status: BookingStatus) -> Optional[Booking]:
        return self.update_booking_status(booking_id, status)

    @abstractmethod
    def cancel_booking(self, booking_id: int, notes: str | None = None,
                       reason_code: CancellationReason | None = None) -> Optional[Booking]: ...

    @abstractmethod
    def process_refund(self, booking_id: int, amount: int) -> Optional[Booking]:
        """Refund the booking and its linked payment together."""

    @abstractmethod
    def check_in_passengers(self, booking_id: int) -> Optional[Booking]: ...

    @abstractmethod
    def get_upcoming_bookings(self, user_id: int) -> list[Booking]: ...

    @abstractmethod
    def get_past_bookings(self, user_id: int) -> list[Booking]: ...

    @abstractmethod
    def get_bookings_departing_between(self, start: date, end: date) -> list[Booking]:
        """Bookings still in play (not terminal) departing within [start, end]."""

    @abstractmethod
    def mark_notification_sent(self, booking_id: int) -> Optional[Booking]: ...

    # Payments

    @abstractmethod
    def get_payments(self, booking_id: int) -> list[Payment]: ...

    @abstractmethod
    def get_payment(self, payment_id: int) -> Optional[Payment]: ...

    @abstractmethod
    def create_payment(self, data: PaymentCreate) -> Payment:
        """Create a payment and mirror it onto its booking in the same operation."""

    @abstractmethod
    def process_stripe_payment(self, booking_id: int, data: StripePaymentData) -> Optional[Payment]:
        """Open a ``processing`` payment for the booking total; the gateway callback completes it."""

    @abstractmethod
    def update_payment_status(self, payment_id: int, status: PaymentStatus,
                              transaction_id: str | None = None) -> Optional[Payment]:
        """Validated move mirrored onto the booking; a gateway transaction id is recorded when given."""

    @abstractmethod
    def refund_payment(self, payment_id: int, amount: int) -> Optional[Payment]: ...

    @abstractmethod
    def get_payments_by_status(self, status: PaymentStatus) -> list[Payment]: ...

    # Testimonials

    @abstractmethod
    def get_testimonials(self) -> list[Testimonial]: ...

    @abstractmethod
    def get_testimonials_by_cruise(self, cruise_id: int) -> list[Testimonial]: ...

    @abstractmethod
    def get_testimonial(self, testimonial_id: int) -> Optional[Testimonial]: ...

    @abstractmethod
    def create_testimonial(self, data: TestimonialCreate) -> Testimonial: ...

    @abstractmethod
    def verify_testimonial(self, testimonial_id: int) -> Optional[Testimonial]: ...

    # Enquiries

    @abstractmethod
    def get_enquiries(self) -> list[Enquiry]: ...

    @abstractmethod
    def get_enquiries_by_user(self, user_id: int) -> list[Enquiry]: ...

    @abstractmethod
    def get_enquiry(self, enquiry_id: int) -> Optional[Enquiry]: ...

    @abstractmethod
    def create_enquiry(self, data: EnquiryCreate) -> Enquiry: ...

    @abstractmethod
    def update_enquiry_status(self, enquiry_id: int, status: EnquiryStatus) -> Optional[Enquiry]: ...

    @abstractmethod
    def assign_enquiry(self, enquiry_id: int, user_id: int) -> Optional[Enquiry]: ...

    @abstractmethod
    def get_enquiry_responses(self, enquiry_id: int) -> list[EnquiryResponse]: ...

    @abstractmethod
    def create_enquiry_response(self, data: EnquiryResponseCreate) -> EnquiryResponse:
        """Store the response and mark the parent enquiry ``responded``."""
