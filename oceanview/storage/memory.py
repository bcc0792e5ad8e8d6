import itertools
import logging
import threading
import uuid
from datetime import timedelta
from typing import Optional, TypeVar

from oceanview.schemas.booking import Booking, BookingCreate
from oceanview.schemas.catalog import (
    Amenity, AmenityCreate, CabinType, CabinTypeCreate, Cruise, CruiseCreate, CruiseSearch,
    Destination, DestinationCreate,
)
from oceanview.schemas.common import Entity
from oceanview.schemas.enums import BookingStatus, CancellationReason, EnquiryStatus, PaymentMethod, PaymentStatus
from oceanview.schemas.feedback import (
    Enquiry, EnquiryCreate, EnquiryResponse, EnquiryResponseCreate, Testimonial, TestimonialCreate,
)
from oceanview.schemas.payments import Payment, PaymentCreate, StripePaymentData
from oceanview.schemas.user import User, UserCreate, UserUpdate
from oceanview.storage import lifecycle
from oceanview.storage.base import DEFAULT_RESET_TOKEN_TTL, Clock, Storage
from oceanview.storage.errors import ConflictError

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Entity)


def _snapshot(entity: E) -> E:
    return entity.model_copy(deep=True)


class MemStorage(Storage):
    """Process-local store: one dict per entity type behind a single lock.

    Mutations work on deep copies and only replace the stored entities once
    every check has passed, so a failed operation leaves nothing half-applied.
    """

    def __init__(self, clock: Optional[Clock] = None):
        super().__init__(clock)
        self._lock = threading.RLock()
        self._users: dict[int, User] = {}
        self._destinations: dict[int, Destination] = {}
        self._cruises: dict[int, Cruise] = {}
        self._cabin_types: dict[int, CabinType] = {}
        self._amenities: dict[int, Amenity] = {}
        self._bookings: dict[int, Booking] = {}
        self._payments: dict[int, Payment] = {}
        self._testimonials: dict[int, Testimonial] = {}
        self._enquiries: dict[int, Enquiry] = {}
        self._enquiry_responses: dict[int, EnquiryResponse] = {}
        self._ids = {
            name: itertools.count(1)
            for name in (
                "user", "destination", "cruise", "cabin_type", "amenity", "booking",
                "payment", "testimonial", "enquiry", "enquiry_response",
            )
        }

    def _next_id(self, kind: str) -> int:
        return next(self._ids[kind])

    @staticmethod
    def _get(table: dict[int, E], entity_id: int) -> Optional[E]:
        entity = table.get(entity_id)
        return _snapshot(entity) if entity is not None else None

    @staticmethod
    def _commit(table: dict[int, E], *entities: E) -> None:
        for entity in entities:
            table[entity.id] = _snapshot(entity)

    @staticmethod
    def _select(table: dict[int, E], predicate=None) -> list[E]:
        return [_snapshot(e) for e in table.values() if predicate is None or predicate(e)]

    # Users

    def _find_user(self, **fields) -> Optional[User]:
        for user in self._users.values():
            if all(getattr(user, k) == v for k, v in fields.items()):
                return user
        return None

    def get_user(self, user_id):
        with self._lock:
            return self._get(self._users, user_id)

    def get_user_by_username(self, username):
        with self._lock:
            user = self._find_user(username=username)
            return _snapshot(user) if user else None

    def get_user_by_email(self, email):
        with self._lock:
            user = self._find_user(email=email)
            return _snapshot(user) if user else None

    def create_user(self, data: UserCreate) -> User:
        with self._lock:
            if self._find_user(username=data.username):
                raise ConflictError("Username already exists")
            if self._find_user(email=data.email):
                raise ConflictError("Email already exists")
            now = self.now()
            user = User(id=self._next_id("user"), created_at=now, updated_at=now, **data.model_dump())
            self._commit(self._users, user)
            logger.info("user %s created", user.id)
            return _snapshot(user)

    def update_user(self, user_id, data: UserUpdate):
        with self._lock:
            user = self._get(self._users, user_id)
            if user is None:
                return None
            changes = data.model_dump(exclude_unset=True)
            if changes.get("email") and changes["email"] != user.email:
                other = self._find_user(email=changes["email"])
                if other is not None and other.id != user_id:
                    raise ConflictError("Email already exists")
            for field, value in changes.items():
                setattr(user, field, value)
            user.updated_at = self.now()
            self._commit(self._users, user)
            return user

    def update_user_password(self, user_id, password_hash):
        with self._lock:
            user = self._get(self._users, user_id)
            if user is None:
                return None
            user.password_hash = password_hash
            user.reset_token = None
            user.reset_token_expiry = None
            user.updated_at = self.now()
            self._commit(self._users, user)
            return user

    def update_user_last_login(self, user_id):
        with self._lock:
            user = self._get(self._users, user_id)
            if user is None:
                return None
            user.last_login = self.now()
            self._commit(self._users, user)
            return user

    def create_password_reset_token(self, email, ttl: timedelta = DEFAULT_RESET_TOKEN_TTL):
        with self._lock:
            user = self._find_user(email=email)
            if user is None:
                return None
            user = _snapshot(user)
            user.reset_token = str(uuid.uuid4())
            user.reset_token_expiry = self.now() + ttl
            self._commit(self._users, user)
            return user.reset_token

    def reset_password(self, token, password_hash):
        with self._lock:
            user = self._find_user(reset_token=token) if token else None
            if user is None or user.reset_token_expiry is None or user.reset_token_expiry <= self.now():
                return False
            self.update_user_password(user.id, password_hash)
            return True

    # Catalog

    def get_destinations(self):
        with self._lock:
            return self._select(self._destinations)

    def get_destination(self, destination_id):
        with self._lock:
            return self._get(self._destinations, destination_id)

    def create_destination(self, data: DestinationCreate) -> Destination:
        with self._lock:
            destination = Destination(id=self._next_id("destination"), **data.model_dump())
            self._commit(self._destinations, destination)
            return destination

    def get_cruises(self):
        with self._lock:
            return self._select(self._cruises)

    def get_cruise(self, cruise_id):
        with self._lock:
            return self._get(self._cruises, cruise_id)

    def get_cruises_by_destination(self, destination_id):
        with self._lock:
            return self._select(self._cruises, lambda c: c.destination_id == destination_id)

    def create_cruise(self, data: CruiseCreate) -> Cruise:
        with self._lock:
            cruise = Cruise(id=self._next_id("cruise"), **data.model_dump())
            self._commit(self._cruises, cruise)
            return cruise

    def search_cruises(self, params: CruiseSearch):
        with self._lock:
            destination_id = None
            name = params.destination_name
            if name is not None:
                destination = next((d for d in self._destinations.values() if d.name == name), None)
                if destination is None:
                    return []
                destination_id = destination.id
            return self._select(
                self._cruises,
                lambda c: (destination_id is None or c.destination_id == destination_id)
                and params.matches_duration(c.duration),
            )

    def get_cabin_types(self, cruise_id):
        with self._lock:
            return self._select(self._cabin_types, lambda c: c.cruise_id == cruise_id)

    def get_cabin_type(self, cabin_type_id):
        with self._lock:
            return self._get(self._cabin_types, cabin_type_id)

    def create_cabin_type(self, data: CabinTypeCreate) -> CabinType:
        with self._lock:
            cabin_type = CabinType(id=self._next_id("cabin_type"), **data.model_dump())
            self._commit(self._cabin_types, cabin_type)
            return cabin_type

    def get_amenities(self):
        with self._lock:
            return self._select(self._amenities)

    def get_amenity(self, amenity_id):
        with self._lock:
            return self._get(self._amenities, amenity_id)

    def create_amenity(self, data: AmenityCreate) -> Amenity:
        with self._lock:
            amenity = Amenity(id=self._next_id("amenity"), **data.model_dump())
            self._commit(self._amenities, amenity)
            return amenity

    # Bookings

    def get_bookings(self, user_id):
        with self._lock:
            return self._select(self._bookings, lambda b: b.user_id == user_id)

    def get_booking(self, booking_id):
        with self._lock:
            return self._get(self._bookings, booking_id)

    def get_booking_by_reference(self, reference):
        with self._lock:
            found = self._select(self._bookings, lambda b: b.booking_reference == reference)
            return found[0] if found else None

    def create_booking(self, data: BookingCreate) -> Booking:
        with self._lock:
            booking_id = self._next_id("booking")
            now = self.now()
            booking = Booking(
                id=booking_id,
                booking_reference=lifecycle.make_booking_reference(booking_id),
                booking_date=now,
                updated_at=now,
                status_history=[],
                **data.model_dump(),
            )
            self._commit(self._bookings, booking)
            logger.info("booking %s created for user %s", booking.booking_reference, booking.user_id)
            return booking

    def update_booking_status(self, booking_id, status: BookingStatus, reason=None):
        with self._lock:
            booking = self._get(self._bookings, booking_id)
            if booking is None:
                return None
            if lifecycle.transition_booking(booking, status, self.now(), reason):
                self._commit(self._bookings, booking)
                logger.info("booking %s moved to %s", booking.booking_reference, booking.status.value)
            return booking

    def cancel_booking(self, booking_id, notes=None, reason_code: CancellationReason | None = None):
        with self._lock:
            booking = self._get(self._bookings, booking_id)
            if booking is None:
                return None
            lifecycle.cancel_booking(booking, notes, reason_code, self.now())
            self._commit(self._bookings, booking)
            logger.info("booking %s cancelled (%s)", booking.booking_reference, booking.cancellation_reason.value)
            return booking

    def process_refund(self, booking_id, amount):
        with self._lock:
            booking = self._get(self._bookings, booking_id)
            if booking is None:
                return None
            payment = self._get(self._payments, booking.payment_id) if booking.payment_id else None
            lifecycle.refund_booking(booking, amount, self.now(), payment)
            self._commit(self._bookings, booking)
            if payment is not None:
                self._commit(self._payments, payment)
            logger.info("booking %s refunded %s", booking.booking_reference, amount)
            return booking

    def check_in_passengers(self, booking_id):
        with self._lock:
            booking = self._get(self._bookings, booking_id)
            if booking is None:
                return None
            lifecycle.check_in(booking, self.now())
            self._commit(self._bookings, booking)
            return booking

    def get_upcoming_bookings(self, user_id):
        with self._lock:
            today = self.today()
            return self._select(self._bookings, lambda b: b.user_id == user_id and lifecycle.is_upcoming(b, today))

    def get_past_bookings(self, user_id):
        with self._lock:
            today = self.today()
            return self._select(self._bookings, lambda b: b.user_id == user_id and lifecycle.is_past(b, today))

    def get_bookings_departing_between(self, start, end):
        with self._lock:
            return self._select(
                self._bookings,
                lambda b: start <= b.departure_date <= end
                and b.status not in lifecycle.TERMINAL_BOOKING_STATUSES,
            )

    def mark_notification_sent(self, booking_id):
        with self._lock:
            booking = self._get(self._bookings, booking_id)
            if booking is None:
                return None
            booking.last_notification_sent = self.now()
            self._commit(self._bookings, booking)
            return booking

    # Payments

    def _sync_booking(self, payment: Payment) -> Optional[Booking]:
        booking = self._get(self._bookings, payment.booking_id)
        if booking is not None:
            lifecycle.sync_booking_with_payment(booking, payment, self.now())
        return booking

    def _save_payment(self, payment: Payment, booking: Optional[Booking]) -> None:
        self._commit(self._payments, payment)
        if booking is not None:
            self._commit(self._bookings, booking)

    def get_payments(self, booking_id):
        with self._lock:
            return self._select(self._payments, lambda p: p.booking_id == booking_id)

    def get_payment(self, payment_id):
        with self._lock:
            return self._get(self._payments, payment_id)

    def create_payment(self, data: PaymentCreate) -> Payment:
        with self._lock:
            payment = Payment(id=self._next_id("payment"), payment_date=self.now(), **data.model_dump())
            booking = self._sync_booking(payment)
            self._save_payment(payment, booking)
            logger.info("payment %s created for booking %s (%s)", payment.id, payment.booking_id, payment.status.value)
            return payment

    def process_stripe_payment(self, booking_id, data: StripePaymentData):
        with self._lock:
            booking = self._get(self._bookings, booking_id)
            if booking is None:
                return None
            lifecycle.ensure_payable(booking)
            now = self.now()
            payment = Payment(
                id=self._next_id("payment"),
                booking_id=booking_id,
                amount=booking.total_price,
                status=PaymentStatus.processing,
                payment_method=PaymentMethod.stripe,
                payment_date=now,
                gateway_response={"received": now.isoformat()},
                **data.model_dump(),
            )
            lifecycle.sync_booking_with_payment(booking, payment, now)
            self._save_payment(payment, booking)
            logger.info("stripe payment %s opened for booking %s", payment.id, booking.booking_reference)
            return payment

    def update_payment_status(self, payment_id, status: PaymentStatus, transaction_id=None):
        with self._lock:
            payment = self._get(self._payments, payment_id)
            if payment is None:
                return None
            changed = lifecycle.transition_payment(payment, status, self.now())
            if transaction_id and transaction_id != payment.transaction_id:
                payment.transaction_id = transaction_id
                changed = True
            if changed:
                booking = self._sync_booking(payment)
                self._save_payment(payment, booking)
                logger.info("payment %s moved to %s", payment.id, payment.status.value)
            return payment

    def refund_payment(self, payment_id, amount):
        with self._lock:
            payment = self._get(self._payments, payment_id)
            if payment is None:
                return None
            lifecycle.refund_payment(payment, amount, self.now())
            booking = self._sync_booking(payment)
            self._save_payment(payment, booking)
            logger.info("payment %s refunded %s (%s)", payment.id, amount, payment.status.value)
            return payment

    def get_payments_by_status(self, status):
        with self._lock:
            return self._select(self._payments, lambda p: p.status == status)

    # Testimonials

    def get_testimonials(self):
        with self._lock:
            return self._select(self._testimonials)

    def get_testimonials_by_cruise(self, cruise_id):
        with self._lock:
            return self._select(self._testimonials, lambda t: t.cruise_id == cruise_id)

    def get_testimonial(self, testimonial_id):
        with self._lock:
            return self._get(self._testimonials, testimonial_id)

    def create_testimonial(self, data: TestimonialCreate) -> Testimonial:
        with self._lock:
            testimonial = Testimonial(
                id=self._next_id("testimonial"), created_at=self.now(), is_verified=False, **data.model_dump()
            )
            self._commit(self._testimonials, testimonial)
            return testimonial

    def verify_testimonial(self, testimonial_id):
        with self._lock:
            testimonial = self._get(self._testimonials, testimonial_id)
            if testimonial is None:
                return None
            testimonial.is_verified = True
            self._commit(self._testimonials, testimonial)
            return testimonial

    # Enquiries

    def get_enquiries(self):
        with self._lock:
            return self._select(self._enquiries)

    def get_enquiries_by_user(self, user_id):
        with self._lock:
            return self._select(self._enquiries, lambda e: e.user_id == user_id)

    def get_enquiry(self, enquiry_id):
        with self._lock:
            return self._get(self._enquiries, enquiry_id)

    def create_enquiry(self, data: EnquiryCreate) -> Enquiry:
        with self._lock:
            now = self.now()
            enquiry = Enquiry(
                id=self._next_id("enquiry"), status=EnquiryStatus.submitted, created_at=now, updated_at=now,
                **data.model_dump(),
            )
            self._commit(self._enquiries, enquiry)
            logger.info("enquiry %s submitted", enquiry.id)
            return enquiry

    def update_enquiry_status(self, enquiry_id, status: EnquiryStatus):
        with self._lock:
            enquiry = self._get(self._enquiries, enquiry_id)
            if enquiry is None:
                return None
            if lifecycle.transition_enquiry(enquiry, status, self.now()):
                self._commit(self._enquiries, enquiry)
            return enquiry

    def assign_enquiry(self, enquiry_id, user_id):
        with self._lock:
            enquiry = self._get(self._enquiries, enquiry_id)
            if enquiry is None:
                return None
            lifecycle.assign_enquiry(enquiry, user_id, self.now())
            self._commit(self._enquiries, enquiry)
            return enquiry

    def get_enquiry_responses(self, enquiry_id):
        with self._lock:
            return self._select(self._enquiry_responses, lambda r: r.enquiry_id == enquiry_id)

    def create_enquiry_response(self, data: EnquiryResponseCreate) -> EnquiryResponse:
        with self._lock:
            now = self.now()
            response = EnquiryResponse(id=self._next_id("enquiry_response"), responded_at=now, **data.model_dump())
            enquiry = self._get(self._enquiries, data.enquiry_id)
            if enquiry is not None:
                lifecycle.mark_responded(enquiry, now)
                self._commit(self._enquiries, enquiry)
            self._commit(self._enquiry_responses, response)
            return response
