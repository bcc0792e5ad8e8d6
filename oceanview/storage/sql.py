"""SQLAlchemy-backed store.

Each public method runs in one ``sessionmaker.begin()`` transaction. Rows that
are about to change are read ``FOR UPDATE``, converted to entity snapshots,
passed through :mod:`oceanview.storage.lifecycle` and written back, so both
backends share the same rules.
"""
import logging
import uuid
from datetime import timedelta
from enum import Enum
from typing import Optional

from pydantic_core import to_jsonable_python
from sqlalchemy import JSON, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from oceanview.db.session import Base, make_engine, make_session_factory
from oceanview.models.amenity import Amenity as AmenityRow
from oceanview.models.booking import Booking as BookingRow
from oceanview.models.cabin_type import CabinType as CabinTypeRow
from oceanview.models.cruise import Cruise as CruiseRow
from oceanview.models.destination import Destination as DestinationRow
from oceanview.models.enquiry import Enquiry as EnquiryRow, EnquiryResponse as EnquiryResponseRow
from oceanview.models.payment import Payment as PaymentRow
from oceanview.models.testimonial import Testimonial as TestimonialRow
from oceanview.models.user import User as UserRow
from oceanview.schemas.booking import Booking, BookingCreate
from oceanview.schemas.catalog import (
    DURATION_BUCKETS, Amenity, AmenityCreate, CabinType, CabinTypeCreate, Cruise, CruiseCreate, CruiseSearch,
    Destination, DestinationCreate,
)
from oceanview.schemas.common import Entity
from oceanview.schemas.enums import BookingStatus, EnquiryStatus, PaymentMethod, PaymentStatus
from oceanview.schemas.feedback import (
    Enquiry, EnquiryCreate, EnquiryResponse, EnquiryResponseCreate, Testimonial, TestimonialCreate,
)
from oceanview.schemas.payments import Payment, PaymentCreate, StripePaymentData
from oceanview.schemas.user import User, UserCreate, UserUpdate
from oceanview.storage import lifecycle
from oceanview.storage.base import DEFAULT_RESET_TOKEN_TTL, Clock, Storage
from oceanview.storage.errors import ConflictError

logger = logging.getLogger(__name__)


def _assign(row: Base, values: dict) -> None:
    columns = row.__table__.columns
    for name, value in values.items():
        if name == "id":
            continue
        if isinstance(columns[name].type, JSON):
            value = to_jsonable_python(value, by_alias=True)
        elif isinstance(value, Enum):
            value = value.value
        setattr(row, name, value)


def _write_back(row: Base, entity: Entity) -> None:
    _assign(row, {name: getattr(entity, name) for name in type(entity).model_fields})


def _locked(db: Session, model, entity_id):
    if entity_id is None:
        return None
    return db.scalars(select(model).where(model.id == entity_id).with_for_update()).first()


class SqlStorage(Storage):
    def __init__(self, session_factory: sessionmaker, clock: Optional[Clock] = None):
        super().__init__(clock)
        self._session_factory = session_factory

    @classmethod
    def from_url(cls, url: str, clock: Optional[Clock] = None, create_tables: bool = False, **engine_kwargs):
        engine = make_engine(url, **engine_kwargs)
        if create_tables:
            Base.metadata.create_all(bind=engine)
        return cls(make_session_factory(engine), clock=clock)

    def _read(self, schema, model, entity_id):
        with self._session_factory() as db:
            row = db.get(model, entity_id)
            return schema.model_validate(row) if row is not None else None

    def _list(self, schema, stmt) -> list:
        with self._session_factory() as db:
            return [schema.model_validate(row) for row in db.scalars(stmt)]

    @staticmethod
    def _insert(db: Session, model, schema, values: dict):
        row = model()
        _assign(row, values)
        db.add(row)
        db.flush()
        return row, schema.model_validate(row)

    # Users

    def get_user(self, user_id):
        return self._read(User, UserRow, user_id)

    def get_user_by_username(self, username):
        found = self._list(User, select(UserRow).where(UserRow.username == username))
        return found[0] if found else None

    def get_user_by_email(self, email):
        found = self._list(User, select(UserRow).where(UserRow.email == email))
        return found[0] if found else None

    def create_user(self, data: UserCreate) -> User:
        now = self.now()
        try:
            with self._session_factory.begin() as db:
                if db.scalars(select(UserRow.id).where(UserRow.username == data.username)).first() is not None:
                    raise ConflictError("Username already exists")
                if db.scalars(select(UserRow.id).where(UserRow.email == data.email)).first() is not None:
                    raise ConflictError("Email already exists")
                _, user = self._insert(
                    db, UserRow, User,
                    {**data.model_dump(), "created_at": now, "updated_at": now, "is_verified": False},
                )
        except IntegrityError as exc:
            # Lost a race with a concurrent registration
            raise ConflictError("Username or email already exists") from exc
        logger.info("user %s created", user.id)
        return user

    def update_user(self, user_id, data: UserUpdate):
        with self._session_factory.begin() as db:
            row = _locked(db, UserRow, user_id)
            if row is None:
                return None
            user = User.model_validate(row)
            changes = data.model_dump(exclude_unset=True)
            if changes.get("email") and changes["email"] != user.email:
                taken = db.scalars(
                    select(UserRow.id).where(UserRow.email == changes["email"], UserRow.id != user_id)
                ).first()
                if taken is not None:
                    raise ConflictError("Email already exists")
            for field, value in changes.items():
                setattr(user, field, value)
            user.updated_at = self.now()
            _write_back(row, user)
            return user

    def update_user_password(self, user_id, password_hash):
        with self._session_factory.begin() as db:
            row = _locked(db, UserRow, user_id)
            if row is None:
                return None
            return self._set_password(row, password_hash)

    def _set_password(self, row: UserRow, password_hash: str) -> User:
        user = User.model_validate(row)
        user.password_hash = password_hash
        user.reset_token = None
        user.reset_token_expiry = None
        user.updated_at = self.now()
        _write_back(row, user)
        return user

    def update_user_last_login(self, user_id):
        with self._session_factory.begin() as db:
            row = _locked(db, UserRow, user_id)
            if row is None:
                return None
            user = User.model_validate(row)
            user.last_login = self.now()
            _write_back(row, user)
            return user

    def create_password_reset_token(self, email, ttl: timedelta = DEFAULT_RESET_TOKEN_TTL):
        with self._session_factory.begin() as db:
            row = db.scalars(select(UserRow).where(UserRow.email == email).with_for_update()).first()
            if row is None:
                return None
            user = User.model_validate(row)
            user.reset_token = str(uuid.uuid4())
            user.reset_token_expiry = self.now() + ttl
            _write_back(row, user)
            return user.reset_token

    def reset_password(self, token, password_hash):
        if not token:
            return False
        with self._session_factory.begin() as db:
            row = db.scalars(select(UserRow).where(UserRow.reset_token == token).with_for_update()).first()
            if row is None:
                return False
            user = User.model_validate(row)
            if user.reset_token_expiry is None or user.reset_token_expiry <= self.now():
                return False
            self._set_password(row, password_hash)
            return True

    # Catalog

    def get_destinations(self):
        return self._list(Destination, select(DestinationRow).order_by(DestinationRow.id))

    def get_destination(self, destination_id):
        return self._read(Destination, DestinationRow, destination_id)

    def create_destination(self, data: DestinationCreate) -> Destination:
        with self._session_factory.begin() as db:
            return self._insert(db, DestinationRow, Destination, data.model_dump())[1]

    def get_cruises(self):
        return self._list(Cruise, select(CruiseRow).order_by(CruiseRow.id))

    def get_cruise(self, cruise_id):
        return self._read(Cruise, CruiseRow, cruise_id)

    def get_cruises_by_destination(self, destination_id):
        return self._list(
            Cruise, select(CruiseRow).where(CruiseRow.destination_id == destination_id).order_by(CruiseRow.id)
        )

    def create_cruise(self, data: CruiseCreate) -> Cruise:
        with self._session_factory.begin() as db:
            return self._insert(db, CruiseRow, Cruise, data.model_dump())[1]

    def search_cruises(self, params: CruiseSearch):
        stmt = select(CruiseRow).order_by(CruiseRow.id)
        name = params.destination_name
        if name is not None:
            with self._session_factory() as db:
                destination_id = db.scalars(
                    select(DestinationRow.id).where(DestinationRow.name == name).order_by(DestinationRow.id)
                ).first()
            if destination_id is None:
                return []
            stmt = stmt.where(CruiseRow.destination_id == destination_id)
        bucket = DURATION_BUCKETS.get(params.duration or "")
        if bucket is not None:
            low, high = bucket
            stmt = stmt.where(CruiseRow.duration >= low)
            if high is not None:
                stmt = stmt.where(CruiseRow.duration <= high)
        return self._list(Cruise, stmt)

    def get_cabin_types(self, cruise_id):
        return self._list(
            CabinType, select(CabinTypeRow).where(CabinTypeRow.cruise_id == cruise_id).order_by(CabinTypeRow.id)
        )

    def get_cabin_type(self, cabin_type_id):
        return self._read(CabinType, CabinTypeRow, cabin_type_id)

    def create_cabin_type(self, data: CabinTypeCreate) -> CabinType:
        with self._session_factory.begin() as db:
            return self._insert(db, CabinTypeRow, CabinType, data.model_dump())[1]

    def get_amenities(self):
        return self._list(Amenity, select(AmenityRow).order_by(AmenityRow.id))

    def get_amenity(self, amenity_id):
        return self._read(Amenity, AmenityRow, amenity_id)

    def create_amenity(self, data: AmenityCreate) -> Amenity:
        with self._session_factory.begin() as db:
            return self._insert(db, AmenityRow, Amenity, data.model_dump())[1]

    # Bookings

    def get_bookings(self, user_id):
        return self._list(Booking, select(BookingRow).where(BookingRow.user_id == user_id).order_by(BookingRow.id))

    def get_booking(self, booking_id):
        return self._read(Booking, BookingRow, booking_id)

    def get_booking_by_reference(self, reference):
        found = self._list(Booking, select(BookingRow).where(BookingRow.booking_reference == reference))
        return found[0] if found else None

    def create_booking(self, data: BookingCreate) -> Booking:
        now = self.now()
        with self._session_factory.begin() as db:
            # The reference embeds the id, which only exists after the insert
            row, _ = self._insert(db, BookingRow, Booking, {
                **data.model_dump(),
                "booking_reference": f"tmp-{uuid.uuid4()}",
                "booking_date": now,
                "updated_at": now,
                "status_history": [],
            })
            row.booking_reference = lifecycle.make_booking_reference(row.id)
            db.flush()
            booking = Booking.model_validate(row)
        logger.info("booking %s created for user %s", booking.booking_reference, booking.user_id)
        return booking

    def _mutate_booking(self, booking_id, apply) -> Optional[Booking]:
        """Lock the booking, run ``apply(booking)`` on its snapshot, and write the result back."""
        with self._session_factory.begin() as db:
            row = _locked(db, BookingRow, booking_id)
            if row is None:
                return None
            booking = Booking.model_validate(row)
            if apply(booking) is not False:
                _write_back(row, booking)
            return booking

    def update_booking_status(self, booking_id, status: BookingStatus, reason=None):
        booking = self._mutate_booking(
            booking_id, lambda b: lifecycle.transition_booking(b, status, self.now(), reason)
        )
        if booking is not None:
            logger.info("booking %s is %s", booking.booking_reference, booking.status.value)
        return booking

    def cancel_booking(self, booking_id, notes=None, reason_code=None):
        booking = self._mutate_booking(
            booking_id, lambda b: lifecycle.cancel_booking(b, notes, reason_code, self.now())
        )
        if booking is not None:
            logger.info("booking %s cancelled (%s)", booking.booking_reference, booking.cancellation_reason.value)
        return booking

    def process_refund(self, booking_id, amount):
        with self._session_factory.begin() as db:
            row = _locked(db, BookingRow, booking_id)
            if row is None:
                return None
            booking = Booking.model_validate(row)
            payment_row = _locked(db, PaymentRow, booking.payment_id)
            payment = Payment.model_validate(payment_row) if payment_row is not None else None
            lifecycle.refund_booking(booking, amount, self.now(), payment)
            _write_back(row, booking)
            if payment is not None:
                _write_back(payment_row, payment)
        logger.info("booking %s refunded %s", booking.booking_reference, amount)
        return booking

    def check_in_passengers(self, booking_id):
        return self._mutate_booking(booking_id, lambda b: lifecycle.check_in(b, self.now()))

    def get_upcoming_bookings(self, user_id):
        return self._list(
            Booking,
            select(BookingRow)
            .where(
                BookingRow.user_id == user_id,
                BookingRow.status.not_in([s.value for s in lifecycle.INACTIVE_BOOKING_STATUSES]),
                BookingRow.departure_date > self.today(),
            )
            .order_by(BookingRow.id),
        )

    def get_past_bookings(self, user_id):
        return self._list(
            Booking,
            select(BookingRow)
            .where(
                BookingRow.user_id == user_id,
                or_(BookingRow.status == BookingStatus.completed.value, BookingRow.return_date <= self.today()),
            )
            .order_by(BookingRow.id),
        )

    def get_bookings_departing_between(self, start, end):
        return self._list(
            Booking,
            select(BookingRow)
            .where(
                BookingRow.departure_date >= start,
                BookingRow.departure_date <= end,
                BookingRow.status.not_in([s.value for s in lifecycle.TERMINAL_BOOKING_STATUSES]),
            )
            .order_by(BookingRow.departure_date, BookingRow.id),
        )

    def mark_notification_sent(self, booking_id):
        def stamp(booking: Booking):
            booking.last_notification_sent = self.now()

        return self._mutate_booking(booking_id, stamp)

    # Payments

    def _sync_booking(self, db: Session, payment: Payment) -> None:
        row = _locked(db, BookingRow, payment.booking_id)
        if row is not None:
            booking = Booking.model_validate(row)
            lifecycle.sync_booking_with_payment(booking, payment, self.now())
            _write_back(row, booking)

    def get_payments(self, booking_id):
        return self._list(Payment, select(PaymentRow).where(PaymentRow.booking_id == booking_id).order_by(PaymentRow.id))

    def get_payment(self, payment_id):
        return self._read(Payment, PaymentRow, payment_id)

    def create_payment(self, data: PaymentCreate) -> Payment:
        with self._session_factory.begin() as db:
            _, payment = self._insert(db, PaymentRow, Payment, {**data.model_dump(), "payment_date": self.now()})
            self._sync_booking(db, payment)
        logger.info("payment %s created for booking %s (%s)", payment.id, payment.booking_id, payment.status.value)
        return payment

    def process_stripe_payment(self, booking_id, data: StripePaymentData):
        now = self.now()
        with self._session_factory.begin() as db:
            row = _locked(db, BookingRow, booking_id)
            if row is None:
                return None
            booking = Booking.model_validate(row)
            lifecycle.ensure_payable(booking)
            _, payment = self._insert(db, PaymentRow, Payment, {
                **data.model_dump(),
                "booking_id": booking_id,
                "amount": booking.total_price,
                "currency": "USD",
                "status": PaymentStatus.processing,
                "payment_method": PaymentMethod.stripe,
                "payment_date": now,
                "gateway_response": {"received": now.isoformat()},
            })
            lifecycle.sync_booking_with_payment(booking, payment, now)
            _write_back(row, booking)
        logger.info("stripe payment %s opened for booking %s", payment.id, booking.booking_reference)
        return payment

    def update_payment_status(self, payment_id, status: PaymentStatus, transaction_id=None):
        with self._session_factory.begin() as db:
            row = _locked(db, PaymentRow, payment_id)
            if row is None:
                return None
            payment = Payment.model_validate(row)
            changed = lifecycle.transition_payment(payment, status, self.now())
            if transaction_id and transaction_id != payment.transaction_id:
                payment.transaction_id = transaction_id
                changed = True
            if changed:
                _write_back(row, payment)
                self._sync_booking(db, payment)
                logger.info("payment %s moved to %s", payment.id, payment.status.value)
            return payment

    def refund_payment(self, payment_id, amount):
        with self._session_factory.begin() as db:
            row = _locked(db, PaymentRow, payment_id)
            if row is None:
                return None
            payment = Payment.model_validate(row)
            lifecycle.refund_payment(payment, amount, self.now())
            _write_back(row, payment)
            self._sync_booking(db, payment)
        logger.info("payment %s refunded %s (%s)", payment.id, amount, payment.status.value)
        return payment

    def get_payments_by_status(self, status):
        status = PaymentStatus(status)
        return self._list(Payment, select(PaymentRow).where(PaymentRow.status == status.value).order_by(PaymentRow.id))

    # Testimonials

    def get_testimonials(self):
        return self._list(Testimonial, select(TestimonialRow).order_by(TestimonialRow.id))

    def get_testimonials_by_cruise(self, cruise_id):
        return self._list(
            Testimonial,
            select(TestimonialRow).where(TestimonialRow.cruise_id == cruise_id).order_by(TestimonialRow.id),
        )

    def get_testimonial(self, testimonial_id):
        return self._read(Testimonial, TestimonialRow, testimonial_id)

    def create_testimonial(self, data: TestimonialCreate) -> Testimonial:
        with self._session_factory.begin() as db:
            return self._insert(
                db, TestimonialRow, Testimonial, {**data.model_dump(), "created_at": self.now(), "is_verified": False}
            )[1]

    def verify_testimonial(self, testimonial_id):
        with self._session_factory.begin() as db:
            row = _locked(db, TestimonialRow, testimonial_id)
            if row is None:
                return None
            row.is_verified = True
            db.flush()
            return Testimonial.model_validate(row)

    # Enquiries

    def get_enquiries(self):
        return self._list(Enquiry, select(EnquiryRow).order_by(EnquiryRow.id))

    def get_enquiries_by_user(self, user_id):
        return self._list(Enquiry, select(EnquiryRow).where(EnquiryRow.user_id == user_id).order_by(EnquiryRow.id))

    def get_enquiry(self, enquiry_id):
        return self._read(Enquiry, EnquiryRow, enquiry_id)

    def create_enquiry(self, data: EnquiryCreate) -> Enquiry:
        now = self.now()
        with self._session_factory.begin() as db:
            _, enquiry = self._insert(db, EnquiryRow, Enquiry, {
                **data.model_dump(), "status": EnquiryStatus.submitted, "created_at": now, "updated_at": now,
            })
        logger.info("enquiry %s submitted", enquiry.id)
        return enquiry

    def _mutate_enquiry(self, db: Session, enquiry_id, apply) -> Optional[Enquiry]:
        row = _locked(db, EnquiryRow, enquiry_id)
        if row is None:
            return None
        enquiry = Enquiry.model_validate(row)
        if apply(enquiry) is not False:
            _write_back(row, enquiry)
        return enquiry

    def update_enquiry_status(self, enquiry_id, status: EnquiryStatus):
        with self._session_factory.begin() as db:
            return self._mutate_enquiry(db, enquiry_id, lambda e: lifecycle.transition_enquiry(e, status, self.now()))

    def assign_enquiry(self, enquiry_id, user_id):
        with self._session_factory.begin() as db:
            return self._mutate_enquiry(db, enquiry_id, lambda e: lifecycle.assign_enquiry(e, user_id, self.now()))

    def get_enquiry_responses(self, enquiry_id):
        return self._list(
            EnquiryResponse,
            select(EnquiryResponseRow).where(EnquiryResponseRow.enquiry_id == enquiry_id).order_by(EnquiryResponseRow.id),
        )

    def create_enquiry_response(self, data: EnquiryResponseCreate) -> EnquiryResponse:
        now = self.now()
        with self._session_factory.begin() as db:
            _, response = self._insert(
                db, EnquiryResponseRow, EnquiryResponse, {**data.model_dump(), "responded_at": now}
            )
            self._mutate_enquiry(db, data.enquiry_id, lambda e: lifecycle.mark_responded(e, now))
        return response
