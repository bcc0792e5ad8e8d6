"""State machines for bookings, payments and enquiries.

Every storage backend applies these functions to entity snapshots and then
persists the result, so the rules live in exactly one place. Functions either
raise before touching anything or apply the whole change.
"""
import logging
import random
from datetime import date, datetime

from oceanview.schemas.booking import Booking, StatusChange
from oceanview.schemas.enums import BookingStatus, CancellationReason, EnquiryStatus, PaymentStatus
from oceanview.schemas.feedback import Enquiry
from oceanview.schemas.payments import Payment
from oceanview.storage.errors import InvalidRefundError, InvalidTransitionError

logger = logging.getLogger(__name__)

BOOKING_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.pending: frozenset({BookingStatus.confirmed, BookingStatus.cancelled, BookingStatus.refunded}),
    BookingStatus.confirmed: frozenset({BookingStatus.in_progress, BookingStatus.cancelled, BookingStatus.refunded}),
    BookingStatus.in_progress: frozenset({BookingStatus.completed, BookingStatus.cancelled, BookingStatus.refunded}),
    BookingStatus.completed: frozenset({BookingStatus.refunded}),
    BookingStatus.cancelled: frozenset({BookingStatus.refunded}),
    BookingStatus.refunded: frozenset(),
}

TERMINAL_BOOKING_STATUSES = frozenset({BookingStatus.completed, BookingStatus.cancelled, BookingStatus.refunded})
# Never listed as upcoming
INACTIVE_BOOKING_STATUSES = frozenset({BookingStatus.cancelled, BookingStatus.refunded})

# Status moves allowed through update_payment_status. Partial refunds only happen
# through refund_payment, which knows the amount.
PAYMENT_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.pending: frozenset({PaymentStatus.processing, PaymentStatus.completed, PaymentStatus.failed}),
    PaymentStatus.processing: frozenset({PaymentStatus.completed, PaymentStatus.failed}),
    PaymentStatus.completed: frozenset({PaymentStatus.refunded}),
    PaymentStatus.partially_refunded: frozenset({PaymentStatus.refunded}),
    PaymentStatus.failed: frozenset(),
    PaymentStatus.refunded: frozenset(),
}

REFUNDABLE_PAYMENT_STATUSES = frozenset({PaymentStatus.completed, PaymentStatus.partially_refunded})

ENQUIRY_TRANSITIONS: dict[EnquiryStatus, frozenset[EnquiryStatus]] = {
    EnquiryStatus.submitted: frozenset({EnquiryStatus.in_review, EnquiryStatus.responded, EnquiryStatus.closed}),
    EnquiryStatus.in_review: frozenset({EnquiryStatus.responded, EnquiryStatus.closed}),
    EnquiryStatus.responded: frozenset({EnquiryStatus.in_review, EnquiryStatus.closed}),
    EnquiryStatus.closed: frozenset(),
}

BOOKING_REFERENCE_PREFIX = "BK"


def make_booking_reference(booking_id: int) -> str:
    # The id suffix makes the reference unique; the random part only makes it harder to guess.
    return f"{BOOKING_REFERENCE_PREFIX}-{random.randint(0, 9999):04d}-{booking_id}"


# Bookings

def check_booking_transition(booking: Booking, target: BookingStatus) -> bool:
    """Return False for a no-op (same status), True for a legal move; raise otherwise."""
    target = BookingStatus(target)
    if target == booking.status:
        return False
    if target not in BOOKING_TRANSITIONS[booking.status]:
        logger.warning("rejected booking %s transition %s -> %s", booking.booking_reference, booking.status.value, target.value)
        raise InvalidTransitionError("booking", booking.status, target)
    return True


def transition_booking(booking: Booking, target: BookingStatus, now: datetime, reason: str | None = None) -> bool:
    if not check_booking_transition(booking, target):
        return False
    target = BookingStatus(target)
    booking.status_history = [
        *booking.status_history,
        StatusChange(from_status=booking.status, to_status=target, timestamp=now, reason=reason),
    ]
    booking.status = target
    booking.updated_at = now
    return True


def cancel_booking(booking: Booking, notes: str | None, reason_code: CancellationReason | None, now: datetime) -> None:
    reason = CancellationReason(reason_code or CancellationReason.customer_request)
    if booking.status == BookingStatus.cancelled:
        raise InvalidTransitionError("booking", booking.status, BookingStatus.cancelled)
    transition_booking(booking, BookingStatus.cancelled, now, reason=reason.value)
    booking.cancellation_date = now
    booking.cancellation_reason = reason
    booking.cancellation_notes = notes


def refund_booking(booking: Booking, amount: int, now: datetime, payment: Payment | None = None) -> None:
    """Refund a booking and, when given, the payment it links. Validates both before changing either.

    Money already returned through ``refund_payment`` counts against the
    amount, and the payment's ``refund_amount`` accumulates. A payment still
    awaiting capture blocks the refund.
    """
    if amount <= 0 or amount > booking.total_price:
        raise InvalidRefundError(f"refund must be between 1 and {booking.total_price}")
    if booking.status == BookingStatus.refunded:
        raise InvalidTransitionError("booking", booking.status, BookingStatus.refunded)
    check_booking_transition(booking, BookingStatus.refunded)
    if payment is not None and payment.status in (PaymentStatus.pending, PaymentStatus.processing):
        raise InvalidTransitionError("payment", payment.status, PaymentStatus.refunded)

    # A failed payment never took money
    if payment is not None and payment.status in REFUNDABLE_PAYMENT_STATUSES:
        refund_payment(payment, amount, now)
        booking.payment_status = payment.status
        booking.refund_amount = payment.refund_amount
    else:
        booking.payment_status = PaymentStatus.refunded
        booking.refund_amount = amount
    transition_booking(booking, BookingStatus.refunded, now, reason="refund")
    booking.refund_date = now


def check_in(booking: Booking, now: datetime) -> None:
    if booking.status in TERMINAL_BOOKING_STATUSES:
        raise InvalidTransitionError("booking", booking.status, "checked_in")
    booking.checked_in = True
    booking.check_in_date = now
    booking.updated_at = now


def ensure_payable(booking: Booking) -> None:
    if booking.status in TERMINAL_BOOKING_STATUSES:
        raise InvalidTransitionError("booking", booking.status, "paid")


def is_upcoming(booking: Booking, today: date) -> bool:
    return booking.status not in INACTIVE_BOOKING_STATUSES and booking.departure_date > today


def is_past(booking: Booking, today: date) -> bool:
    return booking.status == BookingStatus.completed or booking.return_date <= today


# Payments

def sync_booking_with_payment(booking: Booking, payment: Payment, now: datetime) -> None:
    """Mirror a payment onto its booking.

    A completed payment confirms a pending booking; a fully refunded payment
    refunds the booking. Payments older than the one the booking links are
    ignored so a late callback for a superseded attempt cannot overwrite it.
    """
    if booking.payment_id is not None and payment.id < booking.payment_id:
        return
    if payment.status == PaymentStatus.completed and booking.status == BookingStatus.pending:
        transition_booking(booking, BookingStatus.confirmed, now, reason="payment_completed")
    elif payment.status == PaymentStatus.refunded and booking.status != BookingStatus.refunded:
        transition_booking(booking, BookingStatus.refunded, now, reason="payment_refunded")

    booking.payment_id = payment.id
    booking.payment_status = payment.status
    if payment.status in (PaymentStatus.refunded, PaymentStatus.partially_refunded):
        booking.refund_amount = payment.refund_amount
        booking.refund_date = payment.refund_date
    booking.updated_at = now


def transition_payment(payment: Payment, target: PaymentStatus, now: datetime) -> bool:
    target = PaymentStatus(target)
    if target == payment.status:
        return False
    if target not in PAYMENT_TRANSITIONS[payment.status]:
        logger.warning("rejected payment %s transition %s -> %s", payment.id, payment.status.value, target.value)
        raise InvalidTransitionError("payment", payment.status, target)
    payment.status = target
    if target == PaymentStatus.refunded:
        payment.refund_amount = payment.amount
        payment.refund_date = now
    return True


def refund_payment(payment: Payment, amount: int, now: datetime) -> None:
    if payment.status not in REFUNDABLE_PAYMENT_STATUSES:
        raise InvalidTransitionError("payment", payment.status, PaymentStatus.refunded)
    if amount <= 0 or amount > payment.refundable:
        raise InvalidRefundError(f"refund must be between 1 and {payment.refundable}")
    payment.refund_amount = (payment.refund_amount or 0) + amount
    payment.status = PaymentStatus.refunded if payment.refund_amount == payment.amount else PaymentStatus.partially_refunded
    payment.refund_date = now
    payment.gateway_response = {**(payment.gateway_response or {}), "refunded": now.isoformat()}


# Enquiries

def transition_enquiry(enquiry: Enquiry, target: EnquiryStatus, now: datetime) -> bool:
    target = EnquiryStatus(target)
    if target == enquiry.status:
        return False
    if target not in ENQUIRY_TRANSITIONS[enquiry.status]:
        raise InvalidTransitionError("enquiry", enquiry.status, target)
    enquiry.status = target
    enquiry.updated_at = now
    return True


def assign_enquiry(enquiry: Enquiry, user_id: int, now: datetime) -> None:
    enquiry.assigned_to_user_id = user_id
    if enquiry.status == EnquiryStatus.submitted:
        enquiry.status = EnquiryStatus.in_review
    enquiry.updated_at = now


def mark_responded(enquiry: Enquiry, now: datetime) -> None:
    # A response always reopens the conversation, whatever the current status.
    enquiry.status = EnquiryStatus.responded
    enquiry.updated_at = now
