"""Booking lifecycle against both store backends."""

from datetime import timedelta

import pytest

from oceanview.schemas.enums import BookingStatus, CancellationReason, PaymentStatus
from oceanview.storage.errors import InvalidRefundError, InvalidTransitionError

from factories import booking_create, payment_create, user_create


def _book(storage, guest, cruise, **overrides):
    return storage.create_booking(booking_create(guest.id, cruise.id, storage.today(), **overrides))


# ---------------------------------------------------------------------------
# Creation and lookup
# ---------------------------------------------------------------------------


def test_references_are_non_empty_and_unique(storage, guest, cruise):
    refs = [_book(storage, guest, cruise).booking_reference for _ in range(5)]

    assert all(refs)
    assert len(set(refs)) == 5
    assert all(ref.startswith("BK-") for ref in refs)


def test_new_booking_defaults(storage, booking, clock):
    assert booking.status == BookingStatus.pending
    assert booking.payment_status == PaymentStatus.pending
    assert booking.status_history == []
    assert booking.payment_id is None
    assert booking.booking_date == clock.now
    assert booking.updated_at == clock.now
    assert booking.booking_reference.endswith(f"-{booking.id}")
    assert booking.guest_details[0]["firstName"] == "Ann"


def test_lookup_by_id_and_reference(storage, booking, guest):
    assert storage.get_booking(booking.id) == booking
    assert storage.get_booking_by_reference(booking.booking_reference) == booking
    assert [b.id for b in storage.get_bookings(guest.id)] == [booking.id]


def test_unknown_booking_is_none_everywhere(storage):
    assert storage.get_booking(999) is None
    assert storage.get_booking_by_reference("BK-0000-999") is None
    assert storage.update_booking_status(999, BookingStatus.confirmed) is None
    assert storage.cancel_booking(999, "gone") is None
    assert storage.process_refund(999, 10) is None
    assert storage.check_in_passengers(999) is None
    assert storage.mark_notification_sent(999) is None


def test_returned_bookings_are_snapshots(storage, booking):
    booking.status = BookingStatus.cancelled

    assert storage.get_booking(booking.id).status == BookingStatus.pending


# ---------------------------------------------------------------------------
# Status transitions
# ---------------------------------------------------------------------------


def test_status_update_appends_history(storage, booking, clock):
    clock.advance(hours=1)

    updated = storage.update_booking_status(booking.id, BookingStatus.confirmed, "paid at the desk")

    assert updated.status == BookingStatus.confirmed
    assert updated.updated_at == clock.now
    [entry] = updated.status_history
    assert entry.from_status == BookingStatus.pending
    assert entry.to_status == BookingStatus.confirmed
    assert entry.reason == "paid at the desk"
    assert entry.timestamp == clock.now
    assert storage.get_booking(booking.id).status_history == updated.status_history


def test_history_serializes_with_from_and_to_keys(storage, booking):
    updated = storage.update_booking_status(booking.id, BookingStatus.confirmed)

    entry = updated.model_dump(by_alias=True)["statusHistory"][0]
    assert entry["from"] == BookingStatus.pending
    assert entry["to"] == BookingStatus.confirmed


def test_setting_the_same_status_is_a_noop(storage, booking):
    again = storage.update_booking_status(booking.id, BookingStatus.pending)

    assert again.status == BookingStatus.pending
    assert again.status_history == []


def test_history_alias_is_the_same_operation(storage, booking):
    updated = storage.update_booking_status_history(booking.id, BookingStatus.confirmed)

    assert updated.status == BookingStatus.confirmed
    assert len(updated.status_history) == 1


def test_full_voyage_records_every_step(storage, booking):
    for status in (BookingStatus.confirmed, BookingStatus.in_progress, BookingStatus.completed):
        storage.update_booking_status(booking.id, status)

    done = storage.get_booking(booking.id)
    assert [(e.from_status, e.to_status) for e in done.status_history] == [
        (BookingStatus.pending, BookingStatus.confirmed),
        (BookingStatus.confirmed, BookingStatus.in_progress),
        (BookingStatus.in_progress, BookingStatus.completed),
    ]


@pytest.mark.parametrize(
    "path, target",
    [
        ([BookingStatus.confirmed], BookingStatus.pending),
        ([], BookingStatus.in_progress),
        ([], BookingStatus.completed),
        ([BookingStatus.cancelled], BookingStatus.confirmed),
        ([BookingStatus.confirmed, BookingStatus.in_progress, BookingStatus.completed], BookingStatus.cancelled),
        ([BookingStatus.refunded], BookingStatus.cancelled),
    ],
)
def test_illegal_transition_leaves_booking_untouched(storage, booking, path, target):
    for status in path:
        storage.update_booking_status(booking.id, status)
    before = storage.get_booking(booking.id)

    with pytest.raises(InvalidTransitionError) as exc:
        storage.update_booking_status(booking.id, target)

    assert exc.value.entity == "booking"
    assert exc.value.current == before.status.value
    assert exc.value.requested == target.value
    assert storage.get_booking(booking.id) == before


# ---------------------------------------------------------------------------
# Cancellation, refunds, check-in
# ---------------------------------------------------------------------------


def test_cancel_booking(storage, booking, clock):
    clock.advance(minutes=5)

    cancelled = storage.cancel_booking(booking.id, "Change of plans")

    assert cancelled.status == BookingStatus.cancelled
    assert cancelled.cancellation_reason == CancellationReason.customer_request
    assert cancelled.cancellation_notes == "Change of plans"
    assert cancelled.cancellation_date == clock.now
    [entry] = cancelled.status_history
    assert entry.to_status == BookingStatus.cancelled
    assert entry.reason == "customer_request"


def test_cancel_with_reason_code(storage, booking):
    cancelled = storage.cancel_booking(booking.id, "Hurricane warning", CancellationReason.weather)

    assert cancelled.cancellation_reason == CancellationReason.weather
    assert cancelled.status_history[-1].reason == "weather"


def test_cancelling_twice_is_rejected(storage, booking):
    storage.cancel_booking(booking.id, "first")

    with pytest.raises(InvalidTransitionError):
        storage.cancel_booking(booking.id, "second")

    again = storage.get_booking(booking.id)
    assert again.cancellation_notes == "first"
    assert len(again.status_history) == 1


def test_refund_without_payment(storage, booking, clock):
    refunded = storage.process_refund(booking.id, 500)

    assert refunded.status == BookingStatus.refunded
    assert refunded.payment_status == PaymentStatus.refunded
    assert refunded.refund_amount == 500
    assert refunded.refund_date == clock.now
    assert refunded.status_history[-1].to_status == BookingStatus.refunded


def test_refund_cancelled_booking(storage, booking):
    storage.cancel_booking(booking.id, None)

    refunded = storage.process_refund(booking.id, 1798)

    assert [e.to_status for e in refunded.status_history] == [BookingStatus.cancelled, BookingStatus.refunded]


def test_refund_also_refunds_linked_payment(storage, booking, clock):
    payment = storage.create_payment(payment_create(booking.id, status=PaymentStatus.completed))
    clock.advance(days=1)

    storage.process_refund(booking.id, 1798)

    refunded = storage.get_payment(payment.id)
    assert refunded.status == PaymentStatus.refunded
    assert refunded.refund_amount == 1798
    assert refunded.refund_date == clock.now


def test_refund_ignores_payment_that_took_no_money(storage, booking):
    payment = storage.create_payment(payment_create(booking.id, status=PaymentStatus.failed))

    refunded = storage.process_refund(booking.id, 100)

    assert refunded.status == BookingStatus.refunded
    assert refunded.refund_amount == 100
    assert storage.get_payment(payment.id).status == PaymentStatus.failed
    assert storage.get_payment(payment.id).refund_amount is None


@pytest.mark.parametrize("status", [PaymentStatus.pending, PaymentStatus.processing])
def test_refund_blocked_while_payment_awaits_capture(storage, booking, status):
    payment = storage.create_payment(payment_create(booking.id, status=status))
    before = storage.get_booking(booking.id)

    with pytest.raises(InvalidTransitionError):
        storage.process_refund(booking.id, 1798)

    assert storage.get_booking(booking.id) == before
    assert storage.get_payment(payment.id).status == status


def test_captured_payment_after_blocked_refund_confirms_booking(storage, booking):
    payment = storage.create_payment(payment_create(booking.id, status=PaymentStatus.processing))
    with pytest.raises(InvalidTransitionError):
        storage.process_refund(booking.id, 1798)

    storage.update_payment_status(payment.id, PaymentStatus.completed)

    current = storage.get_booking(booking.id)
    assert current.status == BookingStatus.confirmed
    assert current.payment_status == PaymentStatus.completed


def test_refund_counts_earlier_partial_refunds(storage, booking):
    payment = storage.create_payment(payment_create(booking.id, status=PaymentStatus.completed))
    storage.refund_payment(payment.id, 300)
    before = storage.get_booking(booking.id)

    with pytest.raises(InvalidRefundError):
        storage.process_refund(booking.id, 1798)

    assert storage.get_booking(booking.id) == before
    assert storage.get_payment(payment.id).refund_amount == 300

    refunded = storage.process_refund(booking.id, 1498)

    assert refunded.status == BookingStatus.refunded
    assert refunded.refund_amount == 1798
    assert refunded.payment_status == PaymentStatus.refunded
    settled = storage.get_payment(payment.id)
    assert settled.refund_amount == 1798
    assert settled.status == PaymentStatus.refunded


def test_partial_booking_refund_leaves_payment_partially_refunded(storage, booking):
    payment = storage.create_payment(payment_create(booking.id, status=PaymentStatus.completed))

    refunded = storage.process_refund(booking.id, 500)

    assert refunded.status == BookingStatus.refunded
    assert refunded.payment_status == PaymentStatus.partially_refunded
    assert refunded.refund_amount == 500
    assert storage.get_payment(payment.id).status == PaymentStatus.partially_refunded
    assert storage.get_payment(payment.id).refundable == 1298


@pytest.mark.parametrize("amount", [0, -5, 1799])
def test_invalid_refund_amount_changes_nothing(storage, booking, amount):
    payment = storage.create_payment(payment_create(booking.id, status=PaymentStatus.completed))
    before = storage.get_booking(booking.id)

    with pytest.raises(InvalidRefundError):
        storage.process_refund(booking.id, amount)

    assert storage.get_booking(booking.id) == before
    assert storage.get_payment(payment.id).status == PaymentStatus.completed


def test_refunding_twice_is_rejected(storage, booking):
    storage.process_refund(booking.id, 100)

    with pytest.raises(InvalidTransitionError):
        storage.process_refund(booking.id, 100)

    assert storage.get_booking(booking.id).refund_amount == 100


def test_check_in(storage, booking, clock):
    storage.update_booking_status(booking.id, BookingStatus.confirmed)

    checked = storage.check_in_passengers(booking.id)

    assert checked.checked_in is True
    assert checked.check_in_date == clock.now
    assert checked.status == BookingStatus.confirmed


def test_cancelled_booking_cannot_check_in(storage, booking):
    storage.cancel_booking(booking.id, None)

    with pytest.raises(InvalidTransitionError):
        storage.check_in_passengers(booking.id)

    assert storage.get_booking(booking.id).checked_in is False


# ---------------------------------------------------------------------------
# Date-based views
# ---------------------------------------------------------------------------


def test_upcoming_and_past_bookings(storage, guest, cruise):
    today = storage.today()
    future = _book(storage, guest, cruise, departure_date=today + timedelta(days=10))
    leaving_today = _book(storage, guest, cruise, departure_date=today)
    cancelled = _book(storage, guest, cruise, departure_date=today + timedelta(days=20))
    storage.cancel_booking(cancelled.id, None)
    refunded = _book(storage, guest, cruise, departure_date=today + timedelta(days=20))
    storage.process_refund(refunded.id, 100)
    finished = _book(storage, guest, cruise, departure_date=today - timedelta(days=20))
    at_sea = _book(storage, guest, cruise, departure_date=today - timedelta(days=3))
    for status in (BookingStatus.confirmed, BookingStatus.in_progress, BookingStatus.completed):
        storage.update_booking_status(at_sea.id, status)
    stranger = storage.create_user(user_create())
    _book(storage, stranger, cruise, departure_date=today + timedelta(days=10))

    upcoming = storage.get_upcoming_bookings(guest.id)
    past = storage.get_past_bookings(guest.id)

    assert [b.id for b in upcoming] == [future.id]
    assert leaving_today.id not in {b.id for b in upcoming}
    assert {b.id for b in past} == {finished.id, at_sea.id}
    for b in upcoming:
        assert b.status not in (BookingStatus.cancelled, BookingStatus.refunded)
        assert b.departure_date > today


def test_booking_returning_today_is_past(storage, guest, cruise):
    today = storage.today()
    home_today = _book(
        storage, guest, cruise, departure_date=today - timedelta(days=7), return_date=today,
    )
    storage.update_booking_status(home_today.id, BookingStatus.confirmed)

    assert [b.id for b in storage.get_past_bookings(guest.id)] == [home_today.id]
    assert storage.get_upcoming_bookings(guest.id) == []


def test_bookings_departing_between(storage, guest, cruise):
    today = storage.today()
    soon = _book(storage, guest, cruise, departure_date=today + timedelta(days=3))
    edge = _book(storage, guest, cruise, departure_date=today + timedelta(days=7))
    _book(storage, guest, cruise, departure_date=today + timedelta(days=8))
    called_off = _book(storage, guest, cruise, departure_date=today + timedelta(days=4))
    storage.cancel_booking(called_off.id, None)

    due = storage.get_bookings_departing_between(today, today + timedelta(days=7))

    assert [b.id for b in due] == [soon.id, edge.id]


def test_mark_notification_sent(storage, booking, clock):
    clock.advance(hours=2)

    stamped = storage.mark_notification_sent(booking.id)

    assert stamped.last_notification_sent == clock.now
    assert storage.get_booking(booking.id).last_notification_sent == clock.now
