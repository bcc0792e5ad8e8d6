import hmac
import logging

from fastapi import APIRouter, Depends, Header, HTTPException

from oceanview.api.deps import get_owned_booking, get_storage, http_error, require_staff
from oceanview.core.config import settings
from oceanview.schemas.booking import Booking, BookingResponse, RefundRequest
from oceanview.schemas.enums import BookingStatus, PaymentStatus
from oceanview.schemas.payments import CheckoutPaymentIn, Payment, PaymentReceipt, PaymentWebhookIn
from oceanview.services.notification_service import notify_booking_confirmed
from oceanview.storage.base import Storage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["payments"])


@router.get("/bookings/{booking_id}/payments", response_model=list[Payment])
def list_booking_payments(booking: Booking = Depends(get_owned_booking), storage: Storage = Depends(get_storage)):
    return storage.get_payments(booking.id)


@router.post("/bookings/{booking_id}/payments", response_model=PaymentReceipt, status_code=201)
def pay_booking(body: CheckoutPaymentIn, booking: Booking = Depends(get_owned_booking),
                storage: Storage = Depends(get_storage)):
    """Start a card payment. Only masked card details are stored; the gateway completes it via the webhook."""
    try:
        payment = storage.process_stripe_payment(booking.id, body.to_stripe_data())
    except ValueError as e:
        raise http_error(e)
    if not payment:
        raise HTTPException(status_code=404, detail="Booking not found")
    return PaymentReceipt(message="Payment is being processed", payment=payment)


@router.post("/webhooks/payments", response_model=Payment)
def payment_webhook(body: PaymentWebhookIn, x_webhook_secret: str | None = Header(default=None),
                    storage: Storage = Depends(get_storage)):
    if not settings.PAYMENT_WEBHOOK_SECRET:
        raise HTTPException(status_code=503, detail="Payment webhook not configured")
    if not x_webhook_secret or not hmac.compare_digest(x_webhook_secret, settings.PAYMENT_WEBHOOK_SECRET):
        raise HTTPException(status_code=401, detail="Invalid webhook secret")
    try:
        payment = storage.update_payment_status(body.payment_id, body.status, body.transaction_id)
    except ValueError as e:
        raise http_error(e)
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    logger.info("gateway callback: payment %s is %s", payment.id, payment.status.value)

    if payment.status == PaymentStatus.completed:
        booking = storage.get_booking(payment.booking_id)
        if booking and booking.status == BookingStatus.confirmed and booking.last_notification_sent is None:
            notify_booking_confirmed(storage, booking)
    return payment


@router.get("/payments", response_model=list[Payment], dependencies=[Depends(require_staff)])
def payments_by_status(status: PaymentStatus, storage: Storage = Depends(get_storage)):
    return storage.get_payments_by_status(status)


@router.post("/payments/{payment_id}/refund", response_model=PaymentReceipt, dependencies=[Depends(require_staff)])
def refund_payment(payment_id: int, body: RefundRequest, storage: Storage = Depends(get_storage)):
    try:
        payment = storage.refund_payment(payment_id, body.amount)
    except ValueError as e:
        raise http_error(e)
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    return PaymentReceipt(message="Refund processed", payment=payment)


@router.post("/bookings/{booking_id}/refund", response_model=BookingResponse, dependencies=[Depends(require_staff)])
def refund_booking(booking_id: int, body: RefundRequest, storage: Storage = Depends(get_storage)):
    try:
        booking = storage.process_refund(booking_id, body.amount)
    except ValueError as e:
        raise http_error(e)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return BookingResponse(message="Refund processed", booking=booking)
