from fastapi import APIRouter, Depends, HTTPException

from oceanview.api.deps import get_current_user, get_owned_booking, get_storage, http_error
from oceanview.schemas.booking import Booking, BookingCancel, BookingCreate, BookingDetails, BookingResponse, BookingStatusUpdate
from oceanview.schemas.enums import BookingStatus
from oceanview.schemas.user import User
from oceanview.storage.base import Storage

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("", response_model=list[Booking])
def list_bookings(me: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    return storage.get_bookings(me.id)


@router.get("/reference/{reference}", response_model=Booking)
def get_booking_by_reference(reference: str, me: User = Depends(get_current_user),
                             storage: Storage = Depends(get_storage)):
    booking = storage.get_booking_by_reference(reference)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    if booking.user_id != me.id and not me.is_staff:
        raise HTTPException(status_code=403, detail="Not authorized to access this booking")
    return booking


@router.get("/{booking_id}", response_model=Booking)
def get_booking(booking: Booking = Depends(get_owned_booking)):
    return booking


@router.post("", response_model=BookingResponse, status_code=201)
def create_booking(body: BookingDetails, me: User = Depends(get_current_user),
                   storage: Storage = Depends(get_storage)):
    if not storage.get_cruise(body.cruise_id):
        raise HTTPException(status_code=404, detail="Cruise not found")
    if body.cabin_type_id is not None:
        cabin = storage.get_cabin_type(body.cabin_type_id)
        if not cabin or cabin.cruise_id != body.cruise_id:
            raise HTTPException(status_code=400, detail="Cabin type does not belong to this cruise")
    try:
        booking = storage.create_booking(BookingCreate(**body.model_dump(), user_id=me.id))
    except ValueError as e:
        raise http_error(e)
    return BookingResponse(message="Booking created successfully", booking=booking)


@router.patch("/{booking_id}/status", response_model=BookingResponse)
def update_status(body: BookingStatusUpdate, booking: Booking = Depends(get_owned_booking),
                  me: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    # Confirmation and later stages come from payments or staff
    if not me.is_staff and body.status != BookingStatus.cancelled:
        raise HTTPException(status_code=403, detail="Only staff can set this status")
    try:
        updated = storage.update_booking_status(booking.id, body.status, body.reason)
    except ValueError as e:
        raise http_error(e)
    if not updated:
        raise HTTPException(status_code=404, detail="Booking not found")
    return BookingResponse(message="Booking status updated", booking=updated)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(body: BookingCancel, booking: Booking = Depends(get_owned_booking),
                   storage: Storage = Depends(get_storage)):
    try:
        updated = storage.cancel_booking(booking.id, body.reason, body.cancellation_reason)
    except ValueError as e:
        raise http_error(e)
    if not updated:
        raise HTTPException(status_code=404, detail="Booking not found")
    return BookingResponse(message="Booking cancelled", booking=updated)


@router.post("/{booking_id}/check-in", response_model=BookingResponse)
def check_in(booking: Booking = Depends(get_owned_booking), storage: Storage = Depends(get_storage)):
    try:
        updated = storage.check_in_passengers(booking.id)
    except ValueError as e:
        raise http_error(e)
    if not updated:
        raise HTTPException(status_code=404, detail="Booking not found")
    return BookingResponse(message="Passengers checked in", booking=updated)
