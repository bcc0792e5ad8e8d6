from fastapi import APIRouter, Depends, HTTPException

from oceanview.api.deps import get_current_user, get_storage, http_error
from oceanview.core.security import hash_password, verify_password
from oceanview.schemas.auth import ChangePasswordRequest
from oceanview.schemas.booking import Booking
from oceanview.schemas.common import Message
from oceanview.schemas.user import User, UserOut, UserUpdate
from oceanview.storage.base import Storage

router = APIRouter(prefix="/profile", tags=["profile"])


@router.patch("", response_model=UserOut)
def update_profile(body: UserUpdate, me: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    try:
        user = storage.update_user(me.id, body)
    except ValueError as e:
        raise http_error(e)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return UserOut.model_validate(user.model_dump())


@router.post("/change-password", response_model=Message)
def change_password(body: ChangePasswordRequest, me: User = Depends(get_current_user),
                    storage: Storage = Depends(get_storage)):
    if not verify_password(body.current_password, me.password_hash):
        raise HTTPException(status_code=400, detail="Current password is incorrect")
    if not storage.update_user_password(me.id, hash_password(body.new_password)):
        raise HTTPException(status_code=404, detail="User not found")
    return Message(message="Password changed successfully")


@router.get("/bookings/upcoming", response_model=list[Booking])
def upcoming_bookings(me: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    return storage.get_upcoming_bookings(me.id)


@router.get("/bookings/past", response_model=list[Booking])
def past_bookings(me: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    return storage.get_past_bookings(me.id)
