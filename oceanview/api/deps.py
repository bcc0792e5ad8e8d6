from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from oceanview.core.security import user_id_from_token
from oceanview.schemas.booking import Booking
from oceanview.schemas.user import User
from oceanview.storage.base import Storage
from oceanview.storage.errors import InvalidTransitionError

bearer = HTTPBearer(auto_error=False)


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def _user_from_token(token: str, storage: Storage) -> User:
    try:
        user_id = user_id_from_token(token)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    user = storage.get_user(user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user


def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    storage: Storage = Depends(get_storage),
) -> User:
    if not creds:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return _user_from_token(creds.credentials, storage)


def get_optional_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    storage: Storage = Depends(get_storage),
) -> User | None:
    """Anonymous callers get None; a token that is sent must still be valid."""
    if not creds:
        return None
    return _user_from_token(creds.credentials, storage)


def require_staff(user: User = Depends(get_current_user)) -> User:
    if not user.is_staff:
        raise HTTPException(status_code=403, detail="Forbidden")
    return user


def get_owned_booking(
    booking_id: int,
    me: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Booking:
    booking = storage.get_booking(booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    if booking.user_id != me.id and not me.is_staff:
        raise HTTPException(status_code=403, detail="Not authorized to access this booking")
    return booking


def http_error(exc: ValueError) -> HTTPException:
    """Translate a storage rule violation into the matching HTTP error."""
    if isinstance(exc, InvalidTransitionError):
        return HTTPException(status_code=409, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))
