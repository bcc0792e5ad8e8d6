import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException
from jose import JWTError

from oceanview.api.deps import get_current_user, get_storage, http_error
from oceanview.core.config import settings
from oceanview.core.security import REFRESH, hash_password, issue_token_pair, user_id_from_token, verify_password
from oceanview.schemas.auth import (
    AuthSession, LoginRequest, PasswordReset, PasswordResetIssued, PasswordResetRequest, RefreshRequest,
    RegisterRequest, TokenPair,
)
from oceanview.schemas.common import Message
from oceanview.schemas.user import User, UserCreate, UserOut
from oceanview.services.notification_service import notify_password_reset
from oceanview.storage.base import Storage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def _session(user: User) -> AuthSession:
    return AuthSession(**issue_token_pair(user.id).model_dump(), user=UserOut.model_validate(user.model_dump()))


@router.post("/auth/register", response_model=AuthSession, status_code=201)
def register(body: RegisterRequest, storage: Storage = Depends(get_storage)):
    if storage.get_user_by_username(body.username):
        raise HTTPException(status_code=400, detail="Username already exists")
    if storage.get_user_by_email(body.email):
        raise HTTPException(status_code=400, detail="Email already exists")
    try:
        user = storage.create_user(UserCreate(
            **body.model_dump(exclude={"password", "confirm_password"}),
            password_hash=hash_password(body.password),
        ))
    except ValueError as e:
        raise http_error(e)
    user = storage.update_user_last_login(user.id) or user
    return _session(user)


@router.post("/auth/login", response_model=AuthSession)
def login(body: LoginRequest, storage: Storage = Depends(get_storage)):
    user = storage.get_user_by_username(body.username)
    if not user or not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    user = storage.update_user_last_login(user.id) or user
    return _session(user)


@router.post("/auth/refresh", response_model=TokenPair)
def refresh(body: RefreshRequest, storage: Storage = Depends(get_storage)):
    try:
        user_id = user_id_from_token(body.refresh_token, REFRESH)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    user = storage.get_user(user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return issue_token_pair(user.id)


@router.post("/auth/logout", response_model=Message)
def logout():
    # Tokens are stateless; the client drops them.
    return Message(message="Logged out successfully")


@router.get("/auth/user", response_model=UserOut)
def current_user(me: User = Depends(get_current_user)):
    return UserOut.model_validate(me.model_dump())


@router.post("/auth/reset-request", response_model=PasswordResetIssued)
def request_password_reset(body: PasswordResetRequest, storage: Storage = Depends(get_storage)):
    ttl = timedelta(minutes=settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES)
    token = storage.create_password_reset_token(body.email, ttl)
    if not token:
        raise HTTPException(status_code=404, detail="Email not found")
    base = (settings.CLIENT_BASE_URL or "").rstrip("/")
    reset_link = f"{base}/reset-password?token={token}"
    notify_password_reset(body.email, reset_link)
    if not settings.expose_reset_token:
        return PasswordResetIssued(message="Password reset e-mail sent")
    return PasswordResetIssued(message="Password reset token generated", token=token, reset_link=reset_link)


@router.post("/auth/reset-password", response_model=Message)
def reset_password(body: PasswordReset, storage: Storage = Depends(get_storage)):
    if not storage.reset_password(body.token, hash_password(body.password)):
        raise HTTPException(status_code=400, detail="Invalid or expired token")
    return Message(message="Password reset successfully")
