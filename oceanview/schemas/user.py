from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from oceanview.schemas.common import ApiModel, Entity
from oceanview.schemas.enums import UserRole


class UserProfile(ApiModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


class UserCreate(UserProfile):
    username: str = Field(min_length=1)
    email: EmailStr
    password_hash: str
    role: UserRole = UserRole.customer


class UserUpdate(UserProfile):
    """Partial profile edit. Only fields explicitly sent are applied."""
    email: Optional[EmailStr] = None


class User(Entity):
    id: int
    username: str
    email: str
    password_hash: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    role: UserRole = UserRole.customer
    created_at: datetime
    updated_at: datetime
    last_login: Optional[datetime] = None
    is_verified: bool = False
    reset_token: Optional[str] = None
    reset_token_expiry: Optional[datetime] = None

    @property
    def is_staff(self) -> bool:
        return self.role in (UserRole.staff, UserRole.admin)


class UserOut(ApiModel):
    """What the API may show about a user: never the hash or reset token."""
    id: int
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    role: UserRole
    created_at: datetime
    updated_at: datetime
    last_login: Optional[datetime] = None
    is_verified: bool = False
