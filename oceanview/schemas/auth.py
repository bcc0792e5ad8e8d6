from typing import Optional

from pydantic import EmailStr, Field, model_validator

from oceanview.schemas.common import ApiModel
from oceanview.schemas.user import UserOut, UserProfile

MIN_PASSWORD_LENGTH = 8


class LoginRequest(ApiModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class TokenPair(ApiModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshRequest(ApiModel):
    refresh_token: str


class RegisterRequest(UserProfile):
    username: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self


class PasswordResetRequest(ApiModel):
    email: EmailStr


class PasswordResetIssued(ApiModel):
    message: str
    token: Optional[str] = None
    reset_link: Optional[str] = None


class PasswordReset(ApiModel):
    token: str = Field(min_length=1)
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self


class ChangePasswordRequest(ApiModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=MIN_PASSWORD_LENGTH)


class AuthSession(TokenPair):
    user: UserOut
