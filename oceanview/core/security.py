from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from oceanview.core.config import settings
from oceanview.schemas.auth import TokenPair

# PBKDF2 avoids bcrypt backend/version issues and the 72-byte bcrypt input limit.
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
ALGO = "HS256"

ACCESS = "access"
REFRESH = "refresh"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def _encode(user_id: int, kind: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    claims = {"sub": str(user_id), "type": kind, "iat": now, "exp": now + lifetime}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=ALGO)


def create_access_token(user_id: int) -> str:
    return _encode(user_id, ACCESS, timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))


def create_refresh_token(user_id: int) -> str:
    return _encode(user_id, REFRESH, timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS))


def issue_token_pair(user_id: int) -> TokenPair:
    return TokenPair(access_token=create_access_token(user_id), refresh_token=create_refresh_token(user_id))


def user_id_from_token(token: str, kind: str = ACCESS) -> int:
    """Return the user id a token was issued for.

    Raises JWTError for a bad signature, an expired token, a token of the
    other kind or a token without a numeric subject.
    """
    claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGO])
    if claims.get("type") != kind:
        raise JWTError(f"expected a {kind} token")
    try:
        return int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        raise JWTError("token has no user")
