from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    # OAuth-only accounts have no password
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)

def create_access_token(subject: Any, role: Optional[str] = None, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {"exp": expire, "sub": str(subject)}
    if role:
        to_encode["role"] = role
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def decode_access_token(token: str) -> Optional[dict]:
    """
    Returns the token payload, or None if the signature or expiry is invalid.
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

def create_state_token(subject: Any, purpose: str, minutes: int = 10) -> str:
    """Short-lived signed value for OAuth `state` round trips."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    return jwt.encode({"exp": expire, "sub": str(subject), "scope": purpose}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def verify_state_token(token: str, purpose: str) -> Optional[str]:
    payload = decode_access_token(token)
    if not payload or payload.get("scope") != purpose:
        return None
    return payload.get("sub")
