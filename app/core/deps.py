import uuid

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.db import get_db
from app.core import security
from app.modules.auth.models import User, UserRole, UserStatus

# auto_error=False so the token can also come from the cookie or query string
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False)

def _resolve_token(request: Request, token_query: str | None, token_header: str | None) -> str | None:
    return token_header or request.cookies.get(settings.SESSION_COOKIE_NAME) or token_query

async def _load_user(db: AsyncSession, token: str | None) -> User | None:
    if not token:
        return None
    payload = security.decode_access_token(token)
    if not payload or payload.get("sub") is None:
        return None
    try:
        user_id = uuid.UUID(payload["sub"])
    except ValueError:
        return None
    return await db.get(User, user_id)

async def get_current_user(
    request: Request,
    token_query: str | None = Query(None, alias="token"),
    token_header: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db)
) -> User:
    user = await _load_user(db, _resolve_token(request, token_query, token_header))
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user

async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    if current_user.status != UserStatus.ACTIVE:
        raise HTTPException(status_code=403, detail="Account suspended")
    return current_user

async def get_current_user_optional(
    request: Request,
    token_query: str | None = Query(None, alias="token"),
    token_header: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db)
) -> User | None:
    return await _load_user(db, _resolve_token(request, token_query, token_header))

async def get_current_admin(
    current_user: User = Depends(get_current_active_user)
) -> User:
    if current_user.role != UserRole.ADMIN:
        raise HTTPException(status_code=403, detail="Forbidden - Admin access required")
    return current_user
