import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.core.config import settings
from app.core.db import as_utc, get_db
from app.core import mail, security
from app.modules.auth import schemas, models
from app.modules.auth.oauth import GoogleOAuthProvider, get_google_provider

logger = logging.getLogger(__name__)

router = APIRouter()

def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )

@router.post("/register", response_model=schemas.UserRead)
async def register_user(
    user_in: schemas.UserCreate,
    db: AsyncSession = Depends(get_db)
) -> Any:
    email = user_in.email.lower()
    result = await db.execute(select(models.User).where(models.User.email == email))
    if result.scalars().first():
        raise HTTPException(
            status_code=400,
            detail="The user with this email already exists in the system",
        )

    user = models.User(
        email=email,
        hashed_password=security.get_password_hash(user_in.password),
        name=user_in.name,
        role=user_in.role
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info(f"Registered user {user.id} as {user.role.value}")
    return user

@router.post("/login", response_model=schemas.Token)
async def login_access_token(
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db)
) -> Any:
    result = await db.execute(select(models.User).where(models.User.email == form_data.username.lower()))
    user = result.scalars().first()

    if not user or not security.verify_password(form_data.password, user.hashed_password):
        raise HTTPException(status_code=400, detail="Incorrect email or password")

    if user.status != models.UserStatus.ACTIVE:
        raise HTTPException(status_code=400, detail="Account suspended")

    access_token = security.create_access_token(subject=user.id, role=user.role.value)
    set_session_cookie(response, access_token)
    return {"access_token": access_token, "token_type": "bearer"}

@router.post("/logout")
async def logout(response: Response) -> Any:
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"success": True}

@router.get("/oauth/google/authorize", response_model=schemas.OAuthAuthorizeResponse)
async def google_authorize(
    provider: GoogleOAuthProvider = Depends(get_google_provider)
) -> Any:
    state = security.create_state_token("anonymous", purpose="oauth.google")
    return {"url": provider.get_authorization_url(state)}

@router.post("/oauth/google/callback", response_model=schemas.OAuthLoginResponse)
async def google_callback(
    payload: schemas.OAuthCallback,
    response: Response,
    provider: GoogleOAuthProvider = Depends(get_google_provider),
    db: AsyncSession = Depends(get_db)
) -> Any:
    if security.verify_state_token(payload.state, purpose="oauth.google") is None:
        raise HTTPException(status_code=400, detail="Invalid state parameter")

    provider_token = await provider.exchange_code_for_token(payload.code)
    profile = await provider.get_user_info(provider_token)

    result = await db.execute(select(models.User).where(models.User.email == profile["email"]))
    user = result.scalars().first()
    created = user is None

    if created:
        user = models.User(
            email=profile["email"],
            name=profile["name"],
            image=profile["image"],
            role=models.UserRole.SUBSCRIBER,
            email_verified_at=datetime.now(timezone.utc) if profile["email_verified"] else None,
        )
        db.add(user)
    else:
        if user.status != models.UserStatus.ACTIVE:
            raise HTTPException(status_code=400, detail="Account suspended")
        if not user.image and profile["image"]:
            user.image = profile["image"]
        if not user.email_verified_at and profile["email_verified"]:
            user.email_verified_at = datetime.now(timezone.utc)

    await db.commit()
    await db.refresh(user)

    access_token = security.create_access_token(subject=user.id, role=user.role.value)
    set_session_cookie(response, access_token)
    return {"access_token": access_token, "token_type": "bearer", "user": user, "created": created}

@router.post("/verify-email", response_model=schemas.VerifyEmailResponse, response_model_exclude_none=True)
async def request_email_verification(
    payload: schemas.VerifyEmailRequest,
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    Issues a single-use verification link valid for
    EMAIL_VERIFICATION_EXPIRE_HOURS and e-mails it to the address.
    """
    email = payload.email.lower()
    result = await db.execute(select(models.User).where(models.User.email == email))
    user = result.scalars().first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if user.email_verified_at:
        return {"message": "Email already verified", "verified": True}

    if not mail.mail_configured() and not settings.is_development:
        raise mail.MailError("E-mail delivery is not configured", status_code=503)

    token = secrets.token_hex(32)
    db.add(models.VerificationToken(
        identifier=email,
        token=token,
        expires_at=datetime.now(timezone.utc) + timedelta(hours=settings.EMAIL_VERIFICATION_EXPIRE_HOURS),
    ))
    await db.commit()

    verification_url = f"{settings.FRONTEND_URL}/auth/verify?{urlencode({'token': token, 'email': email})}"
    if mail.mail_configured():
        await mail.send_verification_email(email, user.name or "User", verification_url)
        return {"message": "Verification email sent"}

    logger.info(f"E-mail delivery not configured; verification link for {email}: {verification_url}")
    return {"message": "Verification email sent", "verification_url": verification_url}

@router.get("/verify-email", response_model=schemas.VerifyEmailResponse, response_model_exclude_none=True)
async def confirm_email_verification(
    token: Optional[str] = Query(None),
    email: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db)
) -> Any:
    if not token or not email:
        raise HTTPException(status_code=400, detail="Token and email required")

    email = email.lower()
    result = await db.execute(
        select(models.VerificationToken).where(
            models.VerificationToken.identifier == email,
            models.VerificationToken.token == token,
        )
    )
    verification = result.scalars().first()
    if not verification:
        raise HTTPException(status_code=400, detail="Invalid or expired token")

    if as_utc(verification.expires_at) < datetime.now(timezone.utc):
        await db.delete(verification)
        await db.commit()
        raise HTTPException(status_code=400, detail="Token expired. Please request a new one.")

    result = await db.execute(select(models.User).where(models.User.email == email))
    user = result.scalars().first()
    if not user:
        raise HTTPException(status_code=400, detail="Invalid or expired token")

    user.email_verified_at = datetime.now(timezone.utc)
    await db.delete(verification)
    await db.commit()
    logger.info(f"Verified e-mail for user {user.id}")
    return {"message": "Email verified successfully", "verified": True}
