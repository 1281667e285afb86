"""Authentication endpoints."""

import logging
from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, get_clock
from app.core.database import get_db
from app.core.deps import get_current_user
from app.models.user import User
from app.schemas.auth import UserRegister, UserLogin, Token, UserOut
from app.services.auth import authenticate_user, create_token_for, create_user
from app.services.referrals import record_signup

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/register", response_model=Token, status_code=201)
async def register(
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Register a new customer account and log them in. A referral code links them to a referrer."""
    user = await create_user(
        db,
        email=user_data.email,
        password=user_data.password,
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        phone=user_data.phone,
    )
    await record_signup(db, user, user_data.referral_code, clock)
    return Token(access_token=create_token_for(user), user=UserOut.model_validate(user))


@router.post("/login", response_model=Token)
async def login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    user = await authenticate_user(db, credentials.email, credentials.password)
    if not user:
        logger.warning("Failed login attempt for %s", credentials.email)
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not user.is_active or user.status == "archived":
        raise HTTPException(status_code=403, detail="User account is disabled")

    user.last_login_at = clock.now()
    await db.commit()
    await db.refresh(user)

    logger.info("User %s logged in", user.email)
    return Token(access_token=create_token_for(user), user=UserOut.model_validate(user))


@router.get("/me", response_model=UserOut)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get the currently authenticated user's info."""
    return current_user
