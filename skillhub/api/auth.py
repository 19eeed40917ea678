import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from skillhub import models
from skillhub.database import get_db
from skillhub.models.user import UserRole
from skillhub.schemas import LoginRequest, RegisterRequest, Token, UserOut
from skillhub.utils.security import (
    authenticate_user,
    create_access_token,
    get_current_user,
    get_password_hash,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


# ===== REGISTER ENDPOINT =====

@router.post("/register", response_model=UserOut, status_code=201)
def register(user_data: RegisterRequest, db: Session = Depends(get_db)):
    """Register a regular user account."""
    normalized_email = user_data.email.strip().lower()
    existing = db.query(models.User).filter(models.User.email == normalized_email).first()
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")

    user = models.User(
        first_name=user_data.first_name.strip(),
        last_name=(user_data.last_name or "").strip(),
        email=normalized_email,
        password_hash=get_password_hash(user_data.password),
        avatar=user_data.avatar,
        role=UserRole.USER,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


# ===== LOGIN ENDPOINT =====

@router.post("/login", response_model=Token)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Verify credentials and return access token"""
    user = authenticate_user(db, credentials.email, credentials.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    access_token = create_access_token(data={"sub": user.email, "role": user.role})
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "role": user.role,
    }


@router.get("/me", response_model=UserOut)
def read_me(current_user: models.User = Depends(get_current_user)):
    return current_user
