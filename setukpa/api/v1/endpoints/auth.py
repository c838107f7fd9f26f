# setukpa/api/v1/endpoints/auth.py
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from setukpa.core.config import settings
from setukpa.core.security import authenticate_user, create_access_token
from setukpa.db.session import get_db
from setukpa.models.user import User
from setukpa.schemas.auth import LoginRequest, RegisterRequest, Token, UserPublic
from setukpa.services import user_service

router = APIRouter()


def _login_or_401(db: Session, login: str, password: str) -> Token:
    user = authenticate_user(db, login, password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Email/nosis atau kata sandi salah",
            headers={"WWW-Authenticate": "Bearer"},
        )

    expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(data={"sub": user.email}, expires_delta=expires)
    return Token(
        access_token=access_token,
        expires_in=int(expires.total_seconds()),
        role=user.role,
    )


@router.post("/register", response_model=UserPublic)
def register_student(payload: RegisterRequest, db: Session = Depends(get_db)):
    """
    Student self registration. Staff accounts are created by admins
    through POST /users.
    """
    if db.query(User).filter(User.email == payload.email).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email sudah terdaftar",
        )
    return user_service.register_student(db, obj_in=payload)


@router.post("/login", response_model=Token)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    return _login_or_401(db, payload.email, payload.password)


@router.post("/token", response_model=Token)
def login_form(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    """OAuth2 password flow for the docs UI; `username` takes the email or the nosis."""
    return _login_or_401(db, form_data.username, form_data.password)
