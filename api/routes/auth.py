from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from shared.db import get_db
from shared.models import User
from shared.sanitizer import sanitize_email
from shared.security import create_session_token, hash_password, verify_password

from ..dependencies import get_current_user
from ..schemas.auth import LoginRequest, LoginResponse, UserResponse

router = APIRouter(prefix="/auth", tags=["auth"])


def _find_user(session: Session, email: str) -> User | None:
    return session.scalars(select(User).where(User.email == email)).one_or_none()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register_user(payload: LoginRequest, session: Session = Depends(get_db)) -> UserResponse:
    email = sanitize_email(payload.email)
    if not email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email")
    if _find_user(session, email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists")
    user = User(id=uuid.uuid4(), email=email, password_hash=hash_password(payload.password))
    session.add(user)
    session.commit()
    session.refresh(user)
    return UserResponse(id=str(user.id), email=user.email)


@router.post("/login", response_model=LoginResponse)
def login_user(payload: LoginRequest, session: Session = Depends(get_db)) -> LoginResponse:
    user = _find_user(session, sanitize_email(payload.email))
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    token = create_session_token(session, user)
    return LoginResponse(access_token=token.token)


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse(id=str(current_user.id), email=current_user.email)
