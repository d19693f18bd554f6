import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from jose import JWTError
from sqlalchemy.orm import Session

from archiver.api.deps import get_db, get_current_active_user
from archiver.core.config import settings
from archiver.core.security import create_access_token, create_refresh_token, decode_refresh_token
from archiver.crud.user import (
    add_token, create_user, find_by_credentials, find_valid_token, get_user,
    remove_token, update_last_login
)
from archiver.models.user import User, TokenType, UserRole
from archiver.schemas.token import AuthResponse, LoginRequest, RefreshRequest, Token
from archiver.schemas.user import UserCreate

logger = logging.getLogger(__name__)

router = APIRouter()


def _issue_tokens(db: Session, user: User) -> dict:
    access_token = create_access_token(user)
    refresh_token = create_refresh_token(user)
    add_token(db, user, refresh_token, TokenType.REFRESH, settings.REFRESH_TOKEN_EXPIRE)
    return {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "token_type": "bearer",
        "user": user,
    }


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    *,
    db: Session = Depends(get_db),
    user_in: UserCreate,
) -> Any:
    """
    Register a new account. Self-registration always gets the ``user`` role.
    """
    user_in = user_in.model_copy(update={"role": UserRole.USER, "is_verified": False})
    user = create_user(db, user_in)
    return _issue_tokens(db, user)


@router.post("/login", response_model=AuthResponse)
def login(
    *,
    db: Session = Depends(get_db),
    credentials: LoginRequest,
) -> Any:
    """
    Log in with a username or email and a password.
    """
    user = find_by_credentials(db, credentials.identifier, credentials.password)
    if user is None:
        logger.info("Rejected login attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username/email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    update_last_login(db, user)
    return _issue_tokens(db, user)


@router.post("/refresh", response_model=Token)
def refresh(
    *,
    db: Session = Depends(get_db),
    token_in: RefreshRequest,
) -> Any:
    """
    Exchange a stored refresh token for a new access token.
    """
    invalid = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid refresh token",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_refresh_token(token_in.refresh_token)
    except JWTError:
        raise invalid

    if payload.get("type") != "refresh" or not str(payload.get("sub", "")).isdigit():
        raise invalid

    user = get_user(db, user_id=int(payload["sub"]))
    if user is None or not user.is_active:
        raise invalid
    if find_valid_token(db, user, token_in.refresh_token, TokenType.REFRESH) is None:
        raise invalid

    return {
        "access_token": create_access_token(user),
        "refresh_token": token_in.refresh_token,
        "token_type": "bearer",
    }


@router.post("/logout", response_model=bool)
def logout(
    *,
    db: Session = Depends(get_db),
    token_in: RefreshRequest,
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Forget the stored refresh token. The bearer token is discarded by the client.
    """
    remove_token(db, current_user, token_in.refresh_token)
    return True
