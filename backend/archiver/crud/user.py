import datetime
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from archiver.core.exceptions import RecordValidationError
from archiver.core.security import (
    create_access_token, get_dummy_hash, get_password_hash, parse_duration, verify_password
)
from archiver.core.validation import validate_user_create, validate_user_update
from archiver.models.user import User, UserToken, TokenType
from archiver.schemas.user import UserCreate, UserUpdate, UserAdminUpdate

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.strip().lower()).first()


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username.strip().lower()).first()


def get_users(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    active_only: bool = True
) -> List[User]:
    query = db.query(User)

    if active_only:
        query = query.filter(User.is_active == True)  # noqa: E712

    return query.order_by(User.id).offset(skip).limit(limit).all()


def get_active_users(db: Session) -> List[User]:
    return (
        db.query(User)
        .filter(User.is_active == True, User.is_verified == True)  # noqa: E712
        .order_by(User.last_login.desc())
        .all()
    )


def create_user(db: Session, user: UserCreate) -> User:
    user = user.model_copy(update={
        "username": user.username.strip().lower(),
        "email": user.email.strip().lower(),
    })
    errors = validate_user_create(user)
    if errors:
        raise RecordValidationError(errors)

    db_user = User(
        username=user.username,
        email=user.email,
        hashed_password=get_password_hash(user.password),
        role=user.role,
        profile=user.profile.model_dump(),
        preferences=user.preferences.model_dump(),
        is_verified=user.is_verified,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info(f"Created user '{db_user.username}' ({db_user.id})")
    return db_user


def update_user(db: Session, user_id: int, user: UserUpdate) -> Optional[User]:
    """
    Apply a partial update. A new password is hashed before it is stored.
    """
    db_user = get_user(db, user_id)
    if not db_user:
        return None

    update_data = user.model_dump(exclude_unset=True, exclude_none=True)
    if "username" in update_data:
        update_data["username"] = update_data["username"].strip().lower()
    if "email" in update_data:
        update_data["email"] = update_data["email"].strip().lower()

    errors = validate_user_update(UserAdminUpdate(**update_data))
    if errors:
        raise RecordValidationError(errors)

    password = update_data.pop("password", None)
    if password:
        update_data["hashed_password"] = get_password_hash(password)

    for key, value in update_data.items():
        setattr(db_user, key, value)

    db.commit()
    db.refresh(db_user)
    return db_user


def deactivate_user(db: Session, user_id: int) -> bool:
    db_user = get_user(db, user_id)
    if not db_user:
        return False

    db_user.is_active = False
    db.commit()
    logger.info(f"Deactivated user {user_id}")
    return True


def find_by_credentials(db: Session, identifier: str, password: str) -> Optional[User]:
    """
    Look up an active user by username or email and check the password.

    Unknown identifiers and wrong passwords both return None, and both paths
    run one hash comparison.
    """
    identifier = (identifier or "").strip().lower()
    db_user = (
        db.query(User)
        .filter(
            or_(User.email == identifier, User.username == identifier),
            User.is_active == True,  # noqa: E712
        )
        .first()
    )

    if db_user is None:
        verify_password(password, get_dummy_hash())
        return None

    if not verify_password(password, db_user.hashed_password):
        return None

    return db_user


def update_last_login(db: Session, user: User) -> User:
    user.last_login = datetime.datetime.utcnow()
    db.commit()
    db.refresh(user)
    return user


def increment_article_count(db: Session, user: User) -> User:
    user.articles_added = (user.articles_added or 0) + 1
    db.commit()
    db.refresh(user)
    return user


def add_token(
    db: Session,
    user: User,
    token: str,
    token_type: TokenType,
    expires_in: str = "30d",
) -> User:
    """
    Store an auxiliary token, replacing any earlier token of the same type.
    """
    expires = datetime.datetime.utcnow() + parse_duration(expires_in)

    existing = db.query(UserToken).filter(
        UserToken.user_id == user.id,
        UserToken.type == token_type,
    ).all()
    for db_token in existing:
        db.delete(db_token)
    # the unique (user_id, type) constraint needs the delete applied first
    db.flush()

    db.add(UserToken(user_id=user.id, token=token, type=token_type, expires=expires))
    db.commit()
    db.refresh(user)
    return user


def remove_token(db: Session, user: User, token: str) -> User:
    existing = db.query(UserToken).filter(
        UserToken.user_id == user.id,
        UserToken.token == token,
    ).all()
    for db_token in existing:
        db.delete(db_token)
    db.commit()
    db.refresh(user)
    return user


def find_valid_token(db: Session, user: User, token: str, token_type: TokenType) -> Optional[UserToken]:
    return (
        db.query(UserToken)
        .filter(
            UserToken.user_id == user.id,
            UserToken.token == token,
            UserToken.type == token_type,
            UserToken.expires > datetime.datetime.utcnow(),
        )
        .first()
    )


def to_auth_json(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "full_name": user.full_name,
        "initials": user.initials,
        "role": user.role,
        "profile": user.profile or {},
        "preferences": user.preferences or {},
        "is_verified": user.is_verified,
        "token": create_access_token(user),
    }
