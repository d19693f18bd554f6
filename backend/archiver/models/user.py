import datetime
from enum import Enum
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, JSON, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship

from archiver.db.base_class import Base


class UserRole(str, Enum):
    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"


class TokenType(str, Enum):
    REFRESH = "refresh"
    RESET = "reset"
    VERIFICATION = "verification"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(30), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.USER, index=True)
    permissions = Column(JSON, nullable=False, default=list)
    profile = Column(JSON, nullable=False, default=dict)
    preferences = Column(JSON, nullable=False, default=dict)

    # Stats
    articles_added = Column(Integer, nullable=False, default=0)
    last_login = Column(DateTime, nullable=True)
    total_views = Column(Integer, nullable=False, default=0)

    is_active = Column(Boolean, default=True, index=True)  # soft delete flag
    is_verified = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    # Relationships
    tokens = relationship("UserToken", back_populates="user", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        profile = self.profile or {}
        name = f"{profile.get('first_name') or ''} {profile.get('last_name') or ''}".strip()
        return name or self.username

    @property
    def initials(self) -> str:
        profile = self.profile or {}
        first_name = profile.get("first_name")
        last_name = profile.get("last_name")
        if first_name and last_name:
            return f"{first_name[0]}{last_name[0]}".upper()
        return self.username[:1].upper()


class UserToken(Base):
    __tablename__ = "user_tokens"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    token = Column(String(1024), nullable=False)
    type = Column(SQLEnum(TokenType), nullable=False)
    expires = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="tokens")

    __table_args__ = (
        # At most one token of each type per user
        UniqueConstraint('user_id', 'type', name='uix_user_token_type'),
    )
