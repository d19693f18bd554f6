from datetime import datetime
from typing import Optional, List, Literal
from pydantic import BaseModel, EmailStr

from archiver.models.user import UserRole


class UserProfile(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None
    bio: Optional[str] = None
    website: Optional[str] = None
    timezone: str = "UTC"
    language: str = "en"


class NotificationPreferences(BaseModel):
    email: bool = True
    push: bool = False
    digest: Literal["daily", "weekly", "monthly"] = "weekly"


class PrivacyPreferences(BaseModel):
    profile_public: bool = False
    articles_public: bool = True


class UserPreferences(BaseModel):
    theme: Literal["light", "dark", "auto"] = "auto"
    default_view: Literal["list", "timeline", "grid"] = "list"
    articles_per_page: int = 20
    notifications: NotificationPreferences = NotificationPreferences()
    privacy: PrivacyPreferences = PrivacyPreferences()


class UserBase(BaseModel):
    email: str
    username: str


class UserCreate(UserBase):
    password: str
    role: UserRole = UserRole.USER
    profile: UserProfile = UserProfile()
    preferences: UserPreferences = UserPreferences()
    is_verified: bool = False


class UserUpdate(BaseModel):
    email: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    profile: Optional[UserProfile] = None
    preferences: Optional[UserPreferences] = None


class UserAdminUpdate(UserUpdate):
    role: Optional[UserRole] = None
    permissions: Optional[List[str]] = None
    is_active: Optional[bool] = None
    is_verified: Optional[bool] = None


class User(BaseModel):
    id: int
    email: EmailStr
    username: str
    full_name: str
    initials: str
    role: UserRole
    permissions: List[str] = []
    profile: UserProfile = UserProfile()
    preferences: UserPreferences = UserPreferences()
    articles_added: int = 0
    last_login: Optional[datetime] = None
    total_views: int = 0
    is_active: bool
    is_verified: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UserAuth(BaseModel):
    """Public view of a user together with a freshly issued bearer token."""
    id: int
    username: str
    email: EmailStr
    full_name: str
    initials: str
    role: UserRole
    profile: UserProfile
    preferences: UserPreferences
    is_verified: bool
    token: str
