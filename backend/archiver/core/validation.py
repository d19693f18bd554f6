"""
Field validation for users, categories and articles.

Every validator returns a list of ``FieldError``; an empty list means the
input is acceptable. Nothing here touches the database, uniqueness is left
to the table constraints.
"""

import re
from typing import Any, List, Optional, Union
from urllib.parse import urlparse

from email_validator import validate_email as check_email_address, EmailNotValidError

from archiver.schemas.article import ArticleCreate, ArticleUpdate
from archiver.schemas.category import CategoryCreate, CategoryUpdate
from archiver.schemas.user import UserCreate, UserUpdate, UserProfile, UserPreferences
from archiver.schemas.validation import FieldError

USERNAME_RE = re.compile(r"^[a-z0-9_-]+$")
SLUG_RE = re.compile(r"^[a-z0-9-]+$")
COLOR_RE = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 8
# bcrypt only reads the first 72 bytes
PASSWORD_MAX_BYTES = 72
CATEGORY_NAME_MAX_LENGTH = 100
CATEGORY_DESCRIPTION_MAX_LENGTH = 500
ARTICLE_TITLE_MAX_LENGTH = 500
ARTICLE_DESCRIPTION_MAX_LENGTH = 2000


def _error(field: str, message: str, value: Any = None) -> FieldError:
    return FieldError(field=field, message=message, value=value)


def _max_length(field: str, value: Optional[str], limit: int, label: str) -> List[FieldError]:
    if value is not None and len(value) > limit:
        return [_error(field, f"{label} cannot exceed {limit} characters", value)]
    return []


def _between(field: str, value: Optional[float], low: float, high: float, label: str) -> List[FieldError]:
    if value is not None and not (low <= value <= high):
        return [_error(field, f"{label} must be between {low} and {high}", value)]
    return []


def validate_username(username: Optional[str]) -> List[FieldError]:
    if not username:
        return [_error("username", "Username is required")]
    if len(username) < USERNAME_MIN_LENGTH:
        return [_error("username", f"Username must be at least {USERNAME_MIN_LENGTH} characters long", username)]
    if len(username) > USERNAME_MAX_LENGTH:
        return [_error("username", f"Username cannot exceed {USERNAME_MAX_LENGTH} characters", username)]
    if not USERNAME_RE.match(username):
        return [_error(
            "username",
            "Username can only contain lowercase letters, numbers, underscores, and hyphens",
            username,
        )]
    return []


def validate_email(email: Optional[str]) -> List[FieldError]:
    if not email:
        return [_error("email", "Email is required")]
    try:
        check_email_address(email, check_deliverability=False)
    except EmailNotValidError:
        return [_error("email", "Please provide a valid email address", email)]
    return []


def validate_password(password: Optional[str]) -> List[FieldError]:
    if not password:
        return [_error("password", "Password is required")]
    if len(password) < PASSWORD_MIN_LENGTH:
        # the value is never echoed back
        return [_error("password", f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")]
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        return [_error("password", f"Password cannot exceed {PASSWORD_MAX_BYTES} bytes")]
    return []


def validate_url(url: Optional[str], field: str = "url", required: bool = True) -> List[FieldError]:
    if not url:
        return [_error(field, "URL is required")] if required else []
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return [_error(field, "Please provide a valid URL", url)]
    return []


def validate_slug(slug: Optional[str]) -> List[FieldError]:
    if not slug:
        return [_error("slug", "Category slug is required")]
    if not SLUG_RE.match(slug):
        return [_error("slug", "Slug can only contain lowercase letters, numbers, and hyphens", slug)]
    return []


def validate_color(color: Optional[str]) -> List[FieldError]:
    if not color or not COLOR_RE.match(color):
        return [_error("color", "Color must be a valid hex color", color)]
    return []


def validate_profile(profile: UserProfile) -> List[FieldError]:
    errors = []
    errors += _max_length("profile.first_name", profile.first_name, 50, "First name")
    errors += _max_length("profile.last_name", profile.last_name, 50, "Last name")
    errors += _max_length("profile.bio", profile.bio, 500, "Bio")
    if profile.website:
        errors += validate_url(profile.website, field="profile.website")
    return errors


def validate_preferences(preferences: UserPreferences) -> List[FieldError]:
    return _between(
        "preferences.articles_per_page", preferences.articles_per_page, 5, 100, "Articles per page"
    )


def validate_user_create(user: UserCreate) -> List[FieldError]:
    errors = []
    errors += validate_username(user.username)
    errors += validate_email(user.email)
    errors += validate_password(user.password)
    errors += validate_profile(user.profile)
    errors += validate_preferences(user.preferences)
    return errors


def validate_user_update(user: UserUpdate) -> List[FieldError]:
    errors = []
    if user.username is not None:
        errors += validate_username(user.username)
    if user.email is not None:
        errors += validate_email(user.email)
    if user.password is not None:
        errors += validate_password(user.password)
    if user.profile is not None:
        errors += validate_profile(user.profile)
    if user.preferences is not None:
        errors += validate_preferences(user.preferences)
    return errors


def validate_category(category: Union[CategoryCreate, CategoryUpdate], partial: bool = False) -> List[FieldError]:
    """
    Validate a category payload. With ``partial`` only the fields that were
    explicitly set are checked.
    """
    fields = category.model_dump(exclude_unset=partial)
    errors = []

    if "name" in fields or not partial:
        name = fields.get("name")
        if not name or not name.strip():
            errors.append(_error("name", "Category name is required"))
        else:
            errors += _max_length("name", name, CATEGORY_NAME_MAX_LENGTH, "Category name")
    if fields.get("slug") is not None:
        errors += validate_slug(fields["slug"])
    if "color" in fields or not partial:
        errors += validate_color(fields.get("color"))
    errors += _max_length("description", fields.get("description"), CATEGORY_DESCRIPTION_MAX_LENGTH, "Description")
    return errors


def validate_article(article: Union[ArticleCreate, ArticleUpdate]) -> List[FieldError]:
    """
    Validate an article payload. Updates check only the fields that were
    explicitly set, with the same rules a new article gets for them.
    """
    errors = []
    creating = isinstance(article, ArticleCreate)
    fields_set = article.model_fields_set

    if creating:
        errors += validate_url(article.url)
        if not article.source.domain:
            errors.append(_error("source.domain", "Source domain is required"))
        if not article.source.site_name:
            errors.append(_error("source.site_name", "Source site name is required"))
        errors += _between("source.trust_score", article.source.trust_score, 0, 100, "Trust score")
    if creating or "title" in fields_set:
        if not article.title or not article.title.strip():
            errors.append(_error("title", "Article title is required"))
    if article.author_url:
        errors += validate_url(article.author_url, field="author_url")

    errors += _max_length("title", article.title, ARTICLE_TITLE_MAX_LENGTH, "Title")
    errors += _max_length("description", article.description, ARTICLE_DESCRIPTION_MAX_LENGTH, "Description")

    if article.classification is not None:
        classification = article.classification
        errors += _between("classification.sentiment.score", classification.sentiment.score, -1, 1, "Sentiment score")
        errors += _between("classification.quality", classification.quality, 0, 100, "Quality")
        for index, entity in enumerate(classification.entities):
            errors += _between(f"classification.entities.{index}.confidence", entity.confidence, 0, 1, "Confidence")
    return errors
