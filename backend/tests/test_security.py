from datetime import timedelta
from types import SimpleNamespace

import pytest
from jose import JWTError
from pydantic import ValidationError
from jose.exceptions import ExpiredSignatureError

from archiver.core.security import (
    create_access_token, create_refresh_token, decode_access_token, decode_refresh_token,
    get_password_hash, parse_duration, verify_password
)
from archiver.core.config import Settings
from archiver.models.user import UserRole


@pytest.fixture
def user():
    return SimpleNamespace(id=7, username="alice", email="alice@archive.io", role=UserRole.MODERATOR)


class TestPasswords:
    @pytest.mark.parametrize("password", ["password123", "ünïcødé-secret", " spaced out "])
    def test_hash_then_verify(self, password):
        hashed = get_password_hash(password)

        assert hashed != password
        assert verify_password(password, hashed) is True
        assert verify_password(password + "x", hashed) is False

    def test_malformed_hash_is_false(self):
        assert verify_password("password123", "not-a-bcrypt-hash") is False


class TestTokens:
    def test_access_token_claims(self, user):
        payload = decode_access_token(create_access_token(user))

        assert payload["sub"] == "7"
        assert payload["username"] == "alice"
        assert payload["email"] == "alice@archive.io"
        assert payload["role"] == "moderator"
        assert payload["iss"] == "article-archiver"

    def test_expired_access_token(self, user):
        token = create_access_token(user, expires_delta=timedelta(seconds=-5))

        with pytest.raises(ExpiredSignatureError):
            decode_access_token(token)

    def test_tampered_token(self, user):
        token = create_access_token(user)
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])

        with pytest.raises(JWTError):
            decode_access_token(tampered)

    def test_refresh_token_is_not_an_access_token(self, user):
        refresh = create_refresh_token(user)

        assert decode_refresh_token(refresh)["type"] == "refresh"
        with pytest.raises(JWTError):
            decode_access_token(refresh)

    def test_access_token_is_not_a_refresh_token(self, user):
        with pytest.raises(JWTError):
            decode_refresh_token(create_access_token(user))


class TestParseDuration:
    @pytest.mark.parametrize("value,expected", [
        ("7d", timedelta(days=7)),
        ("12h", timedelta(hours=12)),
        ("30m", timedelta(minutes=30)),
    ])
    def test_supported_units(self, value, expected):
        assert parse_duration(value) == expected

    @pytest.mark.parametrize("value", ["", "d", "10", "5w", "-1d", "1.5h"])
    def test_unsupported_values(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)


class TestDurationSettings:
    def test_valid_durations_load(self):
        config = Settings(_env_file=None, JWT_EXPIRE="12h", REFRESH_TOKEN_EXPIRE="45m")

        assert parse_duration(config.JWT_EXPIRE) == timedelta(hours=12)
        assert parse_duration(config.REFRESH_TOKEN_EXPIRE) == timedelta(minutes=45)

    @pytest.mark.parametrize("field", ["JWT_EXPIRE", "REFRESH_TOKEN_EXPIRE"])
    @pytest.mark.parametrize("value", ["5w", "1.5h", "d"])
    def test_invalid_durations_fail_at_load(self, field, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})
