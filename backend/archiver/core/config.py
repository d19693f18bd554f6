import os
from datetime import timedelta
from typing import List, Optional
from pydantic import field_validator, ConfigDict
from pydantic_settings import BaseSettings


_DURATION_UNITS = {
    "d": "days",
    "h": "hours",
    "m": "minutes",
}


def parse_duration(value: str) -> timedelta:
    """
    Convert a duration string such as ``7d``, ``12h`` or ``30m`` to a timedelta.
    """
    value = (value or "").strip()
    unit = _DURATION_UNITS.get(value[-1:])
    amount = value[:-1]
    if unit is None or not amount.isdigit():
        raise ValueError(f"Unsupported duration: '{value}'")
    return timedelta(**{unit: int(amount)})


class Settings(BaseSettings):
    # Application settings
    APP_NAME: str = "Article Archiver"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "Web Article Archiving Backend"
    DEBUG: bool = False

    # Database settings
    DATABASE_URL: str
    AUTO_CREATE_TABLES: bool = True

    # Security settings
    SECRET_KEY: str
    JWT_REFRESH_SECRET: Optional[str] = None
    ALGORITHM: str = "HS256"
    JWT_EXPIRE: str = "7d"
    REFRESH_TOKEN_EXPIRE: str = "30d"
    JWT_ISSUER: str = "article-archiver"
    JWT_AUDIENCE: str = "article-archiver-users"
    JWT_REFRESH_AUDIENCE: str = "article-archiver-refresh"
    BCRYPT_SALT_ROUNDS: int = 12

    # CORS settings
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]
    ALLOW_ALL_ORIGINS: bool = False  # 外部访问模式开关

    # Logging
    LOG_LEVEL: str = "INFO"

    @field_validator("DATABASE_URL")
    def validate_database_url(cls, v: Optional[str]) -> str:
        if not v:
            raise ValueError("DATABASE_URL must be set")
        return v

    @field_validator("SECRET_KEY")
    def validate_secret_key(cls, v: Optional[str]) -> str:
        if not v or v == "your-secret-key-here":
            if os.environ.get("DEBUG", "false").lower() == "true":
                return "debug-secret-key-not-secure"
            raise ValueError("SECRET_KEY must be set in production")
        return v

    @field_validator("JWT_EXPIRE", "REFRESH_TOKEN_EXPIRE")
    def validate_duration(cls, v: str) -> str:
        # 只支持 d/h/m 后缀，例如 7d、12h、30m
        parse_duration(v)
        return v

    @field_validator("BCRYPT_SALT_ROUNDS")
    def validate_salt_rounds(cls, v: int) -> int:
        # bcrypt 的 cost 取值范围为 4-31
        if v < 4 or v > 31:
            raise ValueError("BCRYPT_SALT_ROUNDS must be between 4 and 31")
        return v

    @property
    def refresh_secret(self) -> str:
        return self.JWT_REFRESH_SECRET or self.SECRET_KEY

    @property
    def cors_origins(self) -> List[str]:
        """获取实际应用的CORS来源配置"""
        if self.ALLOW_ALL_ORIGINS or os.environ.get("ALLOW_ALL_ORIGINS", "").lower() == "true":
            return ["*"]
        return self.CORS_ORIGINS

    model_config = ConfigDict(
        env_file=".env",
        case_sensitive=True
    )


settings = Settings()
