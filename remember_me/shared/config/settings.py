# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import re
import sys
from datetime import timedelta
from functools import lru_cache
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_RELATIVE_RE = re.compile(
    r"^\s*\+?\s*(?P<amount>\d+)\s*(?P<unit>second|minute|hour|day|week)s?\s*$",
    re.IGNORECASE,
)


def parse_relative_delta(value: str) -> timedelta:
    """Parse strings such as ``+30 days`` or ``12 hours`` into a timedelta."""
    match = _RELATIVE_RE.match(value)
    if not match:
        raise ValueError(f"unsupported relative time: {value!r}")
    amount = int(match.group("amount"))
    unit = match.group("unit").lower()
    return timedelta(**{f"{unit}s": amount})


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite:///app.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", validate_by_name=True
    )


class FieldsConfig(BaseModel):
    username: str = "username"
    token: str = "login_cookie"

    model_config = ConfigDict(frozen=True)


class CookieConfig(BaseModel):
    name: str = Field("rememberMe", min_length=1)
    expires: timedelta = timedelta(days=30)
    secure: bool = False
    http_only: bool = True
    samesite: Literal["Strict", "Lax", "None"] | None = "Lax"
    path: str = "/"
    domain: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("expires", mode="before")
    @classmethod
    def _parse_expires(cls, value: Any) -> Any:
        if isinstance(value, str) and _RELATIVE_RE.match(value):
            return parse_relative_delta(value)
        return value

    @field_validator("expires")
    @classmethod
    def _positive_expires(cls, value: timedelta) -> timedelta:
        if value <= timedelta(0):
            raise ValueError("cookie expiry must be in the future")
        return value

    @model_validator(mode="after")
    def _samesite_none_requires_secure(self) -> "CookieConfig":
        if self.samesite == "None" and not self.secure:
            raise ValueError("SameSite=None cookies must be marked secure")
        return self


class RememberMeConfig(BaseSettings):
    """Cookie authenticator settings, read from ``REMEMBER_ME_*`` variables.

    Nested values use a double underscore, e.g. ``REMEMBER_ME_COOKIE__SECURE=1``.
    """

    fields: FieldsConfig = Field(default_factory=FieldsConfig)
    input_key: str = Field("remember_me", min_length=1)
    cookie: CookieConfig = Field(default_factory=CookieConfig)
    user_model: str = "User"
    scope: dict[str, Any] = Field(default_factory=dict)
    contain: list[str] | None = None
    hash_method: str = "scrypt"
    invalidate_on_logout: bool = True
    clear_on_denied: bool = True

    model_config = SettingsConfigDict(
        env_prefix="REMEMBER_ME_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )


def _database_config_factory() -> DatabaseConfig:
    return DatabaseConfig()  # type: ignore[call-arg]


def _remember_me_config_factory() -> RememberMeConfig:
    return RememberMeConfig()


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    secret_key: str = Field("dev", alias="SECRET_KEY")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")

    database: DatabaseConfig = Field(default_factory=_database_config_factory)
    remember_me: RememberMeConfig = Field(default_factory=_remember_me_config_factory)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_by_name=True,
        validate_assignment=True,
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        if isinstance(value, str):
            return value.lower() in ("1", "true", "yes")
        return bool(value)

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "AppConfig":
        if not self.is_production():
            return self

        if self.secret_key in ("dev", "development", "test", ""):
            print(
                "\n❌ CRITICAL SECURITY ERROR: Insecure SECRET_KEY detected in production!\n"
                "   Remember-me cookies are encrypted with SECRET_KEY.\n"
                "   Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\"\n",
                file=sys.stderr,
            )
            sys.exit(1)

        warnings = []
        if not self.remember_me.cookie.secure:
            warnings.append("⚠️  Remember-me cookie Secure flag is DISABLED (use HTTPS!)")
        if not self.remember_me.cookie.http_only:
            warnings.append("⚠️  Remember-me cookie is readable from JavaScript")
        if not self.remember_me.invalidate_on_logout:
            warnings.append("⚠️  Logout does not invalidate stored remember-me tokens")

        if warnings:
            print("\n⚠️  PRODUCTION SECURITY WARNINGS:", file=sys.stderr)
            for warning in warnings:
                print(f"   {warning}", file=sys.stderr)
            print(
                "   Consider enabling these security features in production.\n",
                file=sys.stderr,
            )

        return self

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()  # type: ignore[call-arg]


__all__ = [
    "AppConfig",
    "CookieConfig",
    "DatabaseConfig",
    "FieldsConfig",
    "RememberMeConfig",
    "load_config",
    "parse_relative_delta",
]
